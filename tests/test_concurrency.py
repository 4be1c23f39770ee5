# Copyright 2025 Ant Group Co., Ltd.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Randomized multi-threaded exercise of a shared registry."""

import random
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from sigbridge import DelegateId, RegistryConfig, SignalRegistry

NUM_THREADS = 8
OPS_PER_THREAD = 2000
IDS_PER_THREAD = 4


class CountingDelegate:
    def __init__(self, owner: int, slot: int) -> None:
        self.owner = owner
        self.slot = slot
        self.count = 0
        self._lock = threading.Lock()

    def __call__(self, signal_name: str) -> None:
        assert signal_name in (f"sig-{self.owner}-{self.slot}", "broadcast")
        with self._lock:
            self.count += 1


@pytest.mark.stress
@pytest.mark.parametrize("hold_lock", [False, True])
def test_table_matches_last_operation_per_id(hold_lock):
    registry = SignalRegistry(RegistryConfig(hold_lock_during_emit=hold_lock))
    all_ids = [
        DelegateId(t * 100 + s)
        for t in range(NUM_THREADS)
        for s in range(IDS_PER_THREAD)
    ]

    def worker(t: int) -> dict[DelegateId, CountingDelegate | None]:
        rng = random.Random(1234 + t)
        # Each thread mutates only its own ids, so their final state is known;
        # emits go to any id to interleave with other threads' mutations.
        last: dict[DelegateId, CountingDelegate | None] = {}
        for _ in range(OPS_PER_THREAD):
            op = rng.random()
            slot = rng.randrange(IDS_PER_THREAD)
            own = DelegateId(t * 100 + slot)
            if op < 0.35:
                d = CountingDelegate(t, slot)
                registry.register_delegate(own, d)
                last[own] = d
            elif op < 0.55:
                registry.unregister_delegate(own)
                last[own] = None
            elif op < 0.8:
                registry.emit(own, f"sig-{t}-{slot}")
            else:
                registry.emit(rng.choice(all_ids), "broadcast")
        return last

    with ThreadPoolExecutor(max_workers=NUM_THREADS) as pool:
        results = list(pool.map(worker, range(NUM_THREADS)))

    expected = {
        id_: d for last in results for id_, d in last.items() if d is not None
    }
    assert sorted(registry.registered_ids()) == sorted(expected)
    # The surviving delegate for each id is the one registered last.
    for id_, d in expected.items():
        before = d.count
        registry.emit(id_, "broadcast")
        assert d.count == before + 1


@pytest.mark.stress
def test_concurrent_emit_invokes_exactly_once_per_call():
    registry = SignalRegistry()
    d = CountingDelegate(0, 0)
    registry.register_delegate(DelegateId(0), d)
    calls_per_thread = 5000

    def emitter(_: int) -> None:
        for _ in range(calls_per_thread):
            registry.emit(DelegateId(0), "sig-0-0")

    with ThreadPoolExecutor(max_workers=NUM_THREADS) as pool:
        list(pool.map(emitter, range(NUM_THREADS)))

    assert d.count == NUM_THREADS * calls_per_thread


@pytest.mark.stress
def test_no_delivery_after_unregister_returns_when_holding_lock():
    # With the lock held across invocation, once unregister_delegate returns
    # no emit can be running the delegate or fetch it again.
    registry = SignalRegistry(RegistryConfig(hold_lock_during_emit=True))
    stop = threading.Event()
    unregistered = threading.Event()
    delivered = threading.Event()
    late: list[str] = []

    def delegate(name: str) -> None:
        delivered.set()
        if unregistered.is_set():
            late.append(name)

    def emitter() -> None:
        while not stop.is_set():
            registry.emit(DelegateId(5), "tick")

    registry.register_delegate(DelegateId(5), delegate)
    threads = [threading.Thread(target=emitter) for _ in range(4)]
    for t in threads:
        t.start()
    assert delivered.wait(timeout=5)

    registry.unregister_delegate(DelegateId(5))
    unregistered.set()
    stop.wait(0.05)
    stop.set()
    for t in threads:
        t.join(timeout=5)

    assert late == []
    assert not registry.is_registered(DelegateId(5))
