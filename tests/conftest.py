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

import pytest

import sigbridge
from sigbridge import SignalRegistry


@pytest.fixture
def registry():
    """A fresh, isolated registry with default config."""
    return SignalRegistry()


@pytest.fixture(autouse=True)
def reset_signal_manager(monkeypatch):
    """Give every test a clean process-wide registry and environment."""
    monkeypatch.delenv("SIGBRIDGE_HOLD_LOCK", raising=False)
    monkeypatch.delenv("SIGBRIDGE_ON_ERROR", raising=False)
    previous = sigbridge.set_signal_manager(None)
    yield
    sigbridge.set_signal_manager(previous)


class Recorder:
    """Delegate that records every signal name it receives."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def __call__(self, signal_name: str) -> None:
        self.calls.append(signal_name)


@pytest.fixture
def recorder():
    return Recorder
