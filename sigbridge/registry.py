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

"""Signal registry shared by both sides of a runtime boundary.

The core side only knows an opaque numeric id and calls ``emit(id, name)``.
The host side registers a delegate for that id and removes it when the
owning object goes away. Neither side holds references to the other's
callables; the registry is the only point of indirection.

Concurrency:
    All operations run on the caller's thread and are atomic under a single
    table lock. By default the delegate is invoked after the lock has been
    released, so a delegate may call back into the registry and a slow
    delegate does not stall other threads. The consequence is that a
    delegate unregistered concurrently with an ``emit`` may still run once
    for that ``emit``.

    ``RegistryConfig(hold_lock_during_emit=True)`` keeps the lock across the
    invocation instead. The lock is reentrant, so the delegate's own thread
    can still re-enter, but every other thread blocks until it returns.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import NewType

from sigbridge.config import DelegateErrorPolicy, RegistryConfig
from sigbridge.logging_config import get_logger

logger = get_logger(__name__)

# Opaque caller-chosen handle; uniqueness is the caller's responsibility.
DelegateId = NewType("DelegateId", int)

Delegate = Callable[[str], None]


class SignalRegistry:
    """Thread-safe table of ``DelegateId -> Delegate``.

    At most one delegate is associated with an id. Registering again under
    the same id replaces the previous delegate. Unknown ids are never an
    error: ``unregister_delegate`` and ``emit`` are silent no-ops for them.

    Example:
        >>> log = []
        >>> reg = SignalRegistry()
        >>> reg.register_delegate(DelegateId(42), log.append)
        >>> reg.emit(DelegateId(42), "ready")
        >>> reg.unregister_delegate(DelegateId(42))
        >>> reg.emit(DelegateId(42), "ready")
        >>> log
        ['ready']
    """

    def __init__(self, config: RegistryConfig | None = None) -> None:
        self._config = config or RegistryConfig()
        self._delegates: dict[DelegateId, Delegate] = {}
        self._lock = threading.RLock()

    @property
    def config(self) -> RegistryConfig:
        return self._config

    def register_delegate(self, id: DelegateId, delegate: Delegate) -> None:
        """Associate ``delegate`` with ``id``, replacing any previous one."""
        if not callable(delegate):
            raise TypeError(
                f"delegate must be callable, got {type(delegate).__name__}"
            )
        with self._lock:
            replaced = id in self._delegates
            self._delegates[id] = delegate
        if replaced:
            logger.debug(f"Replaced delegate for id={id}")
        else:
            logger.debug(f"Registered delegate for id={id}")

    def unregister_delegate(self, id: DelegateId) -> None:
        """Remove the delegate for ``id``; does nothing if none is registered."""
        with self._lock:
            removed = self._delegates.pop(id, None)
        if removed is not None:
            logger.debug(f"Unregistered delegate for id={id}")

    def emit(self, id: DelegateId, signal_name: str) -> None:
        """Invoke the delegate registered for ``id`` with ``signal_name``.

        The delegate runs synchronously on the calling thread. Emitting to an
        id nobody listens on is a no-op.
        """
        if self._config.hold_lock_during_emit:
            with self._lock:
                delegate = self._delegates.get(id)
                if delegate is not None:
                    self._invoke(id, delegate, signal_name)
            return

        with self._lock:
            delegate = self._delegates.get(id)
        if delegate is not None:
            self._invoke(id, delegate, signal_name)

    def _invoke(self, id: DelegateId, delegate: Delegate, signal_name: str) -> None:
        if self._config.on_delegate_error is DelegateErrorPolicy.PROPAGATE:
            delegate(signal_name)
            return
        try:
            delegate(signal_name)
        except Exception:
            logger.exception(f"Delegate for id={id} failed on signal '{signal_name}'")

    def is_registered(self, id: DelegateId) -> bool:
        with self._lock:
            return id in self._delegates

    def registered_ids(self) -> list[DelegateId]:
        """Snapshot of the ids that currently have a delegate."""
        with self._lock:
            return list(self._delegates)

    def __contains__(self, id: object) -> bool:
        with self._lock:
            return id in self._delegates

    def __len__(self) -> int:
        with self._lock:
            return len(self._delegates)

    def __repr__(self) -> str:
        return f"SignalRegistry(delegates={len(self)}, config={self._config})"
