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

"""Process-wide signal registry and the boundary functions built on it.

Both sides of the boundary call the module-level functions below; they all
resolve to the same registry instance. The instance is created on first use,
configured from ``SIGBRIDGE_*`` environment variables, and lives until the
process exits. Callers that want an explicit lifetime construct their own
``SignalRegistry`` and install it with ``set_signal_manager``.
"""

from __future__ import annotations

import threading

from sigbridge.config import RegistryConfig
from sigbridge.logging_config import get_logger
from sigbridge.registry import Delegate, DelegateId, SignalRegistry

logger = get_logger(__name__)

_MANAGER: SignalRegistry | None = None
_MANAGER_LOCK = threading.Lock()


def get_signal_manager() -> SignalRegistry:
    """Return the process-wide registry, creating it on first call."""
    manager = _MANAGER
    if manager is not None:
        return manager
    return _create_manager()


def _create_manager() -> SignalRegistry:
    global _MANAGER
    with _MANAGER_LOCK:
        if _MANAGER is None:
            _MANAGER = SignalRegistry(RegistryConfig.from_env())
            logger.debug(f"Created process-wide {_MANAGER!r}")
        return _MANAGER


def set_signal_manager(registry: SignalRegistry | None) -> SignalRegistry | None:
    """Install ``registry`` as the process-wide instance.

    Passing None drops the current instance so that the next
    ``get_signal_manager`` call builds a fresh one. Delegates registered on
    the replaced instance stay there; they are not migrated.

    Returns:
        The previously installed registry, or None if none was created yet.
    """
    global _MANAGER
    if registry is not None and not isinstance(registry, SignalRegistry):
        raise TypeError(
            f"registry must be a SignalRegistry, got {type(registry).__name__}"
        )
    with _MANAGER_LOCK:
        previous = _MANAGER
        _MANAGER = registry
    return previous


def register_delegate(id: DelegateId, delegate: Delegate) -> None:
    get_signal_manager().register_delegate(id, delegate)


def unregister_delegate(id: DelegateId) -> None:
    get_signal_manager().unregister_delegate(id)


def emit(id: DelegateId, signal_name: str) -> None:
    get_signal_manager().emit(id, signal_name)
