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

"""In-process signal dispatch across a runtime boundary.

    import sigbridge

    # host side
    sigbridge.register_delegate(sigbridge.DelegateId(42), on_signal)

    # core side
    sigbridge.emit(sigbridge.DelegateId(42), "ready")

    # host side, on teardown
    sigbridge.unregister_delegate(sigbridge.DelegateId(42))
"""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("sigbridge")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from sigbridge.config import DelegateErrorPolicy, RegistryConfig, load_config
from sigbridge.logging_config import disable_logging, get_logger, setup_logging
from sigbridge.manager import (
    emit,
    get_signal_manager,
    register_delegate,
    set_signal_manager,
    unregister_delegate,
)
from sigbridge.registry import Delegate, DelegateId, SignalRegistry
from sigbridge.subscription import Subscription, listen, owner_id

__all__ = [
    "Delegate",
    "DelegateErrorPolicy",
    "DelegateId",
    "RegistryConfig",
    "SignalRegistry",
    "Subscription",
    "__version__",
    "disable_logging",
    "emit",
    "get_logger",
    "get_signal_manager",
    "listen",
    "load_config",
    "owner_id",
    "register_delegate",
    "set_signal_manager",
    "setup_logging",
    "unregister_delegate",
]
