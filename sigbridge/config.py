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

"""Registry configuration.

A registry is configured in code, from ``SIGBRIDGE_*`` environment variables,
or from a YAML file::

    registry:
      hold_lock_during_emit: false
      on_delegate_error: log
"""

from __future__ import annotations

import enum
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import yaml

ENV_HOLD_LOCK = "SIGBRIDGE_HOLD_LOCK"
ENV_ON_ERROR = "SIGBRIDGE_ON_ERROR"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


class DelegateErrorPolicy(enum.Enum):
    """What ``emit`` does when the invoked delegate raises."""

    PROPAGATE = "propagate"
    LOG = "log"

    @classmethod
    def parse(cls, value: str | DelegateErrorPolicy) -> DelegateErrorPolicy:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(
                f"Invalid on_delegate_error: {value!r} (expected one of {choices})"
            ) from None


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {key}: {value!r}")


@dataclass(frozen=True)
class RegistryConfig:
    """Behavioral knobs of a SignalRegistry.

    Attributes:
        hold_lock_during_emit: Invoke the delegate while still holding the
            table lock. Every other registry call, from any thread, waits
            until the delegate returns.
        on_delegate_error: Whether a delegate failure escapes ``emit`` or is
            logged and swallowed.
    """

    hold_lock_during_emit: bool = False
    on_delegate_error: DelegateErrorPolicy = DelegateErrorPolicy.PROPAGATE

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> RegistryConfig:
        unknown = set(d) - {"hold_lock_during_emit", "on_delegate_error"}
        if unknown:
            raise ValueError(f"Unknown registry config keys: {sorted(unknown)}")
        return cls(
            hold_lock_during_emit=_parse_bool(
                "hold_lock_during_emit", d.get("hold_lock_during_emit", False)
            ),
            on_delegate_error=DelegateErrorPolicy.parse(
                d.get("on_delegate_error", DelegateErrorPolicy.PROPAGATE)
            ),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RegistryConfig:
        env = os.environ if environ is None else environ
        return cls(
            hold_lock_during_emit=_parse_bool(
                ENV_HOLD_LOCK, env.get(ENV_HOLD_LOCK, "")
            ),
            on_delegate_error=DelegateErrorPolicy.parse(
                env.get(ENV_ON_ERROR, DelegateErrorPolicy.PROPAGATE.value)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "hold_lock_during_emit": self.hold_lock_during_emit,
            "on_delegate_error": self.on_delegate_error.value,
        }


def load_config(path: str | os.PathLike[str]) -> RegistryConfig:
    """Load a RegistryConfig from a YAML file.

    The settings may sit at the top level or under a ``registry`` key. An
    empty file yields the defaults.
    """
    with open(path, encoding="utf-8") as f:
        conf = yaml.safe_load(f) or {}
    if not isinstance(conf, dict):
        raise ValueError(f"Config must be a mapping, got {type(conf).__name__}")
    if "registry" in conf:
        conf = conf["registry"] or {}
        if not isinstance(conf, dict):
            raise ValueError("Config 'registry' section must be a mapping")
    return RegistryConfig.from_dict(conf)
