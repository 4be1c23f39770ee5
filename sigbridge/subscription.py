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

"""Host-side helper tying a registration to the lifetime of an owner object.

The host side usually registers when one of its objects is created (or
mounted) and unregisters when it is destroyed. ``Subscription`` does that
bookkeeping: the id is derived from the owner, and the entry is removed on
``close()``, on leaving a ``with`` block, or when the owner is collected.

Example:
    >>> class Widget:
    ...     def __init__(self):
    ...         self.seen = []
    ...
    ...     def on_signal(self, name):
    ...         self.seen.append(name)
    >>> w = Widget()
    >>> with listen(w, w.on_signal) as sub:
    ...     sub.registry.emit(sub.id, "ready")
    >>> w.seen
    ['ready']
"""

from __future__ import annotations

import inspect
import weakref
from typing import Any

from sigbridge.manager import get_signal_manager
from sigbridge.registry import Delegate, DelegateId, SignalRegistry


def owner_id(owner: Any) -> DelegateId:
    """Default identifier for an owner object: its ``id()``."""
    return DelegateId(id(owner))


def _weak_delegate(owner: Any, delegate: Delegate) -> Delegate:
    # A bound method of the owner would keep the owner alive from inside the
    # registry; hold it weakly so collection of the owner still unregisters.
    if inspect.ismethod(delegate) and delegate.__self__ is owner:
        ref = weakref.WeakMethod(delegate)

        def call(signal_name: str) -> None:
            method = ref()
            if method is not None:
                method(signal_name)

        return call
    return delegate


class Subscription:
    """Registration of ``delegate`` under the id of ``owner``.

    Args:
        owner: Host-side object whose lifetime bounds the registration.
        delegate: Callable receiving the signal name.
        registry: Registry to use; defaults to the process-wide one.
    """

    def __init__(
        self,
        owner: Any,
        delegate: Delegate,
        *,
        registry: SignalRegistry | None = None,
    ) -> None:
        if not callable(delegate):
            raise TypeError(
                f"delegate must be callable, got {type(delegate).__name__}"
            )
        self._registry = registry if registry is not None else get_signal_manager()
        self._id = owner_id(owner)
        self._owner_ref: weakref.ref[Any] | None
        # Strong reference for owners without __weakref__ (ints, tuples,
        # slotted classes): the id must stay theirs while this object lives.
        self._owner: Any = None
        try:
            self._owner_ref = weakref.ref(owner)
        except TypeError:
            self._owner_ref = None
            self._owner = owner
        self._delegate = (
            _weak_delegate(owner, delegate) if self._owner_ref is not None else delegate
        )
        self._finalizer: weakref.finalize | None = None

    @property
    def id(self) -> DelegateId:
        return self._id

    @property
    def registry(self) -> SignalRegistry:
        return self._registry

    @property
    def active(self) -> bool:
        return self._finalizer is not None and self._finalizer.alive

    def subscribe(self) -> Subscription:
        """Register the delegate. Calling it again re-registers.

        Raises:
            ReferenceError: The owner has already been collected; its id may
                belong to another object by now.
        """
        owner = None
        if self._owner_ref is not None:
            owner = self._owner_ref()
            if owner is None:
                raise ReferenceError(
                    f"owner of subscription id={self._id} no longer exists"
                )
        self._registry.register_delegate(self._id, self._delegate)
        if self.active:
            return self
        if owner is not None:
            self._finalizer = weakref.finalize(
                owner, self._registry.unregister_delegate, self._id
            )
        else:
            # Strongly held owner: the entry lives as long as this object.
            self._finalizer = weakref.finalize(
                self, self._registry.unregister_delegate, self._id
            )
        return self

    def close(self) -> None:
        """Unregister the delegate. Safe to call more than once."""
        if self._finalizer is None:
            return
        finalizer, self._finalizer = self._finalizer, None
        # Runs unregister_delegate at most once, whoever gets there first.
        finalizer()

    def __enter__(self) -> Subscription:
        if not self.active:
            self.subscribe()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "active" if self.active else "closed"
        return f"Subscription(id={self._id}, {state})"


def listen(
    owner: Any, delegate: Delegate, *, registry: SignalRegistry | None = None
) -> Subscription:
    """Create a Subscription for ``owner`` and register it right away."""
    return Subscription(owner, delegate, registry=registry).subscribe()
