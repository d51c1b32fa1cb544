# Copyright 2026 Pennyworth Technologies, Inc.
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

"""Bound hook handles that inject default registration options."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from taphook.hooks.base import TapOptions

if TYPE_CHECKING:
    from taphook.hooks.hook import Hook


class BoundHook:
    """A view of one Hook whose registrations get default options.

    Registrations made through the handle land on the underlying hook;
    the handle keeps no taps of its own. Rebinding a handle produces
    another handle over the same underlying hook, never a chain.

    Example:
        early = hook.with_defaults({"stage": -10})
        early.tap("setup", setup_fn)  # same as stage=-10
        early.tap({"name": "late", "stage": 5}, fn)  # explicit stage wins
    """

    def __init__(self, hook: "Hook", defaults: TapOptions):
        self._hook = hook
        self._defaults = defaults

    @property
    def hook(self) -> "Hook":
        """The underlying hook all registrations go to."""
        return self._hook

    @property
    def defaults(self) -> TapOptions:
        return self._defaults

    def tap(self, options: Any, fn: Callable[..., Any] | None = None) -> Any:
        return self._hook.tap(self._merge(options, "tap"), fn)

    def tap_async(self, options: Any, fn: Callable[..., Any] | None = None) -> Any:
        return self._hook.tap_async(self._merge(options, "tap_async"), fn)

    def tap_promise(self, options: Any, fn: Callable[..., Any] | None = None) -> Any:
        return self._hook.tap_promise(self._merge(options, "tap_promise"), fn)

    def with_defaults(self, options: Any) -> "BoundHook":
        """Bind further defaults; values already bound here take precedence."""
        extra = TapOptions.coerce(options, "with_defaults")
        return BoundHook(self._hook, self._defaults.merged_over(extra))

    def _merge(self, options: Any, method: str) -> TapOptions:
        return TapOptions.coerce(options, method).merged_over(self._defaults)

    def __getattr__(self, name: str) -> Any:
        # Everything that is not a registration method reads from the hook.
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._hook, name)

    def __repr__(self) -> str:
        return f"BoundHook({self._hook!r}, defaults={self._defaults.to_dict(exclude_none=True)})"
