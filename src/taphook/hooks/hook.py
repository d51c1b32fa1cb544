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

"""The Hook facade: registration, interception and the entry points."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Sequence

from taphook.hooks.base import (
    Classification,
    InvocationStyle,
    Tap,
    TapOptions,
    TapType,
)
from taphook.hooks.binder import BoundHook
from taphook.hooks.compiler import CompileDiagnostics, DispatchCompiler
from taphook.hooks.interceptors import Interceptor, InterceptorChain
from taphook.hooks.registry import TapRegistry

if TYPE_CHECKING:
    from taphook.dispatch.templates import DispatchTemplate

logger = logging.getLogger(__name__)


def _normalize_params(params: Any) -> tuple[str, ...]:
    """Parameter names as a tuple; anything but a list or tuple means none.

    Raises:
        ValueError: If a name is not an identifier or appears twice.
    """
    if not isinstance(params, (list, tuple)):
        return ()
    for name in params:
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"Hook parameter names must be identifiers, got {name!r}")
    if len(set(params)) != len(params):
        raise ValueError(f"Duplicate hook parameter names in {list(params)}")
    return tuple(params)


class Hook:
    """A named extension point that plugins tap into.

    Taps are kept in resolved order (stage, then before constraints) and
    dispatched through one of three entry points:

    - call(*args): sync taps only, returns the template's result
    - call_async(*args, callback): calls callback(error, result) when done
    - promise(*args): returns a coroutine resolving to the result

    The dispatcher for each entry point is compiled on first use and
    reused until the next tap or interceptor registration.

    Example:
        hook = Hook(["compilation"])
        hook.tap("Logger", lambda compilation: print(compilation))
        hook.tap({"name": "Setup", "stage": -10}, setup)
        hook.call(compilation)
    """

    template_name: str = "series"

    def __init__(
        self,
        params: Sequence[str] | None = None,
        template: DispatchTemplate | str | None = None,
    ):
        """Initialize the hook.

        Args:
            params: Names of the arguments every entry point accepts.
            template: Template strategy or registered template name.
                Defaults to the class's template_name.
        """
        from taphook.dispatch.templates import get_template

        self._params = _normalize_params(params)
        if template is None:
            template = self.template_name
        if isinstance(template, str):
            template = get_template(template)
        template.validate_params(self._params)

        self._registry = TapRegistry()
        self._interceptors = InterceptorChain()
        self._compiler = DispatchCompiler(
            self._registry, self._interceptors, self._params, template
        )

    # ── Entry points ──────────────────────────────────────────────

    def call(self, *args, **kwargs) -> Any:
        return self._compiler.entry_point(InvocationStyle.SYNC)(*args, **kwargs)

    def call_async(self, *args, **kwargs) -> None:
        return self._compiler.entry_point(InvocationStyle.ASYNC)(*args, **kwargs)

    def promise(self, *args, **kwargs) -> Any:
        return self._compiler.entry_point(InvocationStyle.PROMISE)(*args, **kwargs)

    # ── Registration ──────────────────────────────────────────────

    def tap(self, options: Any, fn: Callable[..., Any] | None = None) -> Any:
        """Register a sync tap.

        Args:
            options: Tap name, options mapping, or TapOptions. Mapping
                keys other than name/stage/before are kept as metadata.
            fn: Handler taking the hook's parameters. When omitted, a
                decorator is returned instead.

        Raises:
            TapValidationError: If options has the wrong type or the
                resolved name is missing or empty.
        """
        return self._register(options, fn, TapType.SYNC, "tap")

    def tap_async(self, options: Any, fn: Callable[..., Any] | None = None) -> Any:
        """Register a tap that completes through a trailing callback."""
        return self._register(options, fn, TapType.ASYNC, "tap_async")

    def tap_promise(self, options: Any, fn: Callable[..., Any] | None = None) -> Any:
        """Register a tap that returns an awaitable."""
        return self._register(options, fn, TapType.PROMISE, "tap_promise")

    def intercept(self, interceptor: Any) -> Interceptor:
        """Register an interceptor with any subset of call/loop/tap."""
        record = Interceptor.from_spec(interceptor)
        self._compiler.reset()
        return self._interceptors.register(record)

    def with_defaults(self, options: Any) -> BoundHook:
        """Return a handle whose registrations default to options."""
        return BoundHook(self, TapOptions.coerce(options, "with_defaults"))

    def _register(
        self,
        options: Any,
        fn: Callable[..., Any] | None,
        tap_type: TapType,
        method: str,
    ) -> Any:
        resolved = TapOptions.coerce(options, method)
        if fn is None:
            resolved.require_name(method)

            def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
                self._insert(Tap.from_options(resolved, tap_type, handler, method))
                return handler

            return decorator
        self._insert(Tap.from_options(resolved, tap_type, fn, method))
        return None

    def _insert(self, tap: Tap) -> None:
        self._compiler.reset()
        self._registry.insert(tap)

    # ── Introspection ─────────────────────────────────────────────

    def is_used(self) -> bool:
        return len(self._registry) > 0 or len(self._interceptors) > 0

    def classify(self) -> Classification:
        return self._compiler.classify()

    def get_dispatch_targets(self) -> Any:
        return self._compiler.get_dispatch_targets()

    def compile_state(self, style: InvocationStyle | str) -> str:
        """Return "pending" or "compiled" for an invocation style."""
        return self._compiler.state(InvocationStyle(style))

    @property
    def taps(self) -> tuple[Tap, ...]:
        return self._registry.taps

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._interceptors.interceptors

    @property
    def params(self) -> tuple[str, ...]:
        return self._params

    @property
    def template(self) -> DispatchTemplate:
        return self._compiler.template

    @property
    def diagnostics(self) -> CompileDiagnostics:
        return self._compiler.diagnostics

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(params={list(self._params)}, "
            f"taps={self._registry.names()})"
        )


class SeriesHook(Hook):
    """Runs every tap in order."""

    template_name = "series"


class BailHook(Hook):
    """Returns the first non-None tap result."""

    template_name = "bail"


class WaterfallHook(Hook):
    """Threads tap results through the first argument."""

    template_name = "waterfall"


class LoopHook(Hook):
    """Repeats from the first tap until every tap returns None."""

    template_name = "loop"


class ParallelHook(Hook):
    """Starts all taps together; call() is not supported."""

    template_name = "parallel"
