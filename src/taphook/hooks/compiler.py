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

"""Lazy compilation of hook entry points.

Each invocation style has one slot. A pending slot holds a thunk that, on
its first call, compiles the dispatcher for that style, installs it in the
slot, and forwards the call. Any tap or interceptor registration resets
all three slots to pending.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from taphook.hooks.base import Classification, InvocationStyle
from taphook.hooks.classifier import classify
from taphook.hooks.interceptors import InterceptorChain
from taphook.hooks.registry import TapRegistry

if TYPE_CHECKING:
    from taphook.dispatch.templates import DispatchTemplate

logger = logging.getLogger(__name__)

PENDING = "pending"
COMPILED = "compiled"


@dataclass
class CompileRecord:
    """Record of a single compilation."""

    style: InvocationStyle
    classification: Classification
    tap_count: int
    interceptor_count: int = 0


class CompileDiagnostics:
    """Tracks compilations of one hook for debugging and visibility."""

    def __init__(self):
        self.records: list[CompileRecord] = []

    def record(
        self,
        style: InvocationStyle,
        classification: Classification,
        tap_count: int,
        interceptor_count: int = 0,
    ) -> None:
        self.records.append(
            CompileRecord(
                style=style,
                classification=classification,
                tap_count=tap_count,
                interceptor_count=interceptor_count,
            )
        )

    def count_for_style(self, style: InvocationStyle) -> int:
        return sum(1 for r in self.records if r.style is style)

    def summary(self) -> str:
        """Generate diagnostic summary.

        Returns:
            Human-readable summary of compilations.
        """
        if not self.records:
            return "No compilations"

        by_style: dict[str, int] = {}
        for rec in self.records:
            by_style[rec.style.value] = by_style.get(rec.style.value, 0) + 1

        by_shape: dict[str, int] = {}
        for rec in self.records:
            by_shape[rec.classification.value] = by_shape.get(rec.classification.value, 0) + 1

        lines = [
            "Compilation Summary",
            f"  Total compilations: {len(self.records)}",
            "",
            "  By invocation style:",
        ]
        for style, count in sorted(by_style.items()):
            lines.append(f"    {style}: {count}")

        lines.append("")
        lines.append("  By classification:")
        for shape, count in sorted(by_shape.items()):
            lines.append(f"    {shape}: {count}")

        return "\n".join(lines)


class DispatchCompiler:
    """Owns the three cached dispatch slots of a hook."""

    def __init__(
        self,
        registry: TapRegistry,
        interceptors: InterceptorChain,
        params: tuple[str, ...],
        template: DispatchTemplate,
    ):
        self._registry = registry
        self._interceptors = interceptors
        self._params = params
        self._template = template
        self._entries: dict[InvocationStyle, Callable[..., Any]] = {}
        self._states: dict[InvocationStyle, str] = {}
        self.diagnostics = CompileDiagnostics()
        self.reset()

    @property
    def template(self) -> DispatchTemplate:
        return self._template

    def classify(self) -> Classification:
        return classify(self._registry.taps, self._interceptors.interceptors)

    def get_dispatch_targets(self, classification: Classification | None = None) -> Any:
        """Select what the template dispatches over.

        Returns a single handler for single-* shapes, a tuple of handlers
        for uniform-* shapes, and full tap records otherwise. Intercepted
        tap records pass through every interceptor's tap transform.
        """
        if classification is None:
            classification = self.classify()
        taps = self._registry.taps

        if classification is Classification.NONE:
            return ()
        if classification.is_single:
            return taps[0].fn
        if classification.is_uniform:
            return tuple(tap.fn for tap in taps)
        if classification is Classification.INTERCEPTED:
            return self._interceptors.transform_taps(taps)
        return taps

    def compile(self, style: InvocationStyle) -> Callable[..., Any]:
        """Compile the dispatcher for one invocation style.

        Template failures are not caught here; they reach whoever
        triggered the compile.
        """
        from taphook.dispatch.plan import DispatchSpec
        from taphook.dispatch.runtime import build_dispatcher

        classification = self.classify()
        spec = DispatchSpec(
            targets=self.get_dispatch_targets(classification),
            classification=classification,
            style=style,
            params=self._params,
            interceptors=self._interceptors.interceptors,
        )
        plan = self._template.generate_dispatch(spec)
        dispatcher = build_dispatcher(plan)

        self.diagnostics.record(
            style=style,
            classification=classification,
            tap_count=len(self._registry),
            interceptor_count=len(self._interceptors),
        )
        logger.debug(
            "Compiled %s dispatcher (%s, %d step(s))",
            style.value, classification.value, len(plan.steps),
        )
        return dispatcher

    def entry_point(self, style: InvocationStyle) -> Callable[..., Any]:
        """Current callable for a style: the lazy thunk or the dispatcher."""
        return self._entries[style]

    def state(self, style: InvocationStyle) -> str:
        return self._states[style]

    def reset(self) -> None:
        """Return every slot to pending."""
        for style in InvocationStyle:
            if self._states.get(style) == COMPILED:
                logger.debug("Invalidated compiled %s dispatcher", style.value)
            self._entries[style] = self._lazy(style)
            self._states[style] = PENDING

    def _lazy(self, style: InvocationStyle) -> Callable[..., Any]:
        def lazy_compile(*args, **kwargs):
            dispatcher = self.compile(style)
            self._entries[style] = dispatcher
            self._states[style] = COMPILED
            return dispatcher(*args, **kwargs)

        return lazy_compile
