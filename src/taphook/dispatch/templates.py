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

"""Dispatch template strategies.

Each template knows how to turn a classified target set into a
DispatchPlan for one invocation style. Templates differ in how tap return
values steer the dispatch:

- series: run every tap in order
- bail: stop at the first non-None result
- waterfall: thread non-None results through the first argument
- loop: restart from the first tap on any non-None result
- parallel: start every tap at once (callback and deferred styles only)
"""

from __future__ import annotations

from abc import ABC
from typing import Sequence

from taphook.dispatch.plan import DispatchPlan, DispatchSpec, PlanStep, ResultPolicy
from taphook.hooks.base import (
    Classification,
    InvocationStyle,
    TapType,
    UnsupportedInvocationError,
)


class DispatchTemplate(ABC):
    """Base class for template strategies.

    Subclasses pick a result policy and may restrict which invocation
    styles or parameter lists they support.
    """

    name: str = ""
    policy: ResultPolicy = ResultPolicy.IGNORE
    fan_out: bool = False
    supported_styles: frozenset[InvocationStyle] = frozenset(InvocationStyle)

    def validate_params(self, params: Sequence[str]) -> None:
        """Check the hook's parameter list at construction time.

        Raises:
            ValueError: If the template cannot work with these parameters.
        """
        return None

    def generate_dispatch(self, spec: DispatchSpec) -> DispatchPlan:
        """Produce the dispatch plan for a classified target set.

        Raises:
            UnsupportedInvocationError: If the style is not supported by
                this template, or a sync dispatch would have to wait on
                async or promise taps.
        """
        if spec.style not in self.supported_styles:
            raise UnsupportedInvocationError(
                f"{spec.style.value} invocation is not supported by "
                f"{self.name or type(self).__name__} hooks"
            )

        steps = self._build_steps(spec)
        if spec.style is InvocationStyle.SYNC:
            waiting = [s.label for s in steps if s.kind is not TapType.SYNC]
            if waiting:
                raise UnsupportedInvocationError(
                    f"call() cannot wait on async or promise taps "
                    f"({', '.join(waiting)}); use call_async() or promise()"
                )

        return DispatchPlan(
            style=spec.style,
            params=spec.params,
            steps=steps,
            classification=spec.classification,
            policy=self.policy,
            fan_out=self.fan_out,
            call_interceptors=tuple(i.call for i in spec.interceptors),
            loop_interceptors=tuple(i.loop for i in spec.interceptors),
        )

    def _build_steps(self, spec: DispatchSpec) -> tuple[PlanStep, ...]:
        classification = spec.classification
        if classification is Classification.NONE:
            return ()
        if classification.is_single:
            return (PlanStep(kind=classification.tap_type, fn=spec.targets),)
        if classification.is_uniform:
            kind = classification.tap_type
            return tuple(PlanStep(kind=kind, fn=fn) for fn in spec.targets)
        # mixed / intercepted: full tap records
        return tuple(
            PlanStep(kind=tap.type, fn=tap.fn, tap=tap) for tap in spec.targets
        )


class SeriesTemplate(DispatchTemplate):
    """Run every tap in order; the dispatch result is None."""

    name = "series"


class BailTemplate(DispatchTemplate):
    """Stop at, and return, the first non-None tap result."""

    name = "bail"
    policy = ResultPolicy.BAIL


class WaterfallTemplate(DispatchTemplate):
    """Pass each non-None result on as the first argument of the next tap."""

    name = "waterfall"
    policy = ResultPolicy.WATERFALL

    def validate_params(self, params: Sequence[str]) -> None:
        if len(params) < 1:
            raise ValueError("Waterfall hooks must have at least one parameter")


class LoopTemplate(DispatchTemplate):
    """Re-run from the first tap until a full pass returns only None."""

    name = "loop"
    policy = ResultPolicy.LOOP


class ParallelTemplate(DispatchTemplate):
    """Start every tap together and complete once all have finished."""

    name = "parallel"
    fan_out = True
    supported_styles = frozenset({InvocationStyle.ASYNC, InvocationStyle.PROMISE})


TEMPLATES: dict[str, type[DispatchTemplate]] = {
    "series": SeriesTemplate,
    "bail": BailTemplate,
    "waterfall": WaterfallTemplate,
    "loop": LoopTemplate,
    "parallel": ParallelTemplate,
}

DEFAULT_TEMPLATE = "series"


def get_template(name: str) -> DispatchTemplate:
    """Get a template strategy by name.

    Args:
        name: One of "series", "bail", "waterfall", "loop", "parallel"

    Returns:
        DispatchTemplate instance

    Raises:
        ValueError: If the template name is unknown
    """
    template_class = TEMPLATES.get(name)
    if template_class is None:
        raise ValueError(
            f"Unknown template: {name}. "
            f"Valid templates: {', '.join(TEMPLATES.keys())}"
        )
    return template_class()
