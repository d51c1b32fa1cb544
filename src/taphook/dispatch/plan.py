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

"""Dispatch specs and plans.

A DispatchSpec is what the compiler hands to a template: the current
targets and the shape they were classified as. A DispatchPlan is what the
template hands back: ordered typed steps, a result policy, and the
interceptor hook points. The runtime turns a plan into a callable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from taphook.hooks.base import Classification, InvocationStyle, Tap, TapType
from taphook.hooks.interceptors import Interceptor


class ResultPolicy(str, Enum):
    """How tap return values steer a dispatch."""

    IGNORE = "ignore"  # run every tap, result is None
    BAIL = "bail"  # first non-None result ends the dispatch
    WATERFALL = "waterfall"  # non-None result replaces the first argument
    LOOP = "loop"  # non-None result restarts from the first tap


@dataclass(frozen=True)
class DispatchSpec:
    """Input to a template strategy."""

    targets: Any  # one handler, a tuple of handlers, or a tuple of taps
    classification: Classification
    style: InvocationStyle
    params: tuple[str, ...]
    interceptors: tuple[Interceptor, ...] = ()


@dataclass(frozen=True)
class PlanStep:
    """One tap invocation in a plan."""

    kind: TapType
    fn: Callable[..., Any]
    tap: Tap | None = None

    @property
    def label(self) -> str:
        if self.tap is not None:
            return self.tap.name
        return getattr(self.fn, "__qualname__", repr(self.fn))


@dataclass(frozen=True)
class DispatchPlan:
    """Structured dispatch logic produced by a template."""

    style: InvocationStyle
    params: tuple[str, ...]
    steps: tuple[PlanStep, ...]
    classification: Classification
    policy: ResultPolicy = ResultPolicy.IGNORE
    fan_out: bool = False
    call_interceptors: tuple[Callable[..., Any], ...] = ()
    loop_interceptors: tuple[Callable[..., Any], ...] = ()

    @property
    def step_kinds(self) -> set[TapType]:
        return {step.kind for step in self.steps}

    @property
    def is_intercepted(self) -> bool:
        return bool(self.call_interceptors or self.loop_interceptors)

    def describe(self) -> dict[str, Any]:
        """Summarize the plan for diagnostics output."""
        return {
            "style": self.style.value,
            "classification": self.classification.value,
            "policy": self.policy.value,
            "fan_out": self.fan_out,
            "steps": [
                {"label": step.label, "kind": step.kind.value} for step in self.steps
            ],
            "interceptors": len(self.call_interceptors),
        }
