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

"""Dispatch strategies for hooks.

Templates turn a classified tap set into a DispatchPlan; the runtime
turns a plan into the callable installed as a hook entry point.
"""

from taphook.dispatch.plan import (
    DispatchPlan,
    DispatchSpec,
    PlanStep,
    ResultPolicy,
)
from taphook.dispatch.runtime import build_dispatcher
from taphook.dispatch.templates import (
    DEFAULT_TEMPLATE,
    TEMPLATES,
    BailTemplate,
    DispatchTemplate,
    LoopTemplate,
    ParallelTemplate,
    SeriesTemplate,
    WaterfallTemplate,
    get_template,
)

__all__ = [
    # Plans
    "DispatchPlan",
    "DispatchSpec",
    "PlanStep",
    "ResultPolicy",
    # Runtime
    "build_dispatcher",
    # Templates
    "DEFAULT_TEMPLATE",
    "TEMPLATES",
    "BailTemplate",
    "DispatchTemplate",
    "LoopTemplate",
    "ParallelTemplate",
    "SeriesTemplate",
    "WaterfallTemplate",
    "get_template",
]
