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

"""Hook system core.

A Hook is an extension point that independent plugins tap into. Taps are
ordered by stage and before constraints, and dispatched through a lazily
compiled, cached dispatcher per invocation style.

Tap Types:
- sync: handler returns its result directly
- async: handler receives an error-first callback as its last argument
- promise: handler returns an awaitable

Invocation Styles:
- call: direct, sync taps only
- call_async: completion through callback(error, result)
- promise: returns a coroutine to await
"""

from taphook.hooks.base import (
    Classification,
    InterceptorValidationError,
    InvocationStyle,
    Tap,
    TapOptions,
    TapType,
    TapValidationError,
    UnsupportedInvocationError,
)
from taphook.hooks.binder import BoundHook
from taphook.hooks.classifier import classify
from taphook.hooks.compiler import (
    COMPILED,
    PENDING,
    CompileDiagnostics,
    CompileRecord,
    DispatchCompiler,
)
from taphook.hooks.hook import (
    BailHook,
    Hook,
    LoopHook,
    ParallelHook,
    SeriesHook,
    WaterfallHook,
)
from taphook.hooks.interceptors import Interceptor, InterceptorChain
from taphook.hooks.registry import TapRegistry

__all__ = [
    # Base types
    "Classification",
    "InvocationStyle",
    "Tap",
    "TapOptions",
    "TapType",
    # Errors
    "InterceptorValidationError",
    "TapValidationError",
    "UnsupportedInvocationError",
    # Components
    "BoundHook",
    "CompileDiagnostics",
    "CompileRecord",
    "DispatchCompiler",
    "Interceptor",
    "InterceptorChain",
    "TapRegistry",
    "classify",
    "COMPILED",
    "PENDING",
    # Hooks
    "BailHook",
    "Hook",
    "LoopHook",
    "ParallelHook",
    "SeriesHook",
    "WaterfallHook",
]
