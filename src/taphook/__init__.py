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

"""taphook - ordered plugin hooks with compiled dispatch."""

__version__ = "0.1.0"

from taphook.dispatch import DispatchTemplate, get_template
from taphook.hooks import (
    BailHook,
    BoundHook,
    Classification,
    Hook,
    InvocationStyle,
    LoopHook,
    ParallelHook,
    SeriesHook,
    Tap,
    TapOptions,
    TapType,
    TapValidationError,
    WaterfallHook,
)

__all__ = [
    "__version__",
    "BailHook",
    "BoundHook",
    "Classification",
    "DispatchTemplate",
    "Hook",
    "InvocationStyle",
    "LoopHook",
    "ParallelHook",
    "SeriesHook",
    "Tap",
    "TapOptions",
    "TapType",
    "TapValidationError",
    "WaterfallHook",
    "get_template",
]
