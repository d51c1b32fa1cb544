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

"""Derive the dispatch shape of a tap/interceptor set."""

from __future__ import annotations

from typing import Sequence

from taphook.hooks.base import Classification, Tap
from taphook.hooks.interceptors import Interceptor


def classify(
    taps: Sequence[Tap], interceptors: Sequence[Interceptor] = ()
) -> Classification:
    """Classify the current registrations.

    Any interceptor forces the generic path, since interceptors work on
    full tap records. Otherwise the shape depends on how many taps there
    are and whether they share a type.
    """
    if interceptors:
        return Classification.INTERCEPTED
    if not taps:
        return Classification.NONE
    if len(taps) == 1:
        return Classification.single(taps[0].type)

    first = taps[0].type
    for tap in taps[1:]:
        if tap.type is not first:
            return Classification.MIXED
    return Classification.uniform(first)
