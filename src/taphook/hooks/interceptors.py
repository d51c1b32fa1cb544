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

"""Interceptors: cross-cutting observers applied around dispatch.

An interceptor has three optional capabilities:

- call: observes the invocation arguments once per call, before dispatch
- loop: observes the arguments at the start of each pass of a loop hook
- tap:  transforms each tap record when the target list is built for a
        compile; must return a tap
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from taphook.hooks.base import InterceptorValidationError, Tap

logger = logging.getLogger(__name__)

INTERCEPTOR_CAPABILITIES = ("call", "loop", "tap")


def _noop(*args: Any) -> None:
    return None


def _identity(tap: Tap) -> Tap:
    return tap


@dataclass(frozen=True)
class Interceptor:
    """Normalized interceptor record with every capability present."""

    call: Callable[..., Any] = _noop
    loop: Callable[..., Any] = _noop
    tap: Callable[[Tap], Tap] = _identity

    @classmethod
    def from_spec(cls, spec: Any) -> "Interceptor":
        """Normalize a partial interceptor spec.

        Args:
            spec: An Interceptor, or a mapping holding any subset of
                "call", "loop" and "tap".

        Raises:
            InterceptorValidationError: If spec has the wrong shape, names
                an unknown capability, or a capability is not callable.
        """
        if isinstance(spec, Interceptor):
            return spec
        if not isinstance(spec, Mapping):
            raise InterceptorValidationError(
                f"Invalid arguments to intercept(interceptor): "
                f"expected a mapping, got {type(spec).__name__}"
            )

        unknown = set(spec) - set(INTERCEPTOR_CAPABILITIES)
        if unknown:
            raise InterceptorValidationError(
                f"Unknown interceptor capabilities: {', '.join(sorted(map(str, unknown)))}. "
                f"Valid values: {', '.join(INTERCEPTOR_CAPABILITIES)}"
            )

        kwargs = {}
        for capability in INTERCEPTOR_CAPABILITIES:
            fn = spec.get(capability)
            if fn is None:
                continue
            if not callable(fn):
                raise InterceptorValidationError(
                    f"Interceptor capability '{capability}' must be callable"
                )
            kwargs[capability] = fn
        return cls(**kwargs)


class InterceptorChain:
    """Ordered interceptors of one hook."""

    def __init__(self):
        self._interceptors: list[Interceptor] = []

    def __len__(self) -> int:
        return len(self._interceptors)

    def __iter__(self) -> Iterator[Interceptor]:
        return iter(tuple(self._interceptors))

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return tuple(self._interceptors)

    def register(self, spec: Any) -> Interceptor:
        """Normalize and append an interceptor."""
        interceptor = Interceptor.from_spec(spec)
        self._interceptors.append(interceptor)
        logger.debug("Registered interceptor #%d", len(self._interceptors))
        return interceptor

    def transform_taps(self, taps: tuple[Tap, ...]) -> tuple[Tap, ...]:
        """Apply every tap transform, in registration order, to each tap."""
        result = []
        for tap in taps:
            for interceptor in self._interceptors:
                tap = interceptor.tap(tap)
            result.append(tap)
        return tuple(result)
