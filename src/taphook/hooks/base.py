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

"""Base classes and types for the hook system."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

RESERVED_OPTION_KEYS = frozenset({"name", "stage", "before"})


class TapValidationError(ValueError):
    """Raised when tap registration arguments are invalid."""

    pass


class InterceptorValidationError(ValueError):
    """Raised when an interceptor spec is malformed."""

    pass


class UnsupportedInvocationError(Exception):
    """Raised when a template cannot dispatch in the requested style."""

    pass


class TapType(str, Enum):
    """Completion style of a tap, set by the registration method used."""

    SYNC = "sync"
    ASYNC = "async"  # error-first callback as last argument
    PROMISE = "promise"  # returns an awaitable


class InvocationStyle(str, Enum):
    """Calling convention of a hook entry point."""

    SYNC = "sync"
    ASYNC = "async"
    PROMISE = "promise"


class Classification(str, Enum):
    """Shape of the current tap/interceptor set."""

    NONE = "none"
    INTERCEPTED = "intercepted"
    SINGLE_SYNC = "single-sync"
    SINGLE_ASYNC = "single-async"
    SINGLE_PROMISE = "single-promise"
    UNIFORM_SYNC = "uniform-sync"
    UNIFORM_ASYNC = "uniform-async"
    UNIFORM_PROMISE = "uniform-promise"
    MIXED = "mixed"

    @property
    def is_single(self) -> bool:
        return self.value.startswith("single-")

    @property
    def is_uniform(self) -> bool:
        return self.value.startswith("uniform-")

    @property
    def tap_type(self) -> TapType | None:
        """Tap type shared by every target, or None when not homogeneous."""
        if self.is_single or self.is_uniform:
            return TapType(self.value.split("-", 1)[1])
        return None

    @classmethod
    def single(cls, tap_type: TapType) -> "Classification":
        return cls(f"single-{tap_type.value}")

    @classmethod
    def uniform(cls, tap_type: TapType) -> "Classification":
        return cls(f"uniform-{tap_type.value}")


def normalize_stage(value: Any) -> int | float:
    """Coerce a stage value, treating anything non-numeric as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def normalize_before(value: Any) -> tuple[str, ...]:
    """Coerce a before constraint to a tuple of names.

    Accepts a single name or a list/tuple/set of names. Anything else is
    ignored, matching the no-validation policy for ordering hints.
    """
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple, set, frozenset)):
        names: list[str] = []
        for name in value:
            if name not in names:
                names.append(name)
        return tuple(names)
    return ()


@dataclass(frozen=True)
class TapOptions:
    """Registration options for a tap.

    Every field is optional so that partial options can be layered:
    call-site values override bound defaults, which override the
    built-in defaults (stage 0, no before constraint).
    """

    name: str | None = None
    stage: Any = None
    before: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, value: Any, method: str = "tap") -> "TapOptions":
        """Build options from a name, a mapping, or existing options.

        Raises:
            TapValidationError: If value is none of the accepted shapes.
        """
        if isinstance(value, TapOptions):
            return value
        if isinstance(value, str):
            return cls(name=value)
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        raise TapValidationError(
            f"Invalid arguments to {method}(options, fn): "
            f"expected a name or options mapping, got {type(value).__name__}"
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TapOptions":
        """Create from a mapping; unrecognized keys become metadata."""
        return cls(
            name=data.get("name"),
            stage=data.get("stage"),
            before=data.get("before"),
            metadata={
                k: v for k, v in data.items() if k not in RESERVED_OPTION_KEYS
            },
        )

    def require_name(self, method: str = "tap") -> str:
        """Return the name, raising TapValidationError if it is unusable."""
        if not isinstance(self.name, str) or self.name == "":
            raise TapValidationError(f"Missing name for {method}")
        return self.name

    def merged_over(self, defaults: "TapOptions") -> "TapOptions":
        """Layer these options over defaults; set fields here win."""
        return TapOptions(
            name=self.name if self.name is not None else defaults.name,
            stage=self.stage if self.stage is not None else defaults.stage,
            before=self.before if self.before is not None else defaults.before,
            metadata={**defaults.metadata, **self.metadata},
        )

    def to_dict(self, exclude_none: bool = False) -> dict[str, Any]:
        """Convert to dictionary."""
        result = {
            "name": self.name,
            "stage": self.stage,
            "before": self.before,
            **self.metadata,
        }
        if exclude_none:
            return {k: v for k, v in result.items() if v is not None}
        return result


@dataclass(frozen=True)
class Tap:
    """One registered handler plus its ordering and type metadata."""

    name: str
    type: TapType
    fn: Callable[..., Any]
    stage: int | float = 0
    before: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(
        cls,
        options: TapOptions,
        tap_type: TapType,
        fn: Callable[..., Any],
        method: str = "tap",
    ) -> "Tap":
        """Validate resolved options and build a tap record.

        Raises:
            TapValidationError: If the name is missing or empty, or fn is
                not callable.
        """
        options.require_name(method)
        if not callable(fn):
            raise TapValidationError(
                f"Handler for {method}('{options.name}') must be callable"
            )
        return cls(
            name=options.name,
            type=tap_type,
            fn=fn,
            stage=normalize_stage(options.stage),
            before=normalize_before(options.before),
            metadata=dict(options.metadata),
        )

    def to_dict(self) -> dict[str, Any]:
        """Describe the tap without its handler."""
        return {
            "name": self.name,
            "type": self.type.value,
            "stage": self.stage,
            "before": list(self.before),
            "metadata": dict(self.metadata),
        }
