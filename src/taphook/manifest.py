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

"""Hook manifests: declare a hook and its taps in YAML or JSON.

A manifest lets plugin authors preview how their taps will be ordered
without wiring up real handlers:

    params: [compilation]
    template: series
    taps:
      - name: Setup
        stage: -10
      - name: Optimize
        type: promise
        before: [Emit]
      - name: Emit

Taps are registered in file order with placeholder handlers.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from taphook.hooks import Hook, TapOptions, TapType, TapValidationError

logger = logging.getLogger(__name__)

MANIFEST_TAP_KEYS = frozenset({"name", "type", "stage", "before", "metadata"})


class ManifestError(Exception):
    """Raised when a manifest cannot be loaded or is invalid."""

    pass


@dataclass
class TapManifest:
    """One tap declared in a manifest."""

    name: str
    type: TapType = TapType.SYNC
    stage: Any = None
    before: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TapManifest":
        if not isinstance(data, dict):
            raise ManifestError(f"Tap entries must be mappings, got {type(data).__name__}")

        unknown = set(data) - MANIFEST_TAP_KEYS
        if unknown:
            raise ManifestError(
                f"Unknown fields in tap '{data.get('name', '?')}': "
                f"{', '.join(sorted(map(str, unknown)))}"
            )

        type_value = data.get("type", TapType.SYNC.value)
        try:
            tap_type = TapType(type_value)
        except ValueError:
            raise ManifestError(
                f"Invalid tap type '{type_value}'. "
                f"Valid values: {', '.join(t.value for t in TapType)}"
            )

        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ManifestError(f"metadata of tap '{data.get('name')}' must be a mapping")

        return cls(
            name=data.get("name"),
            type=tap_type,
            stage=data.get("stage"),
            before=data.get("before"),
            metadata=metadata,
        )

    def to_options(self) -> TapOptions:
        return TapOptions(
            name=self.name,
            stage=self.stage,
            before=self.before,
            metadata=dict(self.metadata),
        )


@dataclass
class HookManifest:
    """A hook declaration: parameters, template and taps."""

    params: list[str] = field(default_factory=list)
    template: str | None = None
    taps: list[TapManifest] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HookManifest":
        if not isinstance(data, dict):
            raise ManifestError("Manifest must be a mapping at the top level")

        params = data.get("params") or []
        if not isinstance(params, list):
            raise ManifestError("params must be a list of names")

        taps = data.get("taps") or []
        if not isinstance(taps, list):
            raise ManifestError("taps must be a list")

        return cls(
            params=params,
            template=data.get("template"),
            taps=[TapManifest.from_dict(t) for t in taps],
        )


def load_manifest(path: Path) -> HookManifest:
    """Load a manifest from a YAML or JSON file.

    Raises:
        ManifestError: If the file cannot be read or parsed.
    """
    try:
        content = path.read_text()
    except OSError as e:
        raise ManifestError(f"Error reading {path}: {e}")

    try:
        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ManifestError(f"Invalid manifest in {path}: {e}")

    manifest = HookManifest.from_dict(data or {})
    logger.info("Loaded manifest %s: %d tap(s)", path.name, len(manifest.taps))
    return manifest


def _sync_placeholder(*args: Any) -> None:
    return None


def _async_placeholder(*args: Any) -> None:
    args[-1](None, None)


async def _promise_placeholder(*args: Any) -> None:
    return None


_PLACEHOLDERS = {
    TapType.SYNC: _sync_placeholder,
    TapType.ASYNC: _async_placeholder,
    TapType.PROMISE: _promise_placeholder,
}


def build_hook(manifest: HookManifest, template: str | None = None) -> Hook:
    """Create a hook and register the manifest's taps with placeholders.

    Args:
        manifest: Loaded manifest
        template: Template name overriding the manifest's own

    Raises:
        ManifestError: If the hook or one of its taps is rejected.
    """
    try:
        hook = Hook(manifest.params, template=template or manifest.template)
    except ValueError as e:
        raise ManifestError(str(e))

    register = {
        TapType.SYNC: hook.tap,
        TapType.ASYNC: hook.tap_async,
        TapType.PROMISE: hook.tap_promise,
    }
    for entry in manifest.taps:
        try:
            register[entry.type](entry.to_options(), _PLACEHOLDERS[entry.type])
        except TapValidationError as e:
            raise ManifestError(str(e))
    return hook


def describe_hook(hook: Hook) -> dict[str, Any]:
    """Resolved order and shape of a hook, for display."""
    return {
        "params": list(hook.params),
        "template": hook.template.name,
        "classification": hook.classify().value,
        "taps": [
            {"position": i + 1, **tap.to_dict()} for i, tap in enumerate(hook.taps)
        ],
    }
