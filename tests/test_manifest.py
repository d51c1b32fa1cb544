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

"""Tests for hook manifests."""

import asyncio
import json
import logging

import pytest

from taphook.hooks import Classification, TapType
from taphook.manifest import (
    HookManifest,
    ManifestError,
    TapManifest,
    build_hook,
    describe_hook,
    load_manifest,
)

YAML_MANIFEST = """\
params: [compilation]
template: series
taps:
  - name: Emit
  - name: Setup
    stage: -10
  - name: Optimize
    type: promise
    before: [Emit]
    metadata:
      plugin: optimizer
"""


@pytest.fixture
def yaml_manifest(tmp_path):
    path = tmp_path / "hook.yaml"
    path.write_text(YAML_MANIFEST)
    return path


# =============================================================================
# Parsing
# =============================================================================


class TestTapManifest:
    """Tap entries."""

    def test_defaults_to_sync(self):
        entry = TapManifest.from_dict({"name": "A"})
        assert entry.type is TapType.SYNC
        assert entry.metadata == {}

    def test_invalid_type(self):
        with pytest.raises(ManifestError, match="Invalid tap type"):
            TapManifest.from_dict({"name": "A", "type": "thread"})

    def test_unknown_fields(self):
        with pytest.raises(ManifestError, match="priority"):
            TapManifest.from_dict({"name": "A", "priority": 1})

    def test_non_mapping_entry(self):
        with pytest.raises(ManifestError, match="mappings"):
            TapManifest.from_dict("A")

    def test_metadata_must_be_mapping(self):
        with pytest.raises(ManifestError, match="metadata"):
            TapManifest.from_dict({"name": "A", "metadata": [1]})

    def test_to_options(self):
        options = TapManifest.from_dict({"name": "A", "stage": 2, "metadata": {"k": "v"}}).to_options()
        assert options.name == "A"
        assert options.stage == 2
        assert options.metadata == {"k": "v"}


class TestHookManifest:
    """Top-level manifest shape."""

    def test_empty(self):
        manifest = HookManifest.from_dict({})
        assert manifest.params == []
        assert manifest.template is None
        assert manifest.taps == []

    def test_params_must_be_list(self):
        with pytest.raises(ManifestError, match="params"):
            HookManifest.from_dict({"params": "compilation"})

    def test_taps_must_be_list(self):
        with pytest.raises(ManifestError, match="taps"):
            HookManifest.from_dict({"taps": {"name": "A"}})

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ManifestError, match="top level"):
            HookManifest.from_dict(["taps"])


# =============================================================================
# Loading
# =============================================================================


class TestLoadManifest:
    """Reading manifests from disk."""

    def test_yaml(self, yaml_manifest):
        manifest = load_manifest(yaml_manifest)
        assert manifest.params == ["compilation"]
        assert [t.name for t in manifest.taps] == ["Emit", "Setup", "Optimize"]
        assert manifest.taps[2].type is TapType.PROMISE

    def test_json(self, tmp_path):
        path = tmp_path / "hook.json"
        path.write_text(json.dumps({"params": ["x"], "template": "bail", "taps": [{"name": "A"}]}))
        manifest = load_manifest(path)
        assert manifest.template == "bail"
        assert manifest.taps[0].name == "A"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_manifest(path).taps == []

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("taps: [unclosed\n")
        with pytest.raises(ManifestError, match="Invalid manifest"):
            load_manifest(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{")
        with pytest.raises(ManifestError, match="Invalid manifest"):
            load_manifest(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestError, match="Error reading"):
            load_manifest(tmp_path / "missing.yaml")

    def test_logs_load(self, yaml_manifest, caplog):
        with caplog.at_level(logging.INFO, logger="taphook.manifest"):
            load_manifest(yaml_manifest)
        assert any("3 tap(s)" in r.message for r in caplog.records)


# =============================================================================
# Building
# =============================================================================


class TestBuildHook:
    """Hooks built from manifests."""

    def test_resolved_order(self, yaml_manifest):
        hook = build_hook(load_manifest(yaml_manifest))
        assert [t.name for t in hook.taps] == ["Setup", "Optimize", "Emit"]
        assert hook.classify() is Classification.MIXED

    def test_template_override(self, yaml_manifest):
        hook = build_hook(load_manifest(yaml_manifest), template="bail")
        assert hook.template.name == "bail"

    def test_placeholders_dispatch(self, yaml_manifest):
        hook = build_hook(load_manifest(yaml_manifest))
        assert asyncio.run(hook.promise("compilation")) is None

    def test_async_placeholder_completes(self):
        manifest = HookManifest.from_dict({"params": ["x"], "taps": [{"name": "A", "type": "async"}]})
        results = []
        build_hook(manifest).call_async(1, lambda error, result: results.append(error))
        assert results == [None]

    def test_missing_tap_name(self):
        manifest = HookManifest.from_dict({"taps": [{"stage": 1}]})
        with pytest.raises(ManifestError, match="Missing name"):
            build_hook(manifest)

    def test_unknown_template(self):
        with pytest.raises(ManifestError, match="Unknown template"):
            build_hook(HookManifest(template="zigzag"))

    def test_waterfall_without_params(self):
        with pytest.raises(ManifestError, match="at least one parameter"):
            build_hook(HookManifest(template="waterfall"))

    def test_describe(self, yaml_manifest):
        description = describe_hook(build_hook(load_manifest(yaml_manifest)))
        assert description["params"] == ["compilation"]
        assert description["template"] == "series"
        assert description["classification"] == "mixed"
        first, second, third = description["taps"]
        assert (first["position"], first["name"], first["stage"]) == (1, "Setup", -10)
        assert second["type"] == "promise"
        assert second["before"] == ["Emit"]
        assert second["metadata"] == {"plugin": "optimizer"}
        assert third["name"] == "Emit"
