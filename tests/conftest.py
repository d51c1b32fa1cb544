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

"""Pytest configuration and shared fixtures for taphook tests."""

from dataclasses import dataclass, field

import pytest


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path, monkeypatch):
    """Keep tests away from the user's config files and env vars."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for var in ("TAPHOOK_TEMPLATE", "TAPHOOK_OUTPUT_FORMAT", "TAPHOOK_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@dataclass
class Recorder:
    """Collects the order in which handlers run."""

    calls: list = field(default_factory=list)

    def sync(self, name, result=None):
        def handler(*args):
            self.calls.append((name, args))
            return result
        return handler

    def callback(self, name, result=None, error=None):
        def handler(*args):
            *args, done = args
            self.calls.append((name, tuple(args)))
            done(error, result)
        return handler

    def promise(self, name, result=None, error=None):
        async def handler(*args):
            self.calls.append((name, args))
            if error is not None:
                raise error
            return result
        return handler

    @property
    def names(self):
        return [name for name, _ in self.calls]


@pytest.fixture
def recorder():
    return Recorder()


@dataclass
class Outcome:
    """Captures what a call_async completion callback received."""

    error: object = None
    result: object = None
    count: int = 0

    def __call__(self, error=None, result=None):
        self.error = error
        self.result = result
        self.count += 1


@pytest.fixture
def outcome():
    return Outcome()
