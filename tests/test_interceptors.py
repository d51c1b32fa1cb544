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

"""Tests for interceptor registration and dispatch behavior."""

import asyncio
import dataclasses

import pytest

from taphook.hooks import (
    Hook,
    Interceptor,
    InterceptorChain,
    InterceptorValidationError,
    LoopHook,
    Tap,
    TapType,
)


def _noop(*args):
    return None


# =============================================================================
# Normalization
# =============================================================================


class TestInterceptorSpec:
    """Interceptor.from_spec validation and defaults."""

    def test_empty_spec_gets_defaults(self):
        """Missing capabilities become no-ops and identity."""
        interceptor = Interceptor.from_spec({})
        tap = Tap(name="A", type=TapType.SYNC, fn=_noop)
        assert interceptor.call(1, 2) is None
        assert interceptor.loop(1) is None
        assert interceptor.tap(tap) is tap

    def test_partial_spec_keeps_given_capability(self):
        seen = []
        interceptor = Interceptor.from_spec({"call": seen.append})
        interceptor.call("x")
        assert seen == ["x"]

    def test_existing_interceptor_passes_through(self):
        interceptor = Interceptor()
        assert Interceptor.from_spec(interceptor) is interceptor

    def test_non_mapping_rejected(self):
        with pytest.raises(InterceptorValidationError, match="expected a mapping"):
            Interceptor.from_spec("call")

    def test_unknown_capability_rejected(self):
        with pytest.raises(InterceptorValidationError, match="register"):
            Interceptor.from_spec({"register": _noop})

    def test_non_callable_capability_rejected(self):
        with pytest.raises(InterceptorValidationError, match="'call' must be callable"):
            Interceptor.from_spec({"call": 42})

    def test_invalid_spec_leaves_hook_untouched(self):
        """A rejected interceptor does not change classification or state."""
        hook = Hook(["x"])
        hook.tap("A", _noop)
        hook.call(1)
        with pytest.raises(InterceptorValidationError):
            hook.intercept({"bogus": _noop})
        assert hook.interceptors == ()
        assert hook.compile_state("sync") == "compiled"

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            Hook().intercept(None)


# =============================================================================
# Call Interceptors
# =============================================================================


class TestCallInterceptor:
    """call runs once per invocation, before any tap."""

    def test_called_once_before_taps_sync(self, recorder):
        hook = Hook(["a", "b"])
        hook.tap("A", recorder.sync("A"))
        hook.tap("B", recorder.sync("B"))
        hook.intercept({"call": recorder.sync("intercept")})
        hook.call(1, 2)
        assert recorder.names == ["intercept", "A", "B"]
        assert recorder.calls[0] == ("intercept", (1, 2))

    def test_called_once_per_invocation(self, recorder):
        hook = Hook(["x"])
        hook.tap("A", _noop)
        hook.intercept({"call": recorder.sync("intercept")})
        hook.call(1)
        hook.call(2)
        assert recorder.calls == [("intercept", (1,)), ("intercept", (2,))]

    def test_called_with_no_taps(self, recorder):
        """An intercepted hook with no taps still reports the call."""
        hook = Hook(["x"])
        hook.intercept({"call": recorder.sync("intercept")})
        assert hook.call(7) is None
        assert recorder.calls == [("intercept", (7,))]

    def test_every_interceptor_in_registration_order(self, recorder):
        hook = Hook(["x"])
        hook.intercept({"call": recorder.sync("first")})
        hook.intercept({"call": recorder.sync("second")})
        hook.call(1)
        assert recorder.names == ["first", "second"]

    def test_callback_style(self, recorder, outcome):
        hook = Hook(["x"])
        hook.tap_async("A", recorder.callback("A"))
        hook.intercept({"call": recorder.sync("intercept")})
        hook.call_async(1, outcome)
        assert recorder.names == ["intercept", "A"]
        assert outcome.count == 1
        assert outcome.error is None

    def test_call_error_goes_to_callback(self, outcome):
        def failing(x):
            raise RuntimeError("interceptor failed")

        hook = Hook(["x"])
        hook.tap("A", _noop)
        hook.intercept({"call": failing})
        hook.call_async(1, outcome)
        assert isinstance(outcome.error, RuntimeError)
        assert outcome.count == 1

    def test_deferred_style(self, recorder):
        hook = Hook(["x"])
        hook.tap_promise("A", recorder.promise("A"))
        hook.intercept({"call": recorder.sync("intercept")})
        asyncio.run(hook.promise(1))
        assert recorder.names == ["intercept", "A"]


# =============================================================================
# Tap Interceptors
# =============================================================================


class TestTapInterceptor:
    """tap transforms tap records at compile time."""

    def test_transform_applied_at_compile_time(self, recorder):
        """The transform runs when compiling, not on every call."""
        transforms = []

        def rename(tap):
            transforms.append(tap.name)
            return dataclasses.replace(tap, name=f"wrapped-{tap.name}")

        hook = Hook(["x"])
        hook.tap("A", _noop)
        hook.tap("B", _noop)
        hook.intercept({"tap": rename})
        assert transforms == []

        hook.call(1)
        hook.call(2)
        assert transforms == ["A", "B"]

    def test_targets_are_transformed_records(self):
        def rename(tap):
            return dataclasses.replace(tap, name=f"wrapped-{tap.name}")

        hook = Hook(["x"])
        hook.tap("A", _noop)
        hook.intercept({"tap": rename})
        assert [t.name for t in hook.get_dispatch_targets()] == ["wrapped-A"]
        # registered records are untouched
        assert [t.name for t in hook.taps] == ["A"]

    def test_transform_can_wrap_handler(self, recorder):
        def wrap(tap):
            def wrapped(x):
                return tap.fn(x * 10)

            return dataclasses.replace(tap, fn=wrapped)

        hook = Hook(["x"])
        hook.tap("A", recorder.sync("A"))
        hook.intercept({"tap": wrap})
        hook.call(2)
        assert recorder.calls == [("A", (20,))]

    def test_transforms_chain_in_registration_order(self):
        def tag(label):
            def transform(tap):
                return dataclasses.replace(tap, metadata={**tap.metadata, label: True, "last": label})
            return transform

        chain = InterceptorChain()
        chain.register({"tap": tag("one")})
        chain.register({"tap": tag("two")})
        (tap,) = chain.transform_taps((Tap(name="A", type=TapType.SYNC, fn=_noop),))
        assert tap.metadata == {"one": True, "two": True, "last": "two"}


# =============================================================================
# Loop Interceptors
# =============================================================================


class TestLoopInterceptor:
    """loop runs at the start of each pass of a loop hook."""

    def test_loop_called_per_pass(self, recorder):
        remaining = [2]

        def repeat(x):
            if remaining[0]:
                remaining[0] -= 1
                return True
            return None

        hook = LoopHook(["x"])
        hook.tap("A", repeat)
        hook.intercept({"loop": recorder.sync("loop")})
        hook.call(1)
        assert recorder.names == ["loop", "loop", "loop"]

    def test_loop_not_called_for_series(self, recorder):
        hook = Hook(["x"])
        hook.tap("A", _noop)
        hook.intercept({"loop": recorder.sync("loop")})
        hook.call(1)
        assert recorder.calls == []

    def test_loop_called_per_pass_callback_style(self, recorder, outcome):
        remaining = [1]

        def repeat(x, done):
            if remaining[0]:
                remaining[0] -= 1
                done(None, True)
            else:
                done(None, None)

        hook = LoopHook(["x"])
        hook.tap_async("A", repeat)
        hook.intercept({"loop": recorder.sync("loop")})
        hook.call_async(1, outcome)
        assert recorder.names == ["loop", "loop"]
        assert outcome.error is None
        assert outcome.count == 1
