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

"""Evaluation facility: turns a DispatchPlan into a callable.

The callable is a closure over the plan's steps and interceptors, so a
dispatch that is already running keeps the targets it was compiled with.

Calling conventions:
- sync: ``dispatch(*args)`` returns the result directly.
- async: ``dispatch(*args, callback)`` returns None and later calls
  ``callback(error, result)``. Async taps get the same error-first
  callback shape as their last argument.
- promise: ``dispatch(*args)`` returns a coroutine to await.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable

from taphook.dispatch.plan import DispatchPlan, PlanStep, ResultPolicy
from taphook.hooks.base import InvocationStyle, TapType

logger = logging.getLogger(__name__)

ENTRY_POINT_NAMES = {
    InvocationStyle.SYNC: "call",
    InvocationStyle.ASYNC: "call_async",
    InvocationStyle.PROMISE: "promise",
}

Binder = Callable[[tuple, dict], tuple]


def build_dispatcher(plan: DispatchPlan) -> Callable[..., Any]:
    """Build the callable for a plan.

    Args:
        plan: Plan produced by a template strategy

    Returns:
        Dispatch callable following the plan's invocation style.
    """
    bind = _argument_binder(plan.params, ENTRY_POINT_NAMES[plan.style])
    logger.debug(
        "Building %s dispatcher: %d step(s), policy=%s, fan_out=%s",
        plan.style.value, len(plan.steps), plan.policy.value, plan.fan_out,
    )
    if plan.style is InvocationStyle.SYNC:
        return _build_sync(plan, bind)
    if plan.style is InvocationStyle.ASYNC:
        return _build_callback(plan, bind)
    return _build_deferred(plan, bind)


def _argument_binder(params: tuple[str, ...], entry: str) -> Binder:
    """Map call arguments onto the declared parameter list."""
    signature = inspect.Signature(
        [inspect.Parameter(p, inspect.Parameter.POSITIONAL_OR_KEYWORD) for p in params]
    )
    count = len(params)

    def bind(args: tuple, kwargs: dict) -> tuple:
        if not kwargs and len(args) == count:
            return args
        try:
            bound = signature.bind(*args, **kwargs)
        except TypeError as e:
            raise TypeError(f"{entry}(): {e}") from None
        return tuple(bound.args)

    return bind


# =============================================================================
# Sync
# =============================================================================


def _build_sync(plan: DispatchPlan, bind: Binder) -> Callable[..., Any]:
    fns = tuple(step.fn for step in plan.steps)

    if not plan.is_intercepted and plan.policy is ResultPolicy.IGNORE:
        if not fns:
            def dispatch(*args, **kwargs):
                bind(args, kwargs)
                return None
        elif len(fns) == 1:
            fn = fns[0]

            def dispatch(*args, **kwargs):
                fn(*bind(args, kwargs))
                return None
        else:
            def dispatch(*args, **kwargs):
                args = bind(args, kwargs)
                for fn in fns:
                    fn(*args)
                return None
        return dispatch

    calls = plan.call_interceptors
    loops = plan.loop_interceptors
    policy = plan.policy

    def dispatch(*args, **kwargs):
        args = bind(args, kwargs)
        for intercept in calls:
            intercept(*args)
        return _run_sync(fns, policy, args, loops)

    return dispatch


def _run_sync(fns, policy: ResultPolicy, args: tuple, loops) -> Any:
    if policy is ResultPolicy.BAIL:
        for fn in fns:
            result = fn(*args)
            if result is not None:
                return result
        return None

    if policy is ResultPolicy.WATERFALL:
        value, rest = args[0], args[1:]
        for fn in fns:
            result = fn(value, *rest)
            if result is not None:
                value = result
        return value

    if policy is ResultPolicy.LOOP:
        restart = True
        while restart:
            restart = False
            for intercept in loops:
                intercept(*args)
            for fn in fns:
                if fn(*args) is not None:
                    restart = True
                    break
        return None

    for fn in fns:
        fn(*args)
    return None


# =============================================================================
# Callback
# =============================================================================


class _Completion:
    """Error-first callback handed to a waiting step; honours one call."""

    def __init__(self, callback: Callable[[Any, Any], None], label: str):
        self._callback = callback
        self._label = label
        self.called = False

    def __call__(self, error: Any = None, result: Any = None) -> None:
        if self.called:
            logger.warning("Tap '%s' completed more than once; ignoring", self._label)
            return
        self.called = True
        self._callback(error, result)


def _start_step(step: PlanStep, args: tuple, callback: Callable[[Any, Any], None]) -> None:
    """Start an async or promise step and route its outcome to callback."""
    complete = _Completion(callback, step.label)

    if step.kind is TapType.ASYNC:
        try:
            step.fn(*args, complete)
        except Exception as exc:
            if complete.called:
                raise
            complete(exc)
        return

    try:
        awaitable = step.fn(*args)
    except Exception as exc:
        complete(exc)
        return
    if not inspect.isawaitable(awaitable):
        complete(TypeError(
            f"Tap '{step.label}' registered with tap_promise did not return an awaitable"
        ))
        return
    _settle(awaitable, complete)


def _settle(awaitable: Any, complete: _Completion) -> None:
    """Wait for an awaitable on the running loop, or run one if there is none."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is None:
        try:
            result = asyncio.run(_await(awaitable))
        except Exception as exc:
            complete(exc)
            return
        complete(None, result)
        return

    def _on_done(future: asyncio.Future) -> None:
        if future.cancelled():
            complete(asyncio.CancelledError())
            return
        error = future.exception()
        if error is not None:
            complete(error)
        else:
            complete(None, future.result())

    asyncio.ensure_future(awaitable).add_done_callback(_on_done)


async def _await(awaitable: Any) -> Any:
    return await awaitable


class _SeriesRun:
    """One in-flight callback-style dispatch over steps in order.

    Steps that complete synchronously are handled in a loop rather than by
    recursion, so long chains of sync taps do not grow the stack.
    """

    def __init__(self, plan: DispatchPlan, args: tuple, done: Callable[[Any, Any], None]):
        self.steps = plan.steps
        self.policy = plan.policy
        self.loops = plan.loop_interceptors
        self.args = args
        self.value = args[0] if plan.policy is ResultPolicy.WATERFALL else None
        self.done = done
        self.index = 0
        self.finished = False
        self._running = False
        self._ready: tuple[Any, Any] | None = None

    def start(self) -> None:
        if self.policy is ResultPolicy.LOOP:
            error = self._begin_pass()
            if error is not None:
                self._finish(error)
                return
        self._advance()

    def _step_args(self) -> tuple:
        if self.policy is ResultPolicy.WATERFALL:
            return (self.value, *self.args[1:])
        return self.args

    def _begin_pass(self) -> Exception | None:
        try:
            for intercept in self.loops:
                intercept(*self.args)
        except Exception as exc:
            return exc
        return None

    def _advance(self) -> None:
        self._running = True
        try:
            while not self.finished:
                if self.index >= len(self.steps):
                    self._finish(None, self.value)
                    return

                step = self.steps[self.index]
                if step.kind is TapType.SYNC:
                    try:
                        result = step.fn(*self._step_args())
                    except Exception as exc:
                        self._finish(exc)
                        return
                    self._accept(result)
                    continue

                self._ready = None
                try:
                    _start_step(step, self._step_args(), self._on_step_done)
                except Exception as exc:
                    # The tap completed and then raised; the raise wins.
                    self._ready = None
                    self._finish(exc)
                    return
                if self._ready is None:
                    # Completion arrives later through _on_step_done.
                    return
                error, result = self._ready
                self._ready = None
                if error is not None:
                    self._finish(error)
                    return
                self._accept(result)
        finally:
            self._running = False

    def _on_step_done(self, error: Any, result: Any) -> None:
        if self._running:
            self._ready = (error, result)
            return
        if error is not None:
            self._finish(error)
            return
        self._accept(result)
        self._advance()

    def _accept(self, result: Any) -> None:
        if result is not None:
            if self.policy is ResultPolicy.BAIL:
                self._finish(None, result)
                return
            if self.policy is ResultPolicy.WATERFALL:
                self.value = result
            elif self.policy is ResultPolicy.LOOP:
                self.index = 0
                error = self._begin_pass()
                if error is not None:
                    self._finish(error)
                return
        self.index += 1

    def _finish(self, error: Any, result: Any = None) -> None:
        if self.finished:
            return
        self.finished = True
        self.done(error, result)


class _ParallelRun:
    """One in-flight callback-style dispatch that starts every step at once."""

    def __init__(self, plan: DispatchPlan, args: tuple, done: Callable[[Any, Any], None]):
        self.steps = plan.steps
        self.args = args
        self.done = done
        self.pending = len(plan.steps)
        self.finished = False

    def start(self) -> None:
        if not self.steps:
            self._finish(None)
            return
        for step in self.steps:
            if self.finished:
                break
            if step.kind is TapType.SYNC:
                try:
                    step.fn(*self.args)
                except Exception as exc:
                    self._finish(exc)
                    break
                self._step_done(None, None)
                continue
            try:
                _start_step(step, self.args, self._step_done)
            except Exception as exc:
                self._finish(exc)
                break

    def _step_done(self, error: Any, result: Any) -> None:
        if self.finished:
            return
        if error is not None:
            self._finish(error)
            return
        self.pending -= 1
        if self.pending == 0:
            self._finish(None)

    def _finish(self, error: Any) -> None:
        if self.finished:
            return
        self.finished = True
        self.done(error, None)


def _build_callback(plan: DispatchPlan, bind: Binder) -> Callable[..., None]:
    calls = plan.call_interceptors
    run_class = _ParallelRun if plan.fan_out else _SeriesRun

    def dispatch(*args, callback=None, **kwargs):
        if callback is None:
            if not args:
                raise TypeError("call_async(): missing completion callback")
            args, callback = args[:-1], args[-1]
        if not callable(callback):
            raise TypeError("call_async(): completion callback must be callable")
        args = bind(args, kwargs)

        try:
            for intercept in calls:
                intercept(*args)
        except Exception as exc:
            callback(exc, None)
            return None

        run_class(plan, args, callback).start()
        return None

    return dispatch


# =============================================================================
# Deferred
# =============================================================================


def _build_deferred(plan: DispatchPlan, bind: Binder) -> Callable[..., Any]:
    def dispatch(*args, **kwargs):
        return _run_deferred(plan, bind(args, kwargs))

    return dispatch


async def _run_deferred(plan: DispatchPlan, args: tuple) -> Any:
    for intercept in plan.call_interceptors:
        intercept(*args)

    if plan.fan_out:
        await asyncio.gather(*(_resolve(step, args) for step in plan.steps))
        return None

    policy = plan.policy
    if policy is ResultPolicy.WATERFALL:
        value, rest = args[0], args[1:]
        for step in plan.steps:
            result = await _resolve(step, (value, *rest))
            if result is not None:
                value = result
        return value

    if policy is ResultPolicy.LOOP:
        restart = True
        while restart:
            restart = False
            for intercept in plan.loop_interceptors:
                intercept(*args)
            for step in plan.steps:
                if await _resolve(step, args) is not None:
                    restart = True
                    break
        return None

    for step in plan.steps:
        result = await _resolve(step, args)
        if policy is ResultPolicy.BAIL and result is not None:
            return result
    return None


async def _resolve(step: PlanStep, args: tuple) -> Any:
    """Run one step to completion inside the event loop."""
    if step.kind is TapType.SYNC:
        return step.fn(*args)

    if step.kind is TapType.ASYNC:
        future = asyncio.get_running_loop().create_future()

        def _complete(error: Any, result: Any) -> None:
            if future.done():
                return
            if error is not None:
                if not isinstance(error, BaseException):
                    error = RuntimeError(error)
                future.set_exception(error)
            else:
                future.set_result(result)

        complete = _Completion(_complete, step.label)
        try:
            step.fn(*args, complete)
        except Exception as exc:
            if complete.called:
                raise
            complete(exc)
        return await future

    awaitable = step.fn(*args)
    if not inspect.isawaitable(awaitable):
        raise TypeError(
            f"Tap '{step.label}' registered with tap_promise did not return an awaitable"
        )
    return await awaitable
