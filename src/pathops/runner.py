"""Plan execution for the blocking and suspending call conventions.

Policy code (checks, copy, move, primitives) is written once as generator
"plans". A plan yields a request for every filesystem call it needs and
receives the call's result back from the yield expression:

    def plan_size(path):
        st = yield Syscall("stat", path, True)
        return st.size

run_sync executes the requests against a FileSystem, run_async awaits them
against an AsyncFileSystem. When a call raises, the exception is thrown into
the plan at the yield, so plans handle host errors with plain try/except.
Sub-plans compose with ``yield from``.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Callable, Generator, TypeVar, Union

if TYPE_CHECKING:
    from pathops.protocols import AsyncFileSystem, FileSystem


T = TypeVar("T")

SYSCALLS = frozenset(
    {
        "chmod",
        "copy_file",
        "exists",
        "glob",
        "listdir",
        "make_dir",
        "readlink",
        "remove",
        "rename",
        "stat",
        "symlink",
        "unlink",
        "utime",
        "write_file",
    }
)


class Syscall:
    """Request for one filesystem call, by FileSystem method name."""

    __slots__ = ("name", "args")

    def __init__(self, name: str, *args: Any) -> None:
        if name not in SYSCALLS:
            raise ValueError(f"Unknown filesystem call: {name}")
        self.name = name
        self.args = args

    def __repr__(self) -> str:
        return f"Syscall({self.name!r}, {', '.join(map(repr, self.args))})"


class Predicate:
    """Request to evaluate a caller-supplied callback such as a copy filter."""

    __slots__ = ("func", "args")

    def __init__(self, func: Callable[..., Any], *args: Any) -> None:
        self.func = func
        self.args = args

    def __repr__(self) -> str:
        return f"Predicate({self.func!r}, {', '.join(map(repr, self.args))})"


Step = Union[Syscall, Predicate]
Plan = Generator[Step, Any, T]


def _call_sync(fs: FileSystem, step: Step) -> Any:
    if isinstance(step, Predicate):
        result = step.func(*step.args)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise TypeError("Async filter functions require the async API")
        return bool(result)
    return getattr(fs, step.name)(*step.args)


async def _call_async(fs: AsyncFileSystem, step: Step) -> Any:
    if isinstance(step, Predicate):
        result = step.func(*step.args)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)
    return await getattr(fs, step.name)(*step.args)


def run_sync(plan: Plan[T], fs: FileSystem) -> T:
    """Drive a plan to completion with blocking calls.

    Args:
        plan: Generator plan to execute.
        fs: Filesystem that serves the plan's requests.

    Returns:
        The plan's return value.
    """
    value: Any = None
    error: Exception | None = None
    try:
        while True:
            try:
                step = plan.send(value) if error is None else plan.throw(error)
            except StopIteration as stop:
                return stop.value
            value, error = None, None
            try:
                value = _call_sync(fs, step)
            except Exception as e:
                error = e
    finally:
        plan.close()


async def run_async(plan: Plan[T], fs: AsyncFileSystem) -> T:
    """Drive a plan to completion, suspending at every filesystem call.

    Args:
        plan: Generator plan to execute.
        fs: Async filesystem that serves the plan's requests.

    Returns:
        The plan's return value.
    """
    value: Any = None
    error: Exception | None = None
    try:
        while True:
            try:
                step = plan.send(value) if error is None else plan.throw(error)
            except StopIteration as stop:
                return stop.value
            value, error = None, None
            try:
                value = await _call_async(fs, step)
            except Exception as e:
                error = e
    finally:
        plan.close()
