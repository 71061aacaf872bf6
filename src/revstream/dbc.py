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

"""Design by contract utilities for :mod:`revstream`.

Contracts are off by default and cost a single flag check per call. Set
``REVSTREAM_DBC=1`` or use :func:`dbc_enabled` in tests to evaluate them.

A predicate receives the same arguments as the decorated callable (plus
``result=`` for postconditions) and returns ``bool``, ``None`` (failure), or a
``(bool, message)`` tuple.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from functools import wraps
from typing import ParamSpec, TypeVar, cast

__all__ = [
    "ContractResult",
    "dbc_active",
    "dbc_enabled",
    "disable_dbc",
    "enable_dbc",
    "ensure",
    "require",
]

P = ParamSpec("P")
R = TypeVar("R")

ContractResult = bool | tuple[bool, str] | tuple[bool] | None
ContractCallable = Callable[..., ContractResult | object]

_ENV_FLAG = "REVSTREAM_DBC"
_forced_state: bool | None = None


def dbc_active() -> bool:
    """Return ``True`` when contract checks should run."""

    if _forced_state is not None:
        return _forced_state
    value = os.getenv(_ENV_FLAG)
    if value is None:
        return False
    return value.strip().lower() not in {"", "0", "false", "off", "no"}


def enable_dbc() -> None:
    """Force contract enforcement on."""

    global _forced_state
    _forced_state = True


def disable_dbc() -> None:
    """Force contract enforcement off."""

    global _forced_state
    _forced_state = False


@contextmanager
def dbc_enabled(*, active: bool = True) -> Iterator[None]:
    """Temporarily force the contract flag inside a ``with`` block."""

    global _forced_state
    previous = _forced_state
    _forced_state = active
    try:
        yield
    finally:
        _forced_state = previous


def _normalize(result: ContractResult | object) -> tuple[bool, str | None]:
    if isinstance(result, tuple):
        items = cast(Sequence[object], result)
        if not items:
            raise TypeError("Contract callables must not return empty tuples")
        detail = str(items[1]) if len(items) > 1 else None
        return bool(items[0]), detail
    if result is None:
        return False, None
    return bool(result), None


def _evaluate(
    *,
    kind: str,
    func: Callable[..., object],
    predicate: ContractCallable,
    args: tuple[object, ...],
    kwargs: Mapping[str, object],
) -> None:
    name = getattr(func, "__qualname__", repr(func))
    try:
        result = predicate(*args, **kwargs)
    except AssertionError:
        raise
    except Exception as exc:
        msg = f"{kind} contract for {name} raised {type(exc).__name__}: {exc}"
        raise AssertionError(msg) from exc
    outcome, detail = _normalize(result)
    if outcome:
        return
    predicate_name = getattr(predicate, "__name__", repr(predicate))
    msg = f"{kind} contract for {name} failed via {predicate_name}."
    if detail:
        msg = f"{msg} Details: {detail}"
    raise AssertionError(msg)


def require(
    *predicates: ContractCallable,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Validate preconditions before invoking the wrapped callable."""

    if not predicates:
        raise ValueError("@require expects at least one predicate")

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            if dbc_active():
                for predicate in predicates:
                    _evaluate(
                        kind="require",
                        func=func,
                        predicate=predicate,
                        args=tuple(args),
                        kwargs=dict(kwargs),
                    )
            return func(*args, **kwargs)

        return wrapped

    return decorator


def ensure(
    *predicates: ContractCallable,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Validate postconditions against the value the callable returns.

    Predicates are called with the original arguments and ``result=``. Calls
    that raise are not checked.
    """

    if not predicates:
        raise ValueError("@ensure expects at least one predicate")

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            result = func(*args, **kwargs)
            if dbc_active():
                for predicate in predicates:
                    _evaluate(
                        kind="ensure",
                        func=func,
                        predicate=predicate,
                        args=tuple(args),
                        kwargs={**kwargs, "result": result},
                    )
            return result

        return wrapped

    return decorator
