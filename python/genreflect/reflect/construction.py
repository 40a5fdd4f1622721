# Copyright Rand Arete @ Ananke 2025
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
# ==============================================================================
"""Zero-argument construction and member assignment.

A zero instance is produced the way the class allows it with the least
information: calling it with default-valued arguments, or failing that,
allocating it through ``__new__`` without running ``__init__``. Required
parameters receive ``0``/``0.0``/``0j``/``False`` when annotated with a
numeric or boolean type and ``None`` otherwise.

Member assignment goes through ``object.__setattr__`` so frozen dataclasses
and classes with restrictive ``__setattr__`` can still be populated.
"""

from __future__ import annotations

import inspect
import logging
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ConstructionError, MemberAccessError
from ..types.nesting import bind_enclosing_instance

logger = logging.getLogger(__name__)

_ZERO_VALUES: Dict[Any, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    complex: 0j,
    "bool": False,
    "int": 0,
    "float": 0.0,
    "complex": 0j,
}


class ConstructionStrategy(Enum):
    """How a zero instance is obtained."""

    CALL = auto()  # cls(*zero_args)
    ALLOCATE = auto()  # cls.__new__(cls), __init__ skipped


def zero_arguments(cls: type) -> Tuple[List[Any], Dict[str, Any]]:
    """Return positional and keyword zero values for the required parameters of ``cls``."""
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return [], {}
    args: List[Any] = []
    kwargs: Dict[str, Any] = {}
    for parameter in signature.parameters.values():
        if parameter.default is not inspect.Parameter.empty:
            continue
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        value = _zero_value(parameter.annotation)
        if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
            args.append(value)
        else:
            kwargs[parameter.name] = value
    return args, kwargs


def _zero_value(annotation: Any) -> Any:
    try:
        return _ZERO_VALUES.get(annotation)
    except TypeError:
        # Unhashable annotation objects
        return None


def instantiate(
    cls: type, strategy: ConstructionStrategy, enclosing: Optional[Any], needs_enclosing: bool
) -> Any:
    """Create an instance of ``cls`` with one strategy; exceptions propagate."""
    if strategy is ConstructionStrategy.CALL:
        args, kwargs = zero_arguments(cls)
        if needs_enclosing:
            return cls(enclosing, *args, **kwargs)
        return cls(*args, **kwargs)
    instance = cls.__new__(cls)
    if needs_enclosing:
        bind_enclosing_instance(instance, enclosing)
    return instance


def construct(
    cls: type,
    enclosing: Optional[Any] = None,
    needs_enclosing: bool = False,
    preferred: Optional[ConstructionStrategy] = None,
) -> Tuple[Any, ConstructionStrategy]:
    """Create a zero instance, trying each strategy until one succeeds.

    Args:
        cls: Class to instantiate
        enclosing: Enclosing instance for inner classes
        needs_enclosing: Whether ``cls`` takes an enclosing instance
        preferred: Strategy known to work for ``cls``; tried alone if given

    Returns:
        The instance and the strategy that produced it

    Raises:
        ConstructionError: If no strategy succeeds
    """
    strategies = (preferred,) if preferred is not None else tuple(ConstructionStrategy)
    failure: Optional[Exception] = None
    for strategy in strategies:
        try:
            return instantiate(cls, strategy, enclosing, needs_enclosing), strategy
        except Exception as exc:
            logger.debug(f"{strategy.name} construction of {cls.__qualname__} failed: {exc!r}")
            failure = exc
    raise ConstructionError(
        cls, f"no constructor succeeds with zero arguments ({failure!r})"
    ) from failure


def assign_member(instance: Any, name: str, value: Any) -> None:
    """Set a member, bypassing any custom or frozen ``__setattr__``."""
    try:
        object.__setattr__(instance, name, value)
    except (AttributeError, TypeError) as exc:
        raise MemberAccessError(type(instance), name, str(exc)) from exc


def read_member(instance: Any, name: str) -> Any:
    try:
        return object.__getattribute__(instance, name)
    except AttributeError as exc:
        raise MemberAccessError(type(instance), name, str(exc)) from exc


def has_member_value(instance: Any, name: str) -> bool:
    """Whether a member currently holds a value on ``instance``."""
    try:
        object.__getattribute__(instance, name)
    except AttributeError:
        return False
    return True
