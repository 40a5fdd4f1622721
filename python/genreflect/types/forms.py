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
"""Structural type forms.

Every declared type accepted by genreflect normalizes to exactly one of five
shapes, and every algorithm in the package (substitution, inference,
generation) is a match over them:

    raw class        the class object itself (``int``, ``Box``)
    parameterized    ParameterizedType(raw, args, owner)
    array            ArrayType(element), spelled ``tuple[X, ...]``
    wildcard         WildcardType(upper, lower), spelled ``Extends[X]``/``Super[X]``
    type variable    ``typing.TypeVar`` as declared, or a TypeVariable
                     placeholder once resolved without a binding

The node classes are frozen dataclasses, so resolved trees are hashable and
compare structurally. They double as declared types: a ParameterizedType can
appear in annotations, as a typing argument, or as a base class (its owner is
preserved in ``__orig_bases__``).

Wildcards keep the single-bound rule: at most one upper and one lower bound.
"""

from __future__ import annotations

import sys
import types
import typing
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple, TypeVar

from .nesting import enclosing_class, is_inner_class

NoneType = type(None)


# =============================================================================
# Node types
# =============================================================================


@dataclass(frozen=True)
class ParameterizedType:
    """A generic class applied to type arguments.

    Attributes:
        raw: The generic class
        args: Actual type arguments, one per declared type parameter
        owner: Enclosing type for inner classes (a class or ParameterizedType)
    """

    raw: type
    args: Tuple[Any, ...]
    owner: Optional[Any] = None

    def __mro_entries__(self, bases: Tuple[Any, ...]) -> Tuple[type, ...]:
        return (self.raw,)

    @property
    def __parameters__(self) -> Tuple[TypeVar, ...]:
        return tuple(type_variables(self))

    def __repr__(self) -> str:
        prefix = type_repr(self.raw)
        if self.owner is not None and isinstance(self.owner, ParameterizedType):
            prefix = f"{type_repr(self.owner)}.{self.raw.__name__}"
        if not self.args:
            return prefix
        return f"{prefix}[{', '.join(type_repr(a) for a in self.args)}]"


@dataclass(frozen=True)
class ArrayType:
    """A homogeneous, fixed-length sequence type (``tuple[X, ...]``)."""

    element: Any

    def __repr__(self) -> str:
        return f"tuple[{type_repr(self.element)}, ...]"


@dataclass(frozen=True)
class WildcardType:
    """An existential type argument with single upper and lower bounds.

    Attributes:
        upper: One-element tuple holding the upper bound (``object`` if unbounded)
        lower: Empty, or a one-element tuple holding the lower bound
    """

    upper: Tuple[Any, ...] = (object,)
    lower: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if len(self.upper) != 1 or len(self.lower) > 1:
            raise ValueError(
                f"Wildcards take exactly one upper and at most one lower bound, "
                f"got upper={self.upper!r} lower={self.lower!r}"
            )

    def __repr__(self) -> str:
        if self.lower:
            return f"? super {type_repr(self.lower[0])}"
        if self.upper[0] is object:
            return "?"
        return f"? extends {type_repr(self.upper[0])}"


@dataclass(frozen=True)
class TypeVariable:
    """Placeholder for a type parameter that resolved without a binding.

    Attributes:
        original: The declared ``typing.TypeVar``
        bounds: Its bounds, already resolved
    """

    original: TypeVar
    bounds: Tuple[Any, ...]

    def __repr__(self) -> str:
        return repr(self.original)


class _WildcardForm:
    """Subscriptable wildcard constructor: ``Extends[Number]``, ``Super[int]``."""

    __slots__ = ("_name", "_lower")

    def __init__(self, name: str, lower: bool):
        self._name = name
        self._lower = lower

    def __getitem__(self, bound: Any) -> WildcardType:
        bound = declared_form(bound)
        if self._lower:
            return WildcardType(upper=(object,), lower=(bound,))
        return WildcardType(upper=(bound,), lower=())

    def __repr__(self) -> str:
        return self._name


Extends = _WildcardForm("Extends", lower=False)
Super = _WildcardForm("Super", lower=True)
WILDCARD = WildcardType()

TYPE_NODES = (ParameterizedType, ArrayType, WildcardType, TypeVariable)


# =============================================================================
# Normalization
# =============================================================================


def parameterize(raw: type, *args: Any, owner: Any = None) -> ParameterizedType:
    """Build a ParameterizedType, normalizing the arguments.

    Inner classes default their owner to the (raw) enclosing class. Pass an
    explicit owner such as ``Outer[str]`` to parameterize through the owner.
    """
    if not isinstance(raw, type):
        raise TypeError(f"Cannot parameterize non-class {raw!r}")
    if owner is None:
        if is_inner_class(raw):
            owner = enclosing_class(raw)
    else:
        owner = declared_form(owner)
    return ParameterizedType(raw, tuple(declared_form(a) for a in args), owner)


def declared_form(t: Any) -> Any:
    """Normalize a declared type into one of the five structural shapes.

    Raises:
        TypeError: For forms with no counterpart (unions of several types,
            heterogeneous tuples, Literal, Callable, string forward references)
    """
    if isinstance(t, (TYPE_NODES, TypeVar)):
        return t
    if t is typing.Any:
        return object
    if t is None:
        return NoneType

    origin = typing.get_origin(t)
    if origin is not None:
        return _alias_form(t, origin, typing.get_args(t))

    if isinstance(t, type):
        if t is tuple:
            return ArrayType(object)
        return t
    raise TypeError(f"Unsupported declared type: {t!r}")


def _alias_form(t: Any, origin: Any, args: Tuple[Any, ...]) -> Any:
    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in args if a is not NoneType]
        if len(members) == 1:
            return declared_form(members[0])
        raise TypeError(f"Union types are not supported: {t!r}")
    if origin in (typing.Annotated, typing.ClassVar, typing.Final):
        return declared_form(args[0])
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return ArrayType(declared_form(args[0]))
        if not args:
            return ArrayType(object)
        raise TypeError(f"Only homogeneous tuples (tuple[X, ...]) are supported: {t!r}")
    if not isinstance(origin, type):
        raise TypeError(f"Unsupported declared type: {t!r}")
    if not args:
        return declared_form(origin)
    return parameterize(origin, *args)


# =============================================================================
# Bounds and erasure
# =============================================================================


def declared_bounds(var: TypeVar) -> Tuple[Any, ...]:
    """Return the declared upper bounds of a TypeVar (``(object,)`` if none)."""
    bound = var.__bound__
    if bound is None:
        return (object,)
    if isinstance(bound, typing.ForwardRef):
        bound = _evaluate_forward_ref(var, bound)
    return (declared_form(bound),)


def declared_constraints(var: TypeVar) -> Tuple[Any, ...]:
    """Return the value constraints of a constrained TypeVar (``TypeVar("N", int, float)``)."""
    constraints = []
    for c in var.__constraints__:
        if isinstance(c, typing.ForwardRef):
            c = _evaluate_forward_ref(var, c)
        constraints.append(declared_form(c))
    return tuple(constraints)


def _evaluate_forward_ref(var: TypeVar, ref: typing.ForwardRef) -> Any:
    module = sys.modules.get(getattr(var, "__module__", ""), None)
    namespace = vars(module) if module is not None else {}
    return eval(ref.__forward_arg__, namespace)  # noqa: S307


def bound_of(t: Any) -> Any:
    """Return the single most representative bound of a type.

    Type variables report their first bound, wildcards their lower bound if
    present and their upper bound otherwise. Other types are their own bound.
    """
    form = declared_form(t)
    match form:
        case TypeVariable(bounds=bounds):
            return bounds[0]
        case WildcardType(upper=upper, lower=lower):
            return lower[0] if lower else upper[0]
        case TypeVar():
            return declared_bounds(form)[0]
        case _:
            return form


def erasure(t: Any) -> type:
    """Return the raw class a type erases to."""
    form = declared_form(t)
    match form:
        case ParameterizedType(raw=raw):
            return raw
        case ArrayType():
            return tuple
        case TypeVariable() | WildcardType() | TypeVar():
            return erasure(bound_of(form))
        case _:
            return form


def type_variables(t: Any) -> Iterator[TypeVar]:
    """Yield the distinct TypeVars occurring in a type, in first-seen order."""
    seen = set()

    def walk(node: Any) -> Iterator[TypeVar]:
        match node:
            case TypeVar():
                if node not in seen:
                    seen.add(node)
                    yield node
            case TypeVariable(original=original):
                yield from walk(original)
            case ParameterizedType(args=args, owner=owner):
                if owner is not None:
                    yield from walk(owner)
                for arg in args:
                    yield from walk(arg)
            case ArrayType(element=element):
                yield from walk(element)
            case WildcardType(upper=upper, lower=lower):
                for b in upper + lower:
                    yield from walk(b)

    return walk(t)


def type_repr(t: Any) -> str:
    """Short human readable form of a type, in the style of ``typing``."""
    if isinstance(t, type):
        if t is NoneType:
            return "None"
        if t.__module__ == "builtins":
            return t.__qualname__
        return f"{t.__module__}.{t.__qualname__}"
    if t is Ellipsis:
        return "..."
    return repr(t)
