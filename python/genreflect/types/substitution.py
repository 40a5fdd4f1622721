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
"""Type substitution.

``resolve`` rewrites a declared type against a binding environment into a
canonical resolved tree: classes, ParameterizedType, ArrayType, WildcardType,
and TypeVariable placeholders for parameters that have no binding. Resolved
trees carry no reference to the environment they came from, so they can be
compared, hashed, and described again later.

Resolution is pure and total over well-formed declared types. Resolving an
already-canonical tree returns an equal tree.
"""

from __future__ import annotations

from typing import Any, FrozenSet, Mapping, Tuple, TypeVar

from .environment import EMPTY_ENVIRONMENT
from .forms import (
    ArrayType,
    ParameterizedType,
    TypeVariable,
    WildcardType,
    declared_bounds,
    declared_form,
    erasure,
)
from .nesting import enclosing_class, is_inner_class
from .signatures import type_parameters


def resolve(t: Any, environment: Mapping = EMPTY_ENVIRONMENT) -> Any:
    """Substitute bound type parameters into a declared type.

    Args:
        t: Any declared type form
        environment: Mapping from TypeVar to bound type

    Returns:
        The canonical resolved type
    """
    return _resolve(declared_form(t), environment, frozenset())


def _resolve(form: Any, environment: Mapping, resolving: FrozenSet[TypeVar]) -> Any:
    match form:
        case ParameterizedType(raw=raw, args=args, owner=owner):
            return ParameterizedType(
                raw,
                _resolve_all(args, environment, resolving),
                None if owner is None else _resolve(declared_form(owner), environment, resolving),
            )
        case ArrayType(element=element):
            return ArrayType(_resolve(declared_form(element), environment, resolving))
        case WildcardType(upper=upper, lower=lower):
            return WildcardType(
                _resolve_all(upper, environment, resolving),
                _resolve_all(lower, environment, resolving),
            )
        case TypeVariable():
            return form
        case TypeVar():
            return _resolve_variable(form, environment, resolving)
        case _:
            return form


def _resolve_all(
    types: Tuple[Any, ...], environment: Mapping, resolving: FrozenSet[TypeVar]
) -> Tuple[Any, ...]:
    return tuple(_resolve(declared_form(t), environment, resolving) for t in types)


def _resolve_variable(
    var: TypeVar, environment: Mapping, resolving: FrozenSet[TypeVar]
) -> Any:
    if var in resolving:
        # Recursive bound or binding cycle: stop at the erased bound
        return TypeVariable(var, (erasure(declared_bounds(var)[0]),))
    resolving = resolving | {var}
    bound = environment.get(var)
    if bound is not None and bound is not var:
        return _resolve(declared_form(bound), environment, resolving)
    return TypeVariable(var, _resolve_all(declared_bounds(var), environment, resolving))


def new_resolved_class_type(cls: type, environment: Mapping = EMPTY_ENVIRONMENT) -> Any:
    """Build the resolved type of ``cls`` with its parameters taken from an environment.

    Unbound parameters become TypeVariable placeholders. Inner classes get an
    owner built the same way from the enclosing class. A class with no type
    arguments and a raw owner resolves to the class itself.
    """
    args = tuple(resolve(p, environment) for p in type_parameters(cls))
    owner = None
    if is_inner_class(cls):
        outer = enclosing_class(cls)
        if outer is not None:
            owner = new_resolved_class_type(outer, environment)
    if not args and (owner is None or isinstance(owner, type)):
        return cls
    return ParameterizedType(cls, args, owner)


def new_resolved_array_type(element: Any) -> ArrayType:
    """Build the resolved array type for an element type."""
    return ArrayType(resolve(element))
