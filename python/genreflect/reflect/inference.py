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
"""Cross-hierarchy type-parameter inference.

``infer(target, declared)`` computes how the type parameters of ``target``
must be bound for it to be consistent with an already-resolved descriptor.
``target`` may sit anywhere on the declared type's chain:

- the same class: the declared bindings are the answer;
- an ancestor: read the bindings of the matching supertype descriptor;
- a descendant: walk down one declared base at a time toward ``target``,
  checking at each step that the base reconstructs the declared binding and
  unifying the base's arguments against it.

Unification propagates bindings under a variance. Type arguments are matched
invariantly, wildcard bounds flip variance (upper bound contravariant, lower
bound covariant) and array elements are covariant.

The checks are best-effort: they reject common inconsistencies (arity
mismatch, violated bounds, broken chains) but are not a full verifier.

References:
    - PEP 484 (Generics: bounded and constrained type variables)
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Any, Dict, Optional, Sequence, TypeVar

from ..errors import TypeInferenceError
from ..types.environment import BindingEnvironment
from ..types.forms import (
    ArrayType,
    ParameterizedType,
    TypeVariable,
    WildcardType,
    declared_bounds,
    declared_constraints,
    declared_form,
    erasure,
    type_repr,
)
from ..types.nesting import enclosing_class, is_inner_class
from ..types.signatures import generic_bases, is_declared_subclass, type_parameters
from ..types.substitution import new_resolved_class_type, resolve
from .descriptor import ClassDescriptor, describe

logger = logging.getLogger(__name__)


class Variance(Enum):
    """How an inferred type may relate to the actual type at a position."""

    INVARIANT = auto()  # Exact match
    COVARIANT = auto()  # Inferred type is a subtype of the actual type
    CONTRAVARIANT = auto()  # Inferred type is a supertype of the actual type


# =============================================================================
# Inference across the subtype lattice
# =============================================================================


def infer(target: type, declared: ClassDescriptor) -> BindingEnvironment:
    """Infer the type-parameter bindings of ``target`` from a declared descriptor.

    Args:
        target: A class on the declared type's super/subtype chain
        declared: Descriptor carrying the known bindings

    Returns:
        Bindings for ``target``'s parameters (and those of its enclosing chain)

    Raises:
        TypeInferenceError: If ``target`` cannot be reconciled with ``declared``
    """
    if not isinstance(declared, ClassDescriptor):
        raise TypeInferenceError(f"Cannot infer {type_repr(target)} from {declared!r}")
    declared_raw = declared.raw
    if target is declared_raw:
        return declared.environment

    if is_declared_subclass(declared_raw, target):
        ancestor = declared.supertype(target)
        if ancestor is None:
            raise TypeInferenceError(
                f"{type_repr(target)} is not reachable from {declared!r}"
            )
        return ancestor.environment

    if is_declared_subclass(target, declared_raw):
        return _infer_descendant(target, declared)

    logger.debug(f"{type_repr(target)} is unrelated to {declared!r}")
    raise TypeInferenceError(
        f"{type_repr(target)} is neither a supertype nor a subtype of {declared!r}"
    )


def _infer_descendant(target: type, declared: ClassDescriptor) -> BindingEnvironment:
    for base in generic_bases(target):
        base_raw = erasure(base)
        if base_raw is declared.raw:
            return _infer_direct_subtype(target, base, declared)
        if is_declared_subclass(base_raw, declared.raw):
            logger.debug(f"Inferring {type_repr(target)} through {type_repr(base_raw)}")
            intermediate = describe(new_resolved_class_type(base_raw, infer(base_raw, declared)))
            return infer(target, intermediate)
    raise TypeInferenceError(
        f"No declared base of {type_repr(target)} leads to {type_repr(declared.raw)}"
    )


def _infer_direct_subtype(
    target: type, supertype: Any, declared: ClassDescriptor
) -> BindingEnvironment:
    # The base must reconstruct the declared type for some bindings
    unify({}, supertype, new_resolved_class_type(declared.raw, declared.environment))

    inferred: Dict[TypeVar, Any] = {}
    declared_params = type_parameters(declared.raw)
    if type_parameters(target) and isinstance(supertype, ParameterizedType):
        if len(supertype.args) != len(declared_params):
            raise TypeInferenceError(
                f"{supertype!r} does not match the parameters of {type_repr(declared.raw)}"
            )
        for arg, param in zip(supertype.args, declared_params):
            unify(inferred, arg, resolve(param, declared.environment))

    if is_inner_class(target):
        outer = enclosing_class(target)
        declared_outer = declared.enclosing
        while outer is not None and declared_outer is not None:
            if is_declared_subclass(outer, declared_outer.raw):
                inferred.update(infer(outer, declared_outer))
                declared_outer = declared_outer.enclosing
            outer = enclosing_class(outer)
    return BindingEnvironment(inferred)


# =============================================================================
# Unification
# =============================================================================


def unify(
    mapping: Dict[TypeVar, Any],
    to_infer: Any,
    actual: Any,
    variance: Variance = Variance.INVARIANT,
) -> None:
    """Unify a declared type against an actual type, recording bindings.

    Args:
        mapping: Bindings collected so far; updated in place
        to_infer: Declared type whose type variables are being inferred
        actual: The type it has to agree with
        variance: Relation required between ``to_infer`` and ``actual``

    Raises:
        TypeInferenceError: If the two types cannot be reconciled
    """
    to_infer = declared_form(to_infer)
    actual = declared_form(actual)
    match to_infer:
        case WildcardType():
            _unify_wildcard(mapping, to_infer, actual)
        case TypeVar() | TypeVariable():
            _unify_variable(mapping, to_infer, actual, variance)
        case ParameterizedType():
            _unify_parameterized(mapping, to_infer, actual, variance)
        case ArrayType():
            _unify_array(mapping, to_infer, actual)
        case _:
            _unify_raw(to_infer, actual, variance)


def unify_all(mapping: Dict[TypeVar, Any], to_infer: Sequence[Any], actual: Sequence[Any]) -> None:
    """Unify two argument lists pairwise, invariantly."""
    if len(to_infer) != len(actual):
        raise TypeInferenceError(
            f"Argument count mismatch: {len(to_infer)} declared, {len(actual)} actual"
        )
    for declared_arg, actual_arg in zip(to_infer, actual):
        unify(mapping, declared_arg, actual_arg)


def _unify_owners(mapping: Dict[TypeVar, Any], to_infer: Optional[Any], actual: Optional[Any]) -> None:
    if to_infer is None and actual is None:
        return
    if to_infer is None or actual is None:
        raise TypeInferenceError(f"Owner mismatch: {to_infer!r} vs {actual!r}")
    unify(mapping, to_infer, actual)


def _unify_wildcard(mapping: Dict[TypeVar, Any], wildcard: WildcardType, actual: Any) -> None:
    if isinstance(actual, WildcardType):
        unify_all(mapping, wildcard.lower, actual.lower)
        unify_all(mapping, wildcard.upper, actual.upper)
    elif wildcard.lower:
        unify(mapping, wildcard.lower[0], actual, Variance.COVARIANT)
    else:
        unify(mapping, wildcard.upper[0], actual, Variance.CONTRAVARIANT)


def _unify_variable(
    mapping: Dict[TypeVar, Any], variable: Any, actual: Any, variance: Variance
) -> None:
    if isinstance(variable, TypeVariable):
        original, bounds, constraints = variable.original, variable.bounds, ()
    else:
        original, bounds = variable, declared_bounds(variable)
        constraints = declared_constraints(variable)

    already_bound = original in mapping and mapping[original] == actual
    if variance is not Variance.CONTRAVARIANT:
        mapping[original] = actual
    if already_bound:
        # Self-referential bounds (T bound Comparable[T]) were checked on first binding
        return

    actual_raw = erasure(actual)
    for bound in bounds:
        bound_form = declared_form(bound)
        bound_raw = erasure(bound_form)
        if not _assignable(actual_raw, bound_raw):
            raise TypeInferenceError(
                f"{type_repr(actual)} does not satisfy bound {type_repr(bound_form)} of {original!r}"
            )
        if isinstance(bound_form, ParameterizedType):
            inferred = _rederive(bound_raw, actual)
            unify_all(mapping, bound_form.args, inferred.args)
            _unify_owners(mapping, bound_form.owner, inferred.owner)

    if constraints and not any(_assignable(actual_raw, erasure(c)) for c in constraints):
        raise TypeInferenceError(
            f"{type_repr(actual)} is not one of the constraints of {original!r}"
        )


def _unify_parameterized(
    mapping: Dict[TypeVar, Any], parameterized: ParameterizedType, actual: Any, variance: Variance
) -> None:
    if isinstance(actual, ParameterizedType):
        _unify_raw(parameterized.raw, actual.raw, variance)
        if variance is Variance.INVARIANT:
            unify_all(mapping, parameterized.args, actual.args)
            _unify_owners(mapping, parameterized.owner, actual.owner)
        else:
            inferred = _rederive(parameterized.raw, actual)
            unify_all(mapping, parameterized.args, inferred.args)
            _unify_owners(mapping, parameterized.owner, inferred.owner)
    elif isinstance(actual, WildcardType):
        if actual.lower:
            unify(mapping, parameterized, actual.lower[0], Variance.CONTRAVARIANT)
        else:
            unify(mapping, parameterized, actual.upper[0], Variance.COVARIANT)
    else:
        raise TypeInferenceError(f"Cannot unify {parameterized!r} with {type_repr(actual)}")


def _unify_array(mapping: Dict[TypeVar, Any], array: ArrayType, actual: Any) -> None:
    if isinstance(actual, ArrayType):
        unify(mapping, array.element, actual.element, Variance.COVARIANT)
    elif isinstance(actual, WildcardType):
        if actual.lower:
            unify(mapping, array, actual.lower[0], Variance.CONTRAVARIANT)
        else:
            unify(mapping, array, actual.upper[0], Variance.COVARIANT)
    else:
        raise TypeInferenceError(f"Cannot unify {array!r} with {type_repr(actual)}")


def _unify_raw(to_infer: Any, actual: Any, variance: Variance) -> None:
    to_infer_raw = erasure(to_infer)
    actual_raw = erasure(actual)
    if variance is Variance.INVARIANT:
        consistent = to_infer == actual
    elif variance is Variance.COVARIANT:
        consistent = _assignable(to_infer_raw, actual_raw)
    else:
        consistent = _assignable(actual_raw, to_infer_raw)
    if not consistent:
        logger.debug(f"{variance.name} mismatch: {type_repr(to_infer)} vs {type_repr(actual)}")
        raise TypeInferenceError(
            f"{type_repr(to_infer)} is not {variance.name.lower()} with {type_repr(actual)}"
        )


def _rederive(raw: type, actual: Any) -> ParameterizedType:
    """Re-express ``actual`` as a parameterization of ``raw`` (one of its supertypes)."""
    descriptor = describe(actual)
    if not isinstance(descriptor, ClassDescriptor):
        raise TypeInferenceError(f"{type_repr(actual)} is not a class type")
    inferred = new_resolved_class_type(raw, infer(raw, descriptor))
    if not isinstance(inferred, ParameterizedType):
        raise TypeInferenceError(f"{type_repr(raw)} has no type arguments to infer")
    return inferred


def _assignable(sub: type, sup: type) -> bool:
    if sub is sup or sup is object:
        return True
    try:
        return issubclass(sub, sup)
    except TypeError:
        # Non-runtime-checkable protocols
        return is_declared_subclass(sub, sup)
