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
"""Binding environments for generic type resolution.

A BindingEnvironment maps type parameters (``typing.TypeVar`` objects) to the
types they are bound to in some context. Environments are immutable: deriving
a child environment (for a subclass, or an inner class that sees its owner's
bindings) produces a new environment and never mutates the parent.

Backed by ``immutables.Map`` so that derived environments share structure and
are hashable, which lets descriptors use them as part of their identity.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, TypeVar

from immutables import Map as ImmutableMap

from .forms import type_repr


class BindingEnvironment(Mapping):
    """Immutable mapping from type parameters to bound types.

    Compares equal to any mapping with the same bindings, so
    ``infer(...) == {T: int}`` reads naturally in tests.
    """

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Optional[Iterable[Tuple[TypeVar, Any]]] = None):
        if isinstance(bindings, ImmutableMap):
            self._bindings = bindings
        elif isinstance(bindings, BindingEnvironment):
            self._bindings = bindings._bindings
        else:
            items = bindings.items() if isinstance(bindings, Mapping) else (bindings or ())
            self._bindings = ImmutableMap(items)

    def bind(self, parameter: TypeVar, bound: Any) -> BindingEnvironment:
        """Create a new environment with an additional binding.

        Args:
            parameter: The type parameter to bind
            bound: The type it is bound to

        Returns:
            A new BindingEnvironment with the binding added
        """
        return BindingEnvironment(self._bindings.set(parameter, bound))

    def bind_many(self, bindings: Mapping) -> BindingEnvironment:
        """Create a new environment with multiple bindings.

        Later bindings replace existing ones for the same parameter.
        """
        if not bindings:
            return self
        items = bindings._bindings if isinstance(bindings, BindingEnvironment) else bindings
        return BindingEnvironment(self._bindings.update(items))

    def lookup(self, parameter: TypeVar) -> Optional[Any]:
        """Look up the binding of a type parameter, or None if unbound."""
        return self._bindings.get(parameter)

    def contains(self, parameter: TypeVar) -> bool:
        return parameter in self._bindings

    def to_dict(self) -> Dict[TypeVar, Any]:
        return dict(self._bindings.items())

    # Mapping protocol

    def __getitem__(self, parameter: TypeVar) -> Any:
        return self._bindings[parameter]

    def __iter__(self) -> Iterator[TypeVar]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, parameter: object) -> bool:
        return parameter in self._bindings

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BindingEnvironment):
            return self._bindings == other._bindings
        if isinstance(other, Mapping):
            return dict(self._bindings.items()) == dict(other.items())
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._bindings)

    def __repr__(self) -> str:
        if not self._bindings:
            return "{}"
        parts = [f"{type_repr(k)}: {type_repr(v)}" for k, v in self._bindings.items()]
        return "{" + ", ".join(parts) + "}"


EMPTY_ENVIRONMENT = BindingEnvironment()


def create_environment(bindings: Optional[Mapping] = None) -> BindingEnvironment:
    """Create a binding environment from a plain mapping.

    Args:
        bindings: Optional mapping of parameter -> type

    Returns:
        A new BindingEnvironment
    """
    if not bindings:
        return EMPTY_ENVIRONMENT
    return BindingEnvironment(bindings)


def merge_environments(*environments: Mapping) -> BindingEnvironment:
    """Merge environments left to right; later bindings win."""
    result = EMPTY_ENVIRONMENT
    for env in environments:
        result = result.bind_many(env)
    return result
