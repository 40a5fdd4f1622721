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
"""Random object-graph generation.

InstanceGenerator walks type descriptors and builds fully populated object
graphs. For every class node it:

1. asks the policy for an implementation class and, if it differs, switches
   to that class with bindings inferred from the declared type;
2. hands the node to ``policy.on_recursion`` when instances of the same type
   are already under construction above it;
3. otherwise asks ``policy.generate``, whose ``default`` callback constructs
   a zero instance (with a generated enclosing instance for inner classes)
   and populates it: mapping entries, collection items, then every
   non-static member the policy does not ignore.

Array (homogeneous tuple) nodes are filled element by element.

A policy whose ``on_recursion`` always calls ``default`` never terminates on
cyclic types; the walk ends in RecursionError.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
from typing import Any, Iterable, List, Optional, Tuple

from ..errors import ConstructionError, MemberAccessError
from ..reflect.construction import assign_member
from ..reflect.descriptor import ArrayDescriptor, ClassDescriptor, TypeDescriptor, describe
from ..types.signatures import type_parameters
from ..types.substitution import resolve
from .policy import DefaultGenerationPolicy, GenerationPolicy
from .state import GenerationState

logger = logging.getLogger(__name__)


class InstanceGenerator:
    """Builds random instances of declared types under a policy.

    Attributes:
        policy: Decides leaf values, sizes, implementations and recursion
    """

    def __init__(self, policy: Optional[GenerationPolicy] = None):
        self.policy = policy if policy is not None else DefaultGenerationPolicy()

    def generate(self, declared: Any) -> Any:
        """Generate an instance of a declared type or descriptor.

        Args:
            declared: A TypeDescriptor, or any form accepted by ``describe``

        Returns:
            The generated value; whatever the policy returns at the root

        Raises:
            ConstructionError: If an instance cannot be constructed
            MemberAccessError: If a member or container slot cannot be set
            TypeInferenceError: If the policy picks an implementation class
                off the declared type's chain
        """
        if isinstance(declared, TypeDescriptor):
            descriptor = declared
        else:
            descriptor = describe(declared).intern()
        return self._generate(descriptor, GenerationState())

    def _generate(self, descriptor: TypeDescriptor, state: GenerationState) -> Any:
        if isinstance(descriptor, ArrayDescriptor):
            return self._generate_array(descriptor, state)
        return self._generate_class(descriptor, state)

    def _generate_array(self, descriptor: ArrayDescriptor, state: GenerationState) -> Tuple[Any, ...]:
        length = self.policy.collection_size_for(descriptor, state.path)
        items = []
        for i in range(length):
            with state.index(i):
                items.append(self._generate(descriptor.element, state))
        return tuple(items)

    def _generate_class(self, descriptor: ClassDescriptor, state: GenerationState) -> Any:
        implementation = self.policy.implementation_class_for(descriptor, state.path)
        if implementation is not None and implementation is not descriptor.raw:
            substitute = descriptor.to_implementation(implementation)
            logger.debug(f"Generating {substitute!r} for {descriptor!r} at {state.path!r}")
            return self._generate_class(substitute, state)

        def default() -> Any:
            return self._construct(descriptor, state)

        def create() -> Any:
            return self.policy.generate(descriptor, state.path, default)

        live = state.instances_of(descriptor)
        if live:
            logger.debug(f"Recursion on {descriptor!r} at {state.path!r} ({len(live)} live)")
            return self.policy.on_recursion(descriptor, state.path, live, create)
        return create()

    # =========================================================================
    # Construction and population
    # =========================================================================

    def _construct(self, descriptor: ClassDescriptor, state: GenerationState) -> Any:
        enclosing = None
        if descriptor.enclosing is not None:
            enclosing = self._generate_class(descriptor.enclosing, state)
        instance = descriptor.new_instance(enclosing)
        state.push_instance(descriptor, instance)

        mapping = descriptor.supertype(cabc.Mapping)
        populated = instance
        if mapping is not None:
            populated = self._populate_mapping(descriptor, mapping, instance, state)
        else:
            collection = descriptor.supertype(cabc.Collection)
            if collection is not None:
                populated = self._populate_collection(descriptor, collection, instance, state)
        if populated is not instance:
            # Immutable containers are rebuilt; members see the rebuilt object.
            state.pop_instance(descriptor)
            state.push_instance(descriptor, populated)
            instance = populated

        for member in descriptor.members.values():
            if member.is_static or self.policy.is_ignored_member(descriptor, state.path, member):
                continue
            with state.field(member.name):
                value = self._generate(member.descriptor, state)
            assign_member(instance, member.name, value)

        state.pop_instance(descriptor)
        return instance

    def _populate_mapping(
        self,
        descriptor: ClassDescriptor,
        mapping: ClassDescriptor,
        instance: Any,
        state: GenerationState,
    ) -> Any:
        key_type, value_type = _argument_descriptors(mapping)
        size = self.policy.collection_size_for(descriptor, state.path)
        entries: List[Tuple[Any, Any]] = []
        for i in range(size):
            with state.index(i):
                with state.map_key():
                    key = self._generate(key_type, state)
                with state.map_value():
                    value = self._generate(value_type, state)
            entries.append((key, value))

        if not isinstance(instance, cabc.MutableMapping):
            return _rebuild(descriptor.raw, entries)
        try:
            for key, value in entries:
                instance[key] = value
        except (TypeError, ValueError) as exc:
            raise MemberAccessError(descriptor.raw, None, f"cannot insert entry: {exc}") from exc
        return instance

    def _populate_collection(
        self,
        descriptor: ClassDescriptor,
        collection: ClassDescriptor,
        instance: Any,
        state: GenerationState,
    ) -> Any:
        (item_type,) = _argument_descriptors(collection)
        size = self.policy.collection_size_for(descriptor, state.path)
        items = []
        for i in range(size):
            with state.index(i):
                items.append(self._generate(item_type, state))

        if isinstance(instance, cabc.MutableSequence):
            insert = instance.append
        elif isinstance(instance, cabc.MutableSet):
            insert = instance.add
        else:
            return _rebuild(descriptor.raw, items)
        try:
            for item in items:
                insert(item)
        except (TypeError, ValueError) as exc:
            raise MemberAccessError(descriptor.raw, None, f"cannot insert item: {exc}") from exc
        return instance


def _argument_descriptors(supertype: ClassDescriptor) -> Tuple[TypeDescriptor, ...]:
    """Descriptors of the type arguments a container supertype is bound to."""
    return tuple(
        describe(resolve(param, supertype.environment)).intern()
        for param in type_parameters(supertype.raw)
    )


def _rebuild(cls: type, contents: Iterable[Any]) -> Any:
    try:
        return cls(contents)
    except (TypeError, ValueError) as exc:
        raise ConstructionError(cls, f"cannot rebuild from generated contents: {exc}") from exc


def generate(declared: Any, policy: Optional[GenerationPolicy] = None) -> Any:
    """Generate a random instance of ``declared`` with a fresh state.

    Example:
        >>> generate(dict[str, list[int]], DefaultGenerationPolicy.seeded(7))
    """
    return InstanceGenerator(policy).generate(declared)
