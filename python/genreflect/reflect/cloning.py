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
"""Shallow and deep cloning on top of descriptors.

Clones are built from the same primitives the instance generator uses: a
zero instance from ``ClassDescriptor.new_instance`` (keeping or cloning the
enclosing instance of inner classes), then member-by-member copying of the
annotated layout, then the contents of mutable collections and mappings.

Deep clones keep shared references and cycles intact through an identity
memo keyed by ``id()``, in the manner of ``copy.deepcopy``.
"""

from __future__ import annotations

import collections.abc as cabc
import datetime
import decimal
import enum
import uuid
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from ..errors import MemberAccessError
from ..types.forms import NoneType
from ..types.nesting import outer_instance
from ..types.signatures import is_standard_library_class
from .construction import assign_member, has_member_value, read_member
from .descriptor import ClassDescriptor, Member, describe


class CloneOptions(Protocol):
    """Decides what cloning copies."""

    def is_reassignable(self, value: Any) -> bool:
        """Whether ``value`` is immutable and can be shared by the clone."""
        ...

    def is_ignored_member(self, descriptor: ClassDescriptor, member: Member) -> bool:
        """Whether ``member`` is left at its zero value in the clone."""
        ...


class DefaultCloneOptions:
    """Shares immutable scalars and skips members declared by the standard library."""

    REASSIGNABLE_TYPES: Tuple[type, ...] = (
        NoneType,
        bool,
        int,
        float,
        complex,
        str,
        bytes,
        decimal.Decimal,
        uuid.UUID,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        datetime.tzinfo,
        enum.Enum,
        type,
    )

    def is_reassignable(self, value: Any) -> bool:
        return isinstance(value, self.REASSIGNABLE_TYPES)

    def is_ignored_member(self, descriptor: ClassDescriptor, member: Member) -> bool:
        return is_standard_library_class(member.declaring_class)


DEFAULT_CLONE_OPTIONS = DefaultCloneOptions()

_IMMUTABLE_CONTAINERS = (tuple, frozenset)


def shallow_clone(value: Any, options: Optional[CloneOptions] = None) -> Any:
    """Copy an object's members and contents into a fresh instance.

    Immutable values (and tuples/frozensets) are returned unchanged. Inner
    class clones share the original's enclosing instance.

    Raises:
        ConstructionError: If the type cannot be zero-constructed
        MemberAccessError: If a member or container slot cannot be written
    """
    options = options or DEFAULT_CLONE_OPTIONS
    if options.is_reassignable(value) or type(value) in _IMMUTABLE_CONTAINERS:
        return value
    descriptor = _class_descriptor(value)
    enclosing = outer_instance(value) if descriptor.enclosing is not None else None
    clone = descriptor.new_instance(enclosing)
    _copy_members(value, clone, descriptor, options, _identity)
    return _copy_contents(value, clone, _identity)


def deep_clone(
    value: Any,
    options: Optional[CloneOptions] = None,
    memo: Optional[Dict[int, Tuple[Any, Any]]] = None,
) -> Any:
    """Recursively clone an object graph.

    Tuples and frozensets are rebuilt from their cloned items, so they
    enter the memo only after their items. A cycle that runs back into a
    tuple before the tuple is finished gets a second, equal tuple at the
    back-reference; object identity inside the cycle is still preserved.

    Args:
        value: Root of the graph
        options: Clone options; DefaultCloneOptions if omitted
        memo: Identity memo ``id(original) -> (original, clone)``; shared
            across recursive calls so every object is cloned once

    Raises:
        ConstructionError: If a type cannot be zero-constructed
        MemberAccessError: If a member or container slot cannot be written
    """
    options = options or DEFAULT_CLONE_OPTIONS
    if memo is None:
        memo = {}
    if options.is_reassignable(value):
        return value
    seen = memo.get(id(value))
    if seen is not None:
        return seen[1]

    def clone_child(child: Any) -> Any:
        return deep_clone(child, options, memo)

    if type(value) in _IMMUTABLE_CONTAINERS:
        clone = type(value)(clone_child(item) for item in value)
        memo[id(value)] = (value, clone)
        return clone

    descriptor = _class_descriptor(value)
    enclosing = None
    if descriptor.enclosing is not None and outer_instance(value) is not None:
        enclosing = clone_child(outer_instance(value))
    clone = descriptor.new_instance(enclosing)
    memo[id(value)] = (value, clone)
    _copy_members(value, clone, descriptor, options, clone_child)
    return _copy_contents(value, clone, clone_child)


def _identity(value: Any) -> Any:
    return value


def _class_descriptor(value: Any) -> ClassDescriptor:
    descriptor = describe(type(value)).intern()
    if not isinstance(descriptor, ClassDescriptor):
        raise TypeError(f"Cannot clone values of type {type(value).__qualname__}")
    return descriptor


def _copy_members(
    source: Any,
    clone: Any,
    descriptor: ClassDescriptor,
    options: CloneOptions,
    transform: Callable[[Any], Any],
) -> None:
    for member in descriptor.members.values():
        if member.is_static or options.is_ignored_member(descriptor, member):
            continue
        if not has_member_value(source, member.name):
            continue
        assign_member(clone, member.name, transform(read_member(source, member.name)))


def _copy_contents(source: Any, clone: Any, transform: Callable[[Any], Any]) -> Any:
    try:
        if isinstance(source, cabc.MutableMapping):
            for key, item in source.items():
                clone[transform(key)] = transform(item)
        elif isinstance(source, cabc.MutableSequence):
            for item in source:
                clone.append(transform(item))
        elif isinstance(source, cabc.MutableSet):
            for item in source:
                clone.add(transform(item))
    except (TypeError, AttributeError) as exc:
        raise MemberAccessError(type(source), None, f"cannot copy contents: {exc}") from exc
    return clone
