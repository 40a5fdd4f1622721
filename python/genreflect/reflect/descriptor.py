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
"""Type descriptors.

A type descriptor is the resolved, cached view of one declared type:

- ClassDescriptor: a class together with the bindings of its type parameters
  (and, for inner classes, those of its enclosing types). It exposes the
  resolved superclass and interfaces, the member layout, and zero-instance
  construction.
- ArrayDescriptor: a homogeneous tuple type and its element descriptor.

``describe`` builds descriptors from any declared form. Descriptors compare
structurally (raw class plus bindings), and ``intern()`` publishes one
instance per declared type so that repeated lookups return the same object.

Superclass, interfaces and members are computed lazily with
``functools.cached_property``; concurrent first access may compute twice but
always yields equal values.

References:
    - PEP 484 (User-defined generic types)
    - PEP 585 (Type hinting generics in standard collections)
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import inspect
import logging
import typing
import uuid
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, TypeVar

from ..errors import ConstructionError, MemberAccessError, NoSuchMemberError
from ..types.environment import EMPTY_ENVIRONMENT, BindingEnvironment
from ..types.forms import (
    ArrayType,
    NoneType,
    ParameterizedType,
    TypeVariable,
    WildcardType,
    bound_of,
    declared_form,
    type_repr,
)
from ..types.nesting import enclosing_class, is_inner_class
from ..types.signatures import ClassSignature, signature_of, type_parameters
from ..types.substitution import (
    new_resolved_array_type,
    new_resolved_class_type,
    resolve,
)
from . import cache
from .construction import assign_member, construct, read_member

logger = logging.getLogger(__name__)


class TypeDescriptor:
    """Common interface of class and array descriptors.

    Attributes:
        raw: The raw class values of this type are instances of
        key: Normalized declared form the descriptor is interned under
    """

    raw: type
    key: Any

    @property
    def resolved_type(self) -> Any:
        """Canonical structural form of this type."""
        raise NotImplementedError

    def new_instance(self, *args: Any) -> Any:
        raise NotImplementedError

    def intern(self) -> TypeDescriptor:
        """Publish this descriptor in the process-wide cache.

        Returns:
            The interned descriptor for this declared type; ``self`` unless
            another equal descriptor was published first
        """
        key = self.key if self.key is not None else self.resolved_type
        winner = cache.publish(key, self)
        if winner is not self:
            logger.debug(f"Descriptor for {type_repr(key)} already interned")
        return winner

    def __repr__(self) -> str:
        return f"{type(self).__name__}({type_repr(self.resolved_type)})"


@dataclass(frozen=True)
class Member:
    """One member (annotated attribute) in a class's layout.

    Attributes:
        name: Attribute name
        declaring_class: Class whose annotations declare the member
        annotation: The declared annotation, unresolved
        environment: Bindings of the declaring class at this descriptor's level
        is_static: True for ``ClassVar`` members, which are never populated
    """

    name: str
    declaring_class: type
    annotation: Any
    environment: BindingEnvironment = field(compare=False, repr=False)
    is_static: bool = False

    @cached_property
    def descriptor(self) -> TypeDescriptor:
        """Descriptor of the member's resolved type."""
        return describe(resolve(self.annotation, self.environment))


@dataclass(frozen=True, repr=False)
class ClassDescriptor(TypeDescriptor):
    """A class with resolved type-parameter bindings.

    Attributes:
        raw: The class
        environment: Bindings of the class's type parameters, merged with
            those of the enclosing chain for inner classes
        enclosing: Descriptor of the enclosing class for inner classes
        key: Normalized declared form this descriptor was built from
    """

    raw: type
    environment: BindingEnvironment = EMPTY_ENVIRONMENT
    enclosing: Optional[ClassDescriptor] = field(default=None, compare=False)
    key: Any = field(default=None, compare=False)

    @cached_property
    def resolved_type(self) -> Any:
        return new_resolved_class_type(self.raw, self.environment)

    @cached_property
    def signature(self) -> ClassSignature:
        return signature_of(self.raw)

    # =========================================================================
    # Subtype lattice
    # =========================================================================

    @cached_property
    def superclass(self) -> Optional[ClassDescriptor]:
        """Descriptor of the declared superclass, resolved against this level."""
        declared = self.signature.superclass
        if declared is None:
            return None
        return self._describe_supertype(declared)

    @cached_property
    def interface_map(self) -> Mapping[type, ClassDescriptor]:
        """Implemented interfaces by raw class, most derived binding first."""
        result: Dict[type, ClassDescriptor] = {}
        for declared in self.signature.interfaces:
            _collect_interface(self._describe_supertype(declared), result)
        if self.superclass is not None:
            for raw, descriptor in self.superclass.interface_map.items():
                result.setdefault(raw, descriptor)
        return MappingProxyType(result)

    @property
    def interfaces(self) -> Tuple[ClassDescriptor, ...]:
        return tuple(self.interface_map.values())

    def supertype(self, cls: type) -> Optional[ClassDescriptor]:
        """Return the ancestor descriptor (or self) whose raw class is ``cls``."""
        level: Optional[ClassDescriptor] = self
        while level is not None:
            if level.raw is cls:
                return level
            found = level.interface_map.get(cls)
            if found is not None:
                return found
            level = level.superclass
        return None

    def _describe_supertype(self, declared: Any) -> ClassDescriptor:
        form = declared_form(declared)
        if isinstance(form, ArrayType):
            # Subclasses of tuple
            form = ParameterizedType(tuple, (form.element,))
        elif isinstance(form, type) and is_inner_class(form):
            # A bare inner base sees this level's bindings of its owners
            form = new_resolved_class_type(form, self.environment)
        if isinstance(form, ParameterizedType):
            return _describe_parameterized(resolve(form, self.environment))
        return _describe_class(form)

    # =========================================================================
    # Members
    # =========================================================================

    @cached_property
    def members(self) -> Mapping[str, Member]:
        """Annotated members by name; subclass members shadow base members."""
        result: Dict[str, Member] = {}
        for klass in self.raw.__mro__:
            own = inspect.get_annotations(klass)
            if not own:
                continue
            level = self.supertype(klass) or _describe_class(klass)
            hints = _evaluated_annotations(klass)
            for name, declared in own.items():
                if name in result or (name.startswith("__") and name.endswith("__")):
                    continue
                hint = hints.get(name, declared)
                if isinstance(hint, dataclasses.InitVar):
                    continue
                is_static = hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar
                if hint is typing.ClassVar:
                    hint = object
                result[name] = Member(name, klass, hint, level.environment, is_static)
        return MappingProxyType(result)

    def member(self, name: str) -> Member:
        try:
            return self.members[name]
        except KeyError:
            raise NoSuchMemberError(self.raw, name) from None

    def member_type(self, name: str) -> TypeDescriptor:
        """Descriptor of a member's resolved type."""
        return self.member(name).descriptor

    def get_member(self, instance: Any, name: str) -> Any:
        self.member(name)
        return read_member(instance, name)

    def set_member(self, instance: Any, name: str, value: Any) -> None:
        self.member(name)
        assign_member(instance, name, value)

    # =========================================================================
    # Construction
    # =========================================================================

    def new_instance(self, enclosing: Any = None) -> Any:
        """Create a zero-initialized instance.

        Args:
            enclosing: Enclosing instance for inner classes; synthesized
                with ``new_instance`` of the enclosing descriptor if omitted

        Raises:
            ConstructionError: If the class cannot be constructed, or an
                enclosing instance is passed for a class that takes none
        """
        needs_enclosing = self.enclosing is not None
        if enclosing is not None and not needs_enclosing:
            raise ConstructionError(self.raw, "it does not take an enclosing instance")
        if needs_enclosing and enclosing is None:
            enclosing = self.enclosing.new_instance()
        preferred = self.__dict__.get("_strategy")
        instance, strategy = construct(self.raw, enclosing, needs_enclosing, preferred)
        if preferred is None:
            logger.debug(f"Constructing {self.raw.__qualname__} with {strategy.name}")
            self.__dict__["_strategy"] = strategy
        return instance

    def to_implementation(self, cls: type) -> ClassDescriptor:
        """Descriptor of ``cls`` with bindings inferred from this descriptor.

        Raises:
            TypeInferenceError: If ``cls`` is not on this type's chain
        """
        found = self._implementations.get(cls)
        if found is None:
            from .inference import infer

            found = describe(new_resolved_class_type(cls, infer(cls, self)))
            found = self._implementations.setdefault(cls, found)
        return found

    @cached_property
    def _implementations(self) -> Dict[type, ClassDescriptor]:
        return {}


@dataclass(frozen=True, repr=False)
class ArrayDescriptor(TypeDescriptor):
    """A homogeneous tuple type.

    Attributes:
        element: Descriptor of the element type
        key: Normalized declared form this descriptor was built from
    """

    element: TypeDescriptor
    key: Any = field(default=None, compare=False)

    @property
    def raw(self) -> type:
        return tuple

    @cached_property
    def resolved_type(self) -> ArrayType:
        return new_resolved_array_type(self.element.resolved_type)

    def new_instance(self, length: int = 0) -> Tuple[Any, ...]:
        return (None,) * length


# =============================================================================
# Factories
# =============================================================================


def describe(declared: Any) -> TypeDescriptor:
    """Return the descriptor of a declared type.

    Interned descriptors are returned as-is; otherwise a fresh descriptor is
    built (call ``intern()`` to publish it). Type variables and wildcards are
    described through their bound.

    Args:
        declared: Any declared type form (class, typing alias, node, TypeVar)

    Returns:
        A ClassDescriptor or ArrayDescriptor
    """
    form = declared_form(declared)
    match form:
        case ArrayType():
            return _describe_array(form)
        case ParameterizedType():
            return _describe_parameterized(form)
        case TypeVar() | TypeVariable() | WildcardType():
            return describe(bound_of(form))
        case _:
            return _describe_class(form)


def _describe_array(form: ArrayType) -> ArrayDescriptor:
    cached = cache.lookup(form)
    if cached is not None:
        return cached
    return ArrayDescriptor(describe(form.element), key=form)


def _describe_class(cls: type) -> ClassDescriptor:
    cached = cache.lookup(cls)
    if cached is not None and isinstance(cached, ClassDescriptor):
        return cached
    if not is_inner_class(cls):
        return ClassDescriptor(cls, EMPTY_ENVIRONMENT, None, key=cls)
    outer = _enclosing_class_of(cls)
    enclosing = _describe_class(outer)
    return ClassDescriptor(cls, enclosing.environment, enclosing, key=cls)


def _describe_parameterized(form: ParameterizedType) -> ClassDescriptor:
    cached = cache.lookup(form)
    if cached is not None:
        return cached
    raw = form.raw
    params = type_parameters(raw)
    if len(params) != len(form.args):
        raise TypeError(
            f"{type_repr(raw)} takes {len(params)} type arguments, got {len(form.args)}"
        )
    environment = EMPTY_ENVIRONMENT
    enclosing = None
    if is_inner_class(raw):
        owner = form.owner if form.owner is not None else _enclosing_class_of(raw)
        enclosing = describe(owner)
        if not isinstance(enclosing, ClassDescriptor):
            raise TypeError(f"Owner of {type_repr(raw)} must be a class, got {owner!r}")
        environment = enclosing.environment
    environment = environment.bind_many({p: resolve(a) for p, a in zip(params, form.args)})
    return ClassDescriptor(raw, environment, enclosing, key=form)


def _enclosing_class_of(cls: type) -> type:
    outer = enclosing_class(cls)
    if outer is None:
        raise TypeError(
            f"Cannot locate the enclosing class of inner class {cls.__qualname__}; "
            f"inner classes must be reachable from their module"
        )
    return outer


def _collect_interface(descriptor: ClassDescriptor, result: Dict[type, ClassDescriptor]) -> None:
    if descriptor.raw is object or descriptor.raw in result:
        return
    result[descriptor.raw] = descriptor
    for raw, inherited in descriptor.interface_map.items():
        result.setdefault(raw, inherited)
    if descriptor.superclass is not None:
        _collect_interface(descriptor.superclass, result)


def _evaluated_annotations(klass: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(klass)
    except (NameError, TypeError) as exc:
        raise MemberAccessError(klass, None, f"cannot evaluate annotations: {exc}") from exc


# Scalar leaf types are interned up front
for _leaf in (
    object,
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    NoneType,
    decimal.Decimal,
    uuid.UUID,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
):
    describe(_leaf).intern()
