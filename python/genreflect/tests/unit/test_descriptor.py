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
"""Unit tests for type descriptors.

Tests for describe, interning, the subtype lattice, member layout and
zero-instance construction.
"""

import collections.abc as cabc
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

import pytest

from genreflect import (
    ArrayDescriptor,
    ClassDescriptor,
    ConstructionError,
    MemberAccessError,
    NoSuchMemberError,
    describe,
    outer_instance,
)
from genreflect.tests.fixtures.models import (
    Box,
    FrozenPoint,
    Library,
    N,
    OuterClass,
    Outer2,
    Pair,
    S,
    Shadowing,
    Shelf,
    StringBox,
    T,
    WithClassVar,
)
from genreflect.reflect import cache
from genreflect.types import (
    ArrayType,
    Extends,
    ParameterizedType,
    Super,
    TypeVariable,
    parameterize,
)


class TestDescribe:
    """Tests for describe and interning."""

    def test_leaf_types_preinterned(self):
        """Scalar leaves are interned at import."""
        assert describe(int) is describe(int)
        assert describe(str).intern() is describe(str)

    def test_describe_does_not_publish(self):
        """Only intern() adds descriptors to the cache."""
        declared = dict[bytes, Pair[float, complex]]
        before = cache.size()
        describe(declared)
        assert cache.size() == before
        describe(declared).intern()
        assert cache.size() == before + 1

    def test_concurrent_intern_single_winner(self):
        """Threads interning the same new type all get one descriptor."""
        fresh = type("Fresh", (), {})
        declared = dict[str, Pair[fresh, int]]
        workers = 8
        barrier = threading.Barrier(workers)

        def intern_together():
            built = describe(declared)
            barrier.wait()
            return built, built.intern()

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = [f.result() for f in [pool.submit(intern_together) for _ in range(workers)]]

        winner = results[0][1]
        assert all(interned is winner for _, interned in results)
        assert sum(built is winner for built, _ in results) == 1
        assert describe(declared) is winner

    def test_intern_idempotent(self):
        """Interning twice returns the same instance."""
        first = describe(dict[str, Box[int]]).intern()
        assert first.intern() is first
        assert describe(dict[str, Box[int]]) is first

    def test_typing_alias_equivalence(self):
        """typing aliases and builtin generics describe the same type."""
        assert describe(List[int]) == describe(list[int])
        assert describe(list[float]).intern() is describe(List[float]).intern()

    def test_distinct_classes_same_name(self):
        """Classes are compared by identity, not by name."""

        def make():
            class Thing:
                pass

            return Thing

        assert describe(make()) != describe(make())

    def test_parameterized(self):
        """Type arguments are bound to the class's parameters."""
        descriptor = describe(Box[str])
        assert isinstance(descriptor, ClassDescriptor)
        assert descriptor.raw is Box
        assert descriptor.environment == {T: str}
        assert descriptor.resolved_type == ParameterizedType(Box, (str,))

    def test_raw_generic_has_no_bindings(self):
        """A raw generic class is described with an empty environment."""
        descriptor = describe(Box)
        assert descriptor.environment == {}
        assert descriptor.resolved_type == ParameterizedType(Box, (TypeVariable(T, (object,)),))

    def test_variables_and_wildcards_use_bounds(self):
        """Type variables and wildcards are described through their bound."""
        assert describe(T).raw is object
        assert describe(N).raw is int
        assert describe(Extends[int]).raw is int
        assert describe(Super[Box[int]]) == describe(Box[int])

    def test_array(self):
        """Homogeneous tuples are array descriptors."""
        descriptor = describe(tuple[int, ...])
        assert isinstance(descriptor, ArrayDescriptor)
        assert descriptor.raw is tuple
        assert descriptor.element is describe(int)
        assert descriptor.resolved_type == ArrayType(int)
        assert descriptor.new_instance(3) == (None, None, None)

    def test_arity_mismatch(self):
        """Wrong argument counts are rejected."""
        with pytest.raises(TypeError):
            describe(parameterize(Box, int, str))

    def test_repr(self):
        """repr shows the resolved type."""
        assert repr(describe(list[int])) == "ClassDescriptor(list[int])"


class TestLattice:
    """Tests for superclass, interfaces and supertype lookup."""

    def test_superclass_bindings(self):
        """A parameterized base carries its bindings."""
        assert describe(StringBox).superclass == describe(Box[str])

    def test_supertype_self(self):
        """supertype of the descriptor's own class is itself."""
        descriptor = describe(Box[int])
        assert descriptor.supertype(Box) is descriptor

    def test_supertype_through_builtin(self):
        """Builtin containers expose their ABC bindings."""
        mapping = describe(dict[str, int]).supertype(cabc.Mapping)
        assert mapping.resolved_type == ParameterizedType(cabc.Mapping, (str, int))
        collection = describe(list[int]).supertype(cabc.Collection)
        assert collection.resolved_type == ParameterizedType(cabc.Collection, (int,))

    def test_supertype_through_array_argument(self):
        """Bindings flow through array-valued base arguments."""
        shelf = describe(Library[str, int]).supertype(Shelf)
        assert shelf.resolved_type == ParameterizedType(Shelf, (ArrayType(int),))

    def test_unrelated_supertype(self):
        """Unrelated classes are not supertypes."""
        assert describe(list[int]).supertype(cabc.Mapping) is None

    def test_interfaces(self):
        """The interface map is transitive."""
        raws = {d.raw for d in describe(list[int]).interfaces}
        assert {cabc.MutableSequence, cabc.Sequence, cabc.Collection, cabc.Iterable} <= raws

    def test_to_implementation(self):
        """Implementation descriptors are inferred and cached."""
        declared = describe(Sequence[str])
        implementation = declared.to_implementation(list)
        assert implementation.resolved_type == ParameterizedType(list, (str,))
        assert declared.to_implementation(list) is implementation


class TestMembers:
    """Tests for the member layout."""

    def test_members_resolved(self):
        """Member types are resolved against the bindings."""
        descriptor = describe(Pair[str, int])
        assert list(descriptor.members) == ["first", "second"]
        assert descriptor.member_type("first") is describe(str)
        assert descriptor.member_type("second") is describe(int)

    def test_inherited_member(self):
        """Base members are resolved at the base's level."""
        assert describe(StringBox).member_type("value").raw is str

    def test_inherited_member_through_array(self):
        """Members of generic bases see the subclass's arguments."""
        member = describe(Library[str, int]).member_type("the_list")
        assert member.resolved_type == ParameterizedType(list, (ArrayType(int),))

    def test_shadowing(self):
        """A subclass annotation shadows the base annotation."""
        descriptor = describe(Shadowing)
        assert descriptor.member("value").declaring_class is Shadowing
        assert descriptor.member_type("value").raw is str

    def test_class_var_is_static(self):
        """ClassVar members are class-level."""
        descriptor = describe(WithClassVar)
        assert descriptor.member("count").is_static
        assert not descriptor.member("label").is_static

    def test_unknown_member(self):
        """Unknown names raise NoSuchMemberError, which is a LookupError."""
        with pytest.raises(NoSuchMemberError):
            describe(Box[int]).member("missing")
        with pytest.raises(LookupError):
            describe(Box[int]).member_type("missing")

    def test_get_and_set_member(self):
        """Accessors read and write members."""
        descriptor = describe(Box[int])
        box = Box(1)
        descriptor.set_member(box, "value", 5)
        assert descriptor.get_member(box, "value") == 5

    def test_set_member_on_frozen(self):
        """Frozen dataclasses can be populated."""
        point = FrozenPoint(1, 2)
        describe(FrozenPoint).set_member(point, "x", 10)
        assert point.x == 10

    def test_get_unset_member(self):
        """Reading a member with no value raises MemberAccessError."""
        with pytest.raises(MemberAccessError):
            describe(Pair[str, int]).get_member(Pair(), "first")


class TestConstruction:
    """Tests for new_instance."""

    def test_zero_arguments(self):
        """Required parameters receive zero values."""
        point = describe(FrozenPoint).new_instance()
        assert point == FrozenPoint(0, 0)

    def test_none_for_other_parameters(self):
        """Non-numeric parameters receive None."""
        assert describe(Box[str]).new_instance().value is None

    def test_allocate_fallback(self):
        """Classes rejecting zero arguments are allocated without __init__."""

        class Picky:
            def __init__(self, name: str):
                if name is None:
                    raise ValueError("name required")
                self.name = name

        instance = describe(Picky).new_instance()
        assert isinstance(instance, Picky)
        assert not hasattr(instance, "name")

    def test_no_strategy(self):
        """A class that cannot be created raises ConstructionError."""

        class Unbuildable:
            def __new__(cls, *args, **kwargs):
                raise RuntimeError("never")

        with pytest.raises(ConstructionError):
            describe(Unbuildable).new_instance()

    def test_enclosing_for_non_inner(self):
        """Passing an enclosing instance to a non-inner class fails."""
        with pytest.raises(ConstructionError):
            describe(Box[int]).new_instance(object())


class TestInnerDescriptors:
    """Tests for descriptors of inner classes."""

    def test_owner_bindings(self):
        """Inner classes see their owner's bindings."""
        descriptor = describe(parameterize(OuterClass.MyClass, int, owner=OuterClass[str]))
        assert descriptor.environment == {S: str, T: int}
        assert descriptor.enclosing == describe(OuterClass[str])
        assert descriptor.member_type("my_s_field").resolved_type == ParameterizedType(set, (str,))
        assert descriptor.member_type("my_t_field").resolved_type == ParameterizedType(list, (int,))

    def test_raw_owner(self):
        """Subscripting the inner class alone leaves owner parameters unbound."""
        descriptor = describe(OuterClass.MyClass[int])
        assert descriptor.environment == {T: int}
        assert descriptor.member_type("my_s_field").resolved_type == ParameterizedType(
            set, (TypeVariable(S, (object,)),)
        )

    def test_two_levels(self):
        """Bindings accumulate through every enclosing level."""
        middle = parameterize(Outer2.Middle2, int, owner=Outer2[str])
        descriptor = describe(parameterize(Outer2.Middle2.Inner2, bool, owner=middle))
        assert descriptor.member_type("s").raw is str
        assert descriptor.member_type("t").raw is int
        assert descriptor.member_type("v").raw is bool

    def test_resolved_type_has_owner(self):
        """The resolved type of an inner class records its owner."""
        descriptor = describe(parameterize(OuterClass.MyClass, int, owner=OuterClass[str]))
        assert descriptor.resolved_type.owner == ParameterizedType(OuterClass, (str,))

    def test_new_instance_synthesizes_enclosing(self):
        """A missing enclosing instance is created."""
        instance = describe(OuterClass.MyClass[int]).new_instance()
        assert isinstance(outer_instance(instance), OuterClass)

    def test_new_instance_keeps_enclosing(self):
        """A given enclosing instance is used."""
        outer = OuterClass()
        instance = describe(OuterClass.MyClass[int]).new_instance(outer)
        assert outer_instance(instance) is outer
