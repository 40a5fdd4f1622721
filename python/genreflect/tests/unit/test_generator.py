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
"""Unit tests for InstanceGenerator.

Tests for populated object graphs, containers, inner classes, paths seen by
the policy and recursion handling.
"""

import collections
import collections.abc as cabc
import datetime
import random

import pytest
from ordered_set import OrderedSet

from genreflect import (
    DefaultGenerationPolicy,
    InstanceGenerator,
    MemberAccessError,
    describe,
    generate,
    outer_instance,
    parameterize,
)
from genreflect.tests.fixtures.models import (
    Account,
    Box,
    Chicken,
    Color,
    Egg,
    ElementClass,
    FrozenRegistry,
    Holder,
    Infinite,
    Library,
    Node,
    OuterClass,
    Outer2,
    Registry,
)


class RecordingPolicy(DefaultGenerationPolicy):
    """Default policy that records every path it is asked to generate."""

    def __init__(self, seed=0, **kwargs):
        super().__init__(random.Random(seed), **kwargs)
        self.paths = []

    def generate(self, descriptor, path, default):
        self.paths.append(path)
        return super().generate(descriptor, path, default)


class TestGenerateValues:
    """Tests for the shape of generated values."""

    def test_generic_member(self, generator):
        """Type arguments flow into member values."""
        box = generator.generate(Box[str])
        assert isinstance(box, Box)
        assert isinstance(box.value, str)

    def test_leaf_record(self, generator):
        """Every member of a record is populated with its declared type."""
        element = generator.generate(ElementClass)
        assert type(element.int_field) is int
        assert isinstance(element.float_array, tuple)
        assert 3 <= len(element.float_array) <= 5
        assert all(type(x) is float for x in element.float_array)
        assert isinstance(element.string_field, str)
        assert type(element.flag) is bool
        assert element.timestamp.tzinfo is not None
        assert type(element.day) is datetime.date
        assert element.color in set(Color)
        assert isinstance(element.kind, type)
        assert element.int_kind is int

    def test_abstract_containers(self, generator):
        """Abstract declared containers become builtin ones."""
        holder = generator.generate(Holder[int])
        assert type(holder.items) is list
        assert all(type(x) is int for x in holder.items)
        assert type(holder.lookup) is dict
        assert all(isinstance(k, str) and type(v) is int for k, v in holder.lookup.items())
        assert type(holder.maybe) is int

    def test_mapping_subclass(self, generator):
        """Subclasses of dict are filled through their mapping supertype."""
        registry = generator.generate(Registry)
        assert isinstance(registry, Registry)
        assert 3 <= len(registry) <= 5
        for key, value in registry.items():
            assert isinstance(key, str)
            assert isinstance(value, Box)
            assert type(value.value) is int

    @pytest.mark.parametrize(
        "declared, expected",
        [
            (list[int], list),
            (set[str], set),
            (frozenset[str], frozenset),
            (collections.deque[int], collections.deque),
            (cabc.Sequence[int], list),
            (cabc.Set[int], OrderedSet),
        ],
    )
    def test_collections(self, generator, declared, expected):
        """Mutable collections are filled in place, immutable ones rebuilt."""
        value = generator.generate(declared)
        assert type(value) is expected
        assert 3 <= len(value) <= 5

    def test_abstract_set_keeps_generation_order(self):
        """Elements of an abstract set iterate in the order they were generated."""

        class Counting(DefaultGenerationPolicy):
            def __init__(self):
                super().__init__(random.Random(0))
                self.produced = []

            def generate(self, descriptor, path, default):
                if descriptor.raw is str:
                    label = f"item-{len(self.produced)}"
                    self.produced.append(label)
                    return label
                return super().generate(descriptor, path, default)

        policy = Counting()
        value = generate(cabc.MutableSet[str], policy)
        assert isinstance(value, OrderedSet)
        assert list(value) == policy.produced
        assert list(generate(cabc.Set[int], DefaultGenerationPolicy.seeded(5))) == list(
            generate(cabc.Set[int], DefaultGenerationPolicy.seeded(5))
        )

    def test_array(self, generator):
        """Homogeneous tuples are generated element by element."""
        value = generator.generate(tuple[tuple[int, ...], ...])
        assert isinstance(value, tuple)
        assert all(isinstance(row, tuple) for row in value)
        assert all(type(x) is int for row in value for x in row)

    def test_nested_mapping(self, generator):
        """Nested container arguments are generated recursively."""
        value = generator.generate(dict[str, list[int]])
        assert type(value) is dict
        for key, items in value.items():
            assert isinstance(key, str)
            assert type(items) is list
            assert all(type(x) is int for x in items)

    def test_descriptor_input(self, generator):
        """A descriptor can be passed instead of a declared type."""
        assert type(generator.generate(describe(list[int]).intern())) is list

    def test_module_level_generate(self):
        """The module-level helper uses a fresh generator."""
        value = generate(dict[str, int], DefaultGenerationPolicy.seeded(5))
        assert all(type(v) is int for v in value.values())

    def test_seeded_reproducible(self):
        """One seed generates equal graphs."""
        first = generate(Account, DefaultGenerationPolicy.seeded(11))
        second = generate(Account, DefaultGenerationPolicy.seeded(11))
        assert first == second

    def test_unseeded_runs_differ(self):
        """Fresh policies draw fresh values."""
        assert generate(str) != generate(str)

    def test_unhashable_keys(self):
        """Generated keys that cannot be hashed are reported."""

        class OneEntry(DefaultGenerationPolicy):
            def collection_size_for(self, descriptor, path):
                return 1

        with pytest.raises(MemberAccessError):
            generate(dict[list[int], int], OneEntry())


class TestInnerClasses:
    """Tests for generating inner-class instances."""

    def test_enclosing_instance_generated(self, generator):
        """An inner instance gets a generated enclosing instance."""
        declared = parameterize(OuterClass.MyClass, int, owner=OuterClass[str])
        value = generator.generate(declared)
        outer = outer_instance(value)
        assert isinstance(outer, OuterClass)
        assert isinstance(outer.outer_field, str)
        assert type(value.my_s_field) is set
        assert all(isinstance(s, str) for s in value.my_s_field)
        assert all(type(t) is int for t in value.my_t_field)

    def test_doubly_nested(self, generator):
        """Each enclosing level is generated with its own bindings."""
        middle = parameterize(Outer2.Middle2, int, owner=Outer2[str])
        declared = parameterize(Outer2.Middle2.Inner2, bool, owner=middle)
        value = generator.generate(declared)
        assert isinstance(value.s, str)
        assert type(value.t) is int
        assert type(value.v) is bool
        assert isinstance(outer_instance(outer_instance(value)), Outer2)


class TestPolicyPaths:
    """Tests for the paths handed to the policy."""

    def test_member_and_index_paths(self):
        """Paths join fields with dots and indices with brackets."""

        class Sizes(RecordingPolicy):
            def collection_size_for(self, descriptor, path):
                return {"the_map": 0, "the_list": 2}.get(path, 1)

        policy = Sizes()
        library = InstanceGenerator(policy).generate(Library[str, int])
        assert library.the_map == {}
        assert len(library.the_list) == 2
        assert all(len(row) == 1 and type(row[0]) is int for row in library.the_list)
        assert "" in policy.paths
        assert "the_map" in policy.paths
        assert "the_list[1][0]" in policy.paths

    def test_map_entry_paths(self):
        """Map keys and values are generated under their entry index."""

        class OneEntry(RecordingPolicy):
            def collection_size_for(self, descriptor, path):
                return 1

        policy = OneEntry()
        InstanceGenerator(policy).generate(Holder[int])
        assert "lookup[0][:key]" in policy.paths
        assert "lookup[0][:value]" in policy.paths
        assert "items[0]" in policy.paths

    def test_ignored_member(self):
        """Ignored members keep their zero value."""

        class NoBalance(DefaultGenerationPolicy):
            def is_ignored_member(self, descriptor, path, member):
                return member.name == "balance"

        account = generate(Account, NoBalance())
        assert account.balance == 0
        assert isinstance(account.owner, str)

    def test_depth_cutoff(self):
        """A policy can end an unbounded chain of distinct types by path."""

        class Shallow(DefaultGenerationPolicy):
            def generate(self, descriptor, path, default):
                if len(path.split(".")) > 3:
                    return None
                return super().generate(descriptor, path, default)

        root = generate(Infinite[str], Shallow())
        assert isinstance(root.field, str)
        assert all(isinstance(s, str) for s in root.infinite.field)
        deepest = root.infinite.infinite.infinite
        assert isinstance(deepest, Infinite)
        assert deepest.field is None
        assert deepest.infinite is None


class TestRecursion:
    """Tests for types reached again below themselves."""

    def test_default_breaks_cycle(self, generator):
        """The default policy ends a cycle with None."""
        chicken = generator.generate(Chicken)
        assert isinstance(chicken.egg, Egg)
        assert chicken.egg.chicken is None

    def test_reuse_ancestor(self):
        """A policy can close the cycle with a live ancestor."""

        class Reuse(DefaultGenerationPolicy):
            def on_recursion(self, descriptor, path, live_ancestors, default):
                return live_ancestors[0]

        chicken = generate(Chicken, Reuse())
        assert chicken.egg.chicken is chicken

    def test_reuse_rebuilt_mapping(self):
        """A rebuilt read-only mapping is the ancestor its members see."""

        class ReuseInnermost(DefaultGenerationPolicy):
            def on_recursion(self, descriptor, path, live_ancestors, default):
                return live_ancestors[-1]

        registry = generate(FrozenRegistry, ReuseInnermost())
        assert isinstance(registry, FrozenRegistry)
        assert len(registry) > 0
        assert all(isinstance(value, int) for value in registry.values())
        assert registry.parent is registry

    def test_bounded_unrolling(self):
        """Calling default on recursion unrolls the cycle one more level."""

        class Twice(DefaultGenerationPolicy):
            def on_recursion(self, descriptor, path, live_ancestors, default):
                return live_ancestors[0] if len(live_ancestors) >= 2 else default()

        chicken = generate(Chicken, Twice())
        second = chicken.egg.chicken
        assert second is not chicken
        assert isinstance(second, Chicken)
        assert second.egg.chicken is chicken

    def test_self_referential_collection(self, generator):
        """Recursion through a collection element yields None elements."""
        node = generator.generate(Node)
        assert 3 <= len(node.children) <= 5
        assert all(child is None for child in node.children)

    def test_optional_self_reference(self, generator):
        """Optional self references are cut with None."""
        account = generator.generate(Account)
        assert account.parent is None
        assert all(isinstance(tag, str) for tag in account.tags)
