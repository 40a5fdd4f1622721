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
"""Generation policies.

The instance generator consults a GenerationPolicy at every node of the
object graph it builds. A policy decides:

- which members are left unpopulated;
- which concrete class implements an abstract declared type;
- the value of a node, either directly or by calling ``default()`` to let
  the generator construct and populate an instance;
- what to do when a type is reached again below itself;
- the length of arrays, collections and mappings.

Every decision receives the joined path of the node (``items[0].name``), so a
policy can treat individual locations of the graph differently.

DefaultGenerationPolicy is the reference policy. Subclass it and override
single methods to customize generation:

    >>> class ShallowPolicy(DefaultGenerationPolicy):
    ...     def generate(self, descriptor, path, default):
    ...         if path.count(".") >= 3:
    ...             return None
    ...         return super().generate(descriptor, path, default)
"""

from __future__ import annotations

import collections.abc as cabc
import datetime
import decimal
import enum
import hashlib
import random
import uuid
from typing import Any, Callable, Dict, List, Optional, Protocol, TypeVar

from ordered_set import OrderedSet

from ..reflect.descriptor import ClassDescriptor, Member, TypeDescriptor
from ..types.forms import NoneType, TypeVariable, erasure
from ..types.signatures import is_standard_library_class, register_signature, type_parameters
from .config import DEFAULT_CONFIG, GenerationConfig

# Produces the default value of a node: construct, then populate
DefaultFactory = Callable[[], Any]

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_MAX_DURATION = datetime.timedelta(days=1)

# Abstract sets are generated as insertion-ordered sets so a seed fixes iteration order
_T = TypeVar("_T")
register_signature(OrderedSet, (_T,), object, (cabc.MutableSet[_T],))


class GenerationPolicy(Protocol):
    """Decisions the instance generator delegates."""

    def is_ignored_member(self, descriptor: ClassDescriptor, path: str, member: Member) -> bool:
        """Whether ``member`` of the instance at ``path`` is left unpopulated.

        Args:
            descriptor: Descriptor of the instance being populated
            path: Path of the instance being populated
            member: The member about to be generated
        """
        ...

    def implementation_class_for(self, descriptor: ClassDescriptor, path: str) -> Optional[type]:
        """Concrete class to generate in place of ``descriptor``.

        Returns:
            A class on the descriptor's subtype chain, or None (or the
            descriptor's own raw class) to keep it
        """
        ...

    def generate(self, descriptor: ClassDescriptor, path: str, default: DefaultFactory) -> Any:
        """Value of the node at ``path``; call ``default()`` for a populated instance."""
        ...

    def on_recursion(
        self,
        descriptor: ClassDescriptor,
        path: str,
        live_ancestors: List[Any],
        default: DefaultFactory,
    ) -> Any:
        """Value of a node whose type is already being generated above it.

        Args:
            descriptor: The recurring type
            path: Path of the node
            live_ancestors: Instances of the type under construction,
                outermost first
            default: Generates the node anyway; calling it unconditionally
                never terminates
        """
        ...

    def collection_size_for(self, descriptor: TypeDescriptor, path: str) -> int:
        """Length of the array, collection or mapping at ``path``."""
        ...


class DefaultGenerationPolicy:
    """Random scalars, concrete builtin containers and ``None`` on recursion.

    Attributes:
        rng: Source of randomness; seed it for reproducible graphs
        config: Size and range settings
    """

    IMPLEMENTATIONS: Dict[type, type] = {
        cabc.Iterable: list,
        cabc.Collection: list,
        cabc.Sequence: list,
        cabc.MutableSequence: list,
        cabc.Set: OrderedSet,
        cabc.MutableSet: OrderedSet,
        cabc.Mapping: dict,
        cabc.MutableMapping: dict,
    }

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        *,
        config: GenerationConfig = DEFAULT_CONFIG,
    ):
        self.rng = rng if rng is not None else random.Random()
        self.config = config

    @classmethod
    def seeded(cls, seed: Any, *, config: GenerationConfig = DEFAULT_CONFIG) -> DefaultGenerationPolicy:
        """Create a policy whose output is fully determined by ``seed``."""
        return cls(random.Random(seed), config=config)

    # =========================================================================
    # Policy decisions
    # =========================================================================

    def is_ignored_member(self, descriptor: ClassDescriptor, path: str, member: Member) -> bool:
        return is_standard_library_class(member.declaring_class)

    def implementation_class_for(self, descriptor: ClassDescriptor, path: str) -> Optional[type]:
        return self.IMPLEMENTATIONS.get(descriptor.raw, descriptor.raw)

    def generate(self, descriptor: ClassDescriptor, path: str, default: DefaultFactory) -> Any:
        raw = descriptor.raw
        leaf = _LEAF_GENERATORS.get(raw)
        if leaf is not None:
            return leaf(self)
        if raw is type:
            return self.random_class(descriptor)
        if isinstance(raw, type) and issubclass(raw, enum.Enum):
            choices = list(raw)
            return self.rng.choice(choices) if choices else None
        return default()

    def on_recursion(
        self,
        descriptor: ClassDescriptor,
        path: str,
        live_ancestors: List[Any],
        default: DefaultFactory,
    ) -> Any:
        return None

    def collection_size_for(self, descriptor: TypeDescriptor, path: str) -> int:
        low = self.config.min_collection_size
        high = self.config.max_collection_size
        return low + int(self.rng.random() * (high - low + 1))

    # =========================================================================
    # Leaf values
    # =========================================================================

    def random_instant(self) -> datetime.datetime:
        """An aware UTC datetime within the configured range."""
        low = self.config.min_timestamp
        span = (self.config.max_timestamp - low) // datetime.timedelta(microseconds=1)
        offset = int(self.rng.random() * (span + 1))
        return (low + datetime.timedelta(microseconds=offset)).astimezone(datetime.timezone.utc)

    def random_timezone(self) -> datetime.timezone:
        """A fixed-offset timezone within the configured bound."""
        limit = self.config.max_utc_offset_minutes
        return datetime.timezone(datetime.timedelta(minutes=self.rng.randint(-limit, limit)))

    def random_class(self, descriptor: ClassDescriptor) -> type:
        """The class bound to ``type[X]``, or a random configured class literal."""
        bound = descriptor.environment.lookup(type_parameters(type)[0])
        if bound is not None and not isinstance(bound, TypeVariable):
            cls = erasure(bound)
            if cls is not object:
                return cls
        return self.rng.choice(self.config.class_literals)

    def random_string(self) -> str:
        """Text of a name-based UUID over 16 random bytes."""
        digest = hashlib.md5(self.rng.randbytes(16), usedforsecurity=False).digest()
        return str(uuid.UUID(bytes=digest, version=3))


def _random_decimal(policy: DefaultGenerationPolicy) -> decimal.Decimal:
    digits = policy.rng.randint(_INT_MIN, _INT_MAX)
    return decimal.Decimal(digits).scaleb(-policy.rng.randint(0, 8))


def _random_datetime(policy: DefaultGenerationPolicy) -> datetime.datetime:
    return policy.random_instant().astimezone(policy.random_timezone())


def _random_duration(policy: DefaultGenerationPolicy) -> datetime.timedelta:
    microseconds = _MAX_DURATION // datetime.timedelta(microseconds=1)
    return datetime.timedelta(microseconds=policy.rng.randrange(microseconds))


# Exact-class lookup; subclasses (bool of int, datetime of date) have their own entries
_LEAF_GENERATORS: Dict[type, Callable[[DefaultGenerationPolicy], Any]] = {
    NoneType: lambda policy: None,
    bool: lambda policy: policy.rng.random() < 0.5,
    int: lambda policy: policy.rng.randint(_INT_MIN, _INT_MAX),
    float: lambda policy: policy.rng.random(),
    complex: lambda policy: complex(policy.rng.random(), policy.rng.random()),
    str: lambda policy: policy.random_string(),
    bytes: lambda policy: policy.rng.randbytes(16),
    bytearray: lambda policy: bytearray(policy.rng.randbytes(16)),
    decimal.Decimal: _random_decimal,
    uuid.UUID: lambda policy: uuid.UUID(int=policy.rng.getrandbits(128), version=4),
    datetime.datetime: _random_datetime,
    datetime.date: lambda policy: policy.random_instant().date(),
    datetime.time: lambda policy: policy.random_instant().time(),
    datetime.timedelta: _random_duration,
}
