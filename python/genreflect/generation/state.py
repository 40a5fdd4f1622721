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
"""Per-call state of the instance generator.

GenerationState tracks two stacks while one object graph is generated:

- the path of the value being generated, as segments that join into a
  string such as ``items[0].name`` or ``lookup[2][:key]``;
- the instances under construction, grouped by descriptor, so that a type
  reached again below itself can be detected.

A state belongs to exactly one top-level ``generate`` call and is never
shared between threads.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..reflect.descriptor import TypeDescriptor

KEY_SEGMENT = "[:key]"
VALUE_SEGMENT = "[:value]"


class GenerationState:
    """Path and recursion stacks for one generation call."""

    def __init__(self) -> None:
        self._segments: List[str] = []
        self._joined: Optional[str] = None
        self._live: Dict[TypeDescriptor, List[Any]] = {}

    # =========================================================================
    # Path
    # =========================================================================

    def push_field(self, name: str) -> None:
        self._push(name if not self._segments else "." + name)

    def push_index(self, index: int) -> None:
        self._push(f"[{index}]")

    def push_map_key(self) -> None:
        self._push(KEY_SEGMENT)

    def push_map_value(self) -> None:
        self._push(VALUE_SEGMENT)

    def pop_path(self) -> None:
        self._segments.pop()
        self._joined = None

    def _push(self, segment: str) -> None:
        self._segments.append(segment)
        self._joined = None

    @property
    def path(self) -> str:
        """The joined path of the value being generated; empty at the root."""
        if self._joined is None:
            self._joined = "".join(self._segments)
        return self._joined

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self._segments)

    @property
    def depth(self) -> int:
        return len(self._segments)

    @contextmanager
    def field(self, name: str) -> Iterator[str]:
        """Generate under a member segment; yields the joined path."""
        self.push_field(name)
        try:
            yield self.path
        finally:
            self.pop_path()

    @contextmanager
    def index(self, index: int) -> Iterator[str]:
        self.push_index(index)
        try:
            yield self.path
        finally:
            self.pop_path()

    @contextmanager
    def map_key(self) -> Iterator[str]:
        self.push_map_key()
        try:
            yield self.path
        finally:
            self.pop_path()

    @contextmanager
    def map_value(self) -> Iterator[str]:
        self.push_map_value()
        try:
            yield self.path
        finally:
            self.pop_path()

    # =========================================================================
    # Recursion
    # =========================================================================

    def push_instance(self, descriptor: TypeDescriptor, instance: Any) -> None:
        """Record an instance whose members are being generated."""
        self._live.setdefault(descriptor, []).append(instance)

    def pop_instance(self, descriptor: TypeDescriptor) -> Any:
        """Remove and return the most recently pushed instance of ``descriptor``."""
        instances = self._live[descriptor]
        instance = instances.pop()
        if not instances:
            del self._live[descriptor]
        return instance

    def instances_of(self, descriptor: TypeDescriptor) -> List[Any]:
        """Live instances of ``descriptor``, outermost first.

        Returns:
            A new list; empty if the type is not currently being generated
        """
        return list(self._live.get(descriptor, ()))

    def __repr__(self) -> str:
        live = sum(len(instances) for instances in self._live.values())
        return f"GenerationState(path={self.path!r}, live={live})"
