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
"""Reflective layer: descriptors, inference and cloning.

Key Components:
- descriptor: ClassDescriptor/ArrayDescriptor and ``describe``
- inference: ``infer`` and variance-aware ``unify``
- construction: Zero-argument construction and member assignment
- cache: Process-wide first-writer-wins descriptor cache
- cloning: Shallow and deep cloning built on descriptors
"""

from .cloning import (
    DEFAULT_CLONE_OPTIONS,
    CloneOptions,
    DefaultCloneOptions,
    deep_clone,
    shallow_clone,
)
from .construction import ConstructionStrategy
from .descriptor import (
    ArrayDescriptor,
    ClassDescriptor,
    Member,
    TypeDescriptor,
    describe,
)
from .inference import Variance, infer, unify, unify_all

__all__ = [
    "TypeDescriptor",
    "ClassDescriptor",
    "ArrayDescriptor",
    "Member",
    "describe",
    "ConstructionStrategy",
    "Variance",
    "infer",
    "unify",
    "unify_all",
    "CloneOptions",
    "DefaultCloneOptions",
    "DEFAULT_CLONE_OPTIONS",
    "shallow_clone",
    "deep_clone",
]
