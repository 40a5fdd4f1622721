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
"""genreflect: generic type descriptors and random object-graph generation.

Describe any declared type, including parameterized generics, homogeneous
tuples, wildcard arguments and inner classes, as a cached descriptor with its
resolved generic shape, member layout and supertypes. Infer the bindings of a
related class from a declared type. Generate fully populated random instances
under a pluggable policy.

Example:
    >>> from genreflect import DefaultGenerationPolicy, describe, generate
    >>> describe(dict[str, list[int]]).interfaces
    >>> generate(dict[str, list[int]], DefaultGenerationPolicy.seeded(0))

Key Components:
- types: Type forms, binding environments, signatures and substitution
- reflect: Descriptors, inference, construction and cloning
- generation: Instance generator, policies and configuration
"""

__version__ = "0.1.0"

from .errors import (
    ConstructionError,
    MemberAccessError,
    NoSuchMemberError,
    ReflectiveOperationError,
    TypeInferenceError,
)
from .generation import (
    DEFAULT_CONFIG,
    DefaultGenerationPolicy,
    GenerationConfig,
    GenerationPolicy,
    GenerationState,
    InstanceGenerator,
    generate,
)
from .reflect import (
    ArrayDescriptor,
    ClassDescriptor,
    CloneOptions,
    DefaultCloneOptions,
    Member,
    TypeDescriptor,
    Variance,
    deep_clone,
    describe,
    infer,
    shallow_clone,
)
from .types import (
    EMPTY_ENVIRONMENT,
    WILDCARD,
    ArrayType,
    BindingEnvironment,
    Extends,
    ParameterizedType,
    Super,
    TypeVariable,
    WildcardType,
    inner,
    new_resolved_array_type,
    new_resolved_class_type,
    outer_instance,
    parameterize,
    register_signature,
    resolve,
)

__all__ = [
    # Descriptors
    "describe",
    "TypeDescriptor",
    "ClassDescriptor",
    "ArrayDescriptor",
    "Member",
    # Inference
    "infer",
    "Variance",
    # Substitution
    "resolve",
    "new_resolved_class_type",
    "new_resolved_array_type",
    # Type forms
    "ParameterizedType",
    "ArrayType",
    "WildcardType",
    "TypeVariable",
    "Extends",
    "Super",
    "WILDCARD",
    "parameterize",
    # Environments
    "BindingEnvironment",
    "EMPTY_ENVIRONMENT",
    # Signatures
    "inner",
    "outer_instance",
    "register_signature",
    # Generation
    "GenerationPolicy",
    "DefaultGenerationPolicy",
    "GenerationConfig",
    "DEFAULT_CONFIG",
    "GenerationState",
    "InstanceGenerator",
    "generate",
    # Cloning
    "shallow_clone",
    "deep_clone",
    "CloneOptions",
    "DefaultCloneOptions",
    # Errors
    "ReflectiveOperationError",
    "ConstructionError",
    "MemberAccessError",
    "NoSuchMemberError",
    "TypeInferenceError",
]
