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
"""Structural type model for genreflect.

Key Components:
- forms: The five type shapes and declared-form normalization
- environment: Immutable binding environments (TypeVar -> type)
- signatures: Generic signatures of classes, including builtins
- nesting: Inner classes and enclosing instances
- substitution: Resolution of declared types against environments
"""

from .environment import (
    EMPTY_ENVIRONMENT,
    BindingEnvironment,
    create_environment,
    merge_environments,
)
from .forms import (
    WILDCARD,
    ArrayType,
    Extends,
    NoneType,
    ParameterizedType,
    Super,
    TypeVariable,
    WildcardType,
    bound_of,
    declared_bounds,
    declared_constraints,
    declared_form,
    erasure,
    parameterize,
    type_repr,
    type_variables,
)
from .nesting import enclosing_class, inner, is_inner_class, outer_instance
from .signatures import (
    ClassSignature,
    generic_bases,
    is_declared_subclass,
    is_standard_library_class,
    register_signature,
    signature_of,
    type_parameters,
)
from .substitution import new_resolved_array_type, new_resolved_class_type, resolve

__all__ = [
    # Forms
    "ArrayType",
    "ParameterizedType",
    "TypeVariable",
    "WildcardType",
    "Extends",
    "Super",
    "WILDCARD",
    "NoneType",
    "parameterize",
    "declared_form",
    "declared_bounds",
    "declared_constraints",
    "bound_of",
    "erasure",
    "type_repr",
    "type_variables",
    # Environment
    "BindingEnvironment",
    "EMPTY_ENVIRONMENT",
    "create_environment",
    "merge_environments",
    # Nesting
    "inner",
    "is_inner_class",
    "enclosing_class",
    "outer_instance",
    # Signatures
    "ClassSignature",
    "signature_of",
    "type_parameters",
    "register_signature",
    "is_declared_subclass",
    "is_standard_library_class",
    "generic_bases",
    # Substitution
    "resolve",
    "new_resolved_class_type",
    "new_resolved_array_type",
]
