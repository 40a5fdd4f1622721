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

Key Components:
- generator: InstanceGenerator and ``generate``
- policy: GenerationPolicy protocol and DefaultGenerationPolicy
- state: Path and recursion stacks of one generation call
- config: GenerationConfig ranges for the default policy
"""

from .config import DEFAULT_CONFIG, GenerationConfig
from .generator import InstanceGenerator, generate
from .policy import DefaultFactory, DefaultGenerationPolicy, GenerationPolicy
from .state import GenerationState

__all__ = [
    "InstanceGenerator",
    "generate",
    "GenerationPolicy",
    "DefaultGenerationPolicy",
    "DefaultFactory",
    "GenerationState",
    "GenerationConfig",
    "DEFAULT_CONFIG",
]
