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
"""Pytest configuration for genreflect tests."""

import pytest

from genreflect import DefaultGenerationPolicy, GenerationConfig, InstanceGenerator


@pytest.fixture
def seeded_policy():
    """Default policy with a fixed seed."""
    return DefaultGenerationPolicy.seeded(1234)


@pytest.fixture
def generator(seeded_policy):
    """Instance generator over the seeded default policy."""
    return InstanceGenerator(seeded_policy)


@pytest.fixture
def small_config():
    """Config producing collections of one or two items."""
    return GenerationConfig(min_collection_size=1, max_collection_size=2)
