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
"""Process-wide descriptor cache.

Descriptors are published under the normalized form of the declared type
they were built from and live for the lifetime of the process, like class
metadata. Publication is first-writer-wins: descriptors may be constructed
concurrently, but only one instance per key ever becomes visible.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

_descriptors: Dict[Any, Any] = {}
_publish_lock = threading.Lock()


def lookup(key: Any) -> Optional[Any]:
    """Return the interned descriptor for a normalized declared type, if any."""
    return _descriptors.get(key)


def publish(key: Any, descriptor: Any) -> Any:
    """Publish a descriptor unless one is already interned for ``key``.

    Returns:
        The interned descriptor, which is ``descriptor`` only if it won
    """
    with _publish_lock:
        return _descriptors.setdefault(key, descriptor)


def size() -> int:
    """Number of interned descriptors."""
    return len(_descriptors)
