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
"""Configuration for the default generation policy.

Example:
    >>> config = GenerationConfig(min_collection_size=0, max_collection_size=2)
    >>> policy = DefaultGenerationPolicy.seeded(42, config=config)
"""

from __future__ import annotations

import datetime
import decimal
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Tuple

_UTC = datetime.timezone.utc


@dataclass(frozen=True)
class GenerationConfig:
    """Ranges used by DefaultGenerationPolicy.

    Attributes:
        min_collection_size: Smallest collection/array length, inclusive
        max_collection_size: Largest collection/array length, inclusive
        min_timestamp: Earliest generated instant (timezone aware)
        max_timestamp: Latest generated instant (timezone aware)
        max_utc_offset_minutes: Bound on the random fixed UTC offset of
            generated datetimes, in either direction
        class_literals: Candidates for unbounded ``type`` values
    """

    min_collection_size: int = 3
    max_collection_size: int = 5
    min_timestamp: datetime.datetime = datetime.datetime(1800, 1, 1, tzinfo=_UTC)
    max_timestamp: datetime.datetime = datetime.datetime(2100, 1, 1, tzinfo=_UTC)
    max_utc_offset_minutes: int = 14 * 60
    class_literals: Tuple[type, ...] = (
        bool,
        int,
        float,
        str,
        bytes,
        decimal.Decimal,
        uuid.UUID,
        datetime.datetime,
    )

    def __post_init__(self) -> None:
        if self.min_collection_size < 0:
            raise ValueError("min_collection_size must be non-negative")
        if self.max_collection_size < self.min_collection_size:
            raise ValueError("max_collection_size must be >= min_collection_size")
        if self.min_timestamp.tzinfo is None or self.max_timestamp.tzinfo is None:
            raise ValueError("timestamp bounds must be timezone aware")
        if self.max_timestamp <= self.min_timestamp:
            raise ValueError("max_timestamp must be after min_timestamp")
        if not 0 <= self.max_utc_offset_minutes < 24 * 60:
            raise ValueError("max_utc_offset_minutes must be in [0, 1440)")
        if not self.class_literals:
            raise ValueError("class_literals must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "min_collection_size": self.min_collection_size,
            "max_collection_size": self.max_collection_size,
            "min_timestamp": self.min_timestamp.isoformat(),
            "max_timestamp": self.max_timestamp.isoformat(),
            "max_utc_offset_minutes": self.max_utc_offset_minutes,
            "class_literals": [f"{c.__module__}.{c.__qualname__}" for c in self.class_literals],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GenerationConfig":
        """Create from dictionary.

        ``class_literals`` is not restored from its serialized names; pass
        classes directly if it needs to differ from the default.
        """
        defaults = cls()
        return cls(
            min_collection_size=d.get("min_collection_size", defaults.min_collection_size),
            max_collection_size=d.get("max_collection_size", defaults.max_collection_size),
            min_timestamp=_parse_timestamp(d.get("min_timestamp"), defaults.min_timestamp),
            max_timestamp=_parse_timestamp(d.get("max_timestamp"), defaults.max_timestamp),
            max_utc_offset_minutes=d.get(
                "max_utc_offset_minutes", defaults.max_utc_offset_minutes
            ),
        )


def _parse_timestamp(value: Any, default: datetime.datetime) -> datetime.datetime:
    if value is None:
        return default
    if isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.fromisoformat(value)


DEFAULT_CONFIG = GenerationConfig()
