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
"""Exception taxonomy for genreflect.

Reflective failures (construction, member access) share the
ReflectiveOperationError root. Inference failures are TypeErrors: they signal
that two types could not be reconciled, and the check is best-effort rather
than a full verifier of declaration legality.
"""

from __future__ import annotations

from typing import Any, Optional


class ReflectiveOperationError(Exception):
    """Base class for failures while constructing or populating objects."""


class ConstructionError(ReflectiveOperationError):
    """A zero instance of a type could not be created.

    Attributes:
        target: The class that failed to construct
        message: Human readable reason
    """

    def __init__(self, target: Any, message: str):
        self.target = target
        self.message = message
        super().__init__(f"Cannot construct {_qualified_name(target)}: {message}")


class MemberAccessError(ReflectiveOperationError):
    """Reading or writing a member (or container slot) failed.

    Attributes:
        target: The class whose member was accessed
        member: The member name, if any
        message: Human readable reason
    """

    def __init__(self, target: Any, member: Optional[str], message: str):
        self.target = target
        self.member = member
        self.message = message
        where = _qualified_name(target)
        if member is not None:
            where = f"{where}.{member}"
        super().__init__(f"Cannot access {where}: {message}")


class NoSuchMemberError(MemberAccessError, LookupError):
    """The requested member is not part of the type's member layout."""

    def __init__(self, target: Any, member: str):
        super().__init__(target, member, "no such member")


class TypeInferenceError(TypeError):
    """Type parameters of a target type could not be inferred.

    Raised on arity mismatches, violated bounds, and targets that are not on
    the declared type's super/subtype chain.
    """


def _qualified_name(target: Any) -> str:
    if isinstance(target, type):
        return f"{target.__module__}.{target.__qualname__}"
    return repr(target)
