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
"""Inner classes: nested classes that need an enclosing instance.

Python nested classes are plain namespaces; nothing ties an instance of
``Outer.Inner`` to an instance of ``Outer``. Classes decorated with
:func:`inner` opt into that relationship: their constructor takes the
enclosing instance as its first positional argument and keeps it, and their
generic descriptors see the enclosing class's type-parameter bindings.

The enclosing class is found through ``__qualname__``, so inner classes must
be reachable from their module (not defined inside a function body).
"""

from __future__ import annotations

import functools
import sys
import weakref
from typing import Any, Optional

ENCLOSING_INSTANCE_ATTRIBUTE = "_enclosing_instance"

_INNER_CLASSES: "weakref.WeakSet[type]" = weakref.WeakSet()


def inner(cls: type) -> type:
    """Mark a nested class as requiring an enclosing instance.

    Usage:
        class Outer(Generic[S]):
            @inner
            class Inner(Generic[T]):
                value: T

        Outer.Inner(Outer())
    """
    init = cls.__init__
    if getattr(init, "_binds_enclosing_instance", False):
        init = init.__wrapped__

    @functools.wraps(init)
    def __init__(self, enclosing, /, *args, **kwargs):
        object.__setattr__(self, ENCLOSING_INSTANCE_ATTRIBUTE, enclosing)
        init(self, *args, **kwargs)

    __init__._binds_enclosing_instance = True
    cls.__init__ = __init__
    _INNER_CLASSES.add(cls)
    return cls


def is_inner_class(cls: Any) -> bool:
    """Whether instances of ``cls`` carry an enclosing instance."""
    return isinstance(cls, type) and cls in _INNER_CLASSES


def enclosing_class(cls: type) -> Optional[type]:
    """Return the class ``cls`` is lexically nested in, if it can be found."""
    parts = cls.__qualname__.split(".")
    if len(parts) < 2 or "<locals>" in parts:
        return None
    scope: Any = sys.modules.get(cls.__module__)
    for name in parts[:-1]:
        scope = getattr(scope, name, None)
        if scope is None:
            return None
    return scope if isinstance(scope, type) else None


def outer_instance(obj: Any) -> Optional[Any]:
    """Return the enclosing instance of an inner-class instance, or None."""
    return getattr(obj, ENCLOSING_INSTANCE_ATTRIBUTE, None)


def bind_enclosing_instance(obj: Any, enclosing: Any) -> None:
    object.__setattr__(obj, ENCLOSING_INSTANCE_ATTRIBUTE, enclosing)
