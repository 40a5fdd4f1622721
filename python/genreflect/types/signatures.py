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
"""Generic class signatures.

A ClassSignature records what a class declares about its generic structure:
its own type parameters, its generic superclass and its generic interfaces.

User classes built on ``typing.Generic`` carry this at runtime
(``__parameters__`` and ``__orig_bases__``). Builtin containers and the
``collections.abc`` ABCs are generic only in annotations, so their signatures
come from a registration table mirroring typeshed. The ABCs are registered
without a superclass; they play the role of interfaces.

For user classes the first generic base is the superclass and the remaining
bases are interfaces. ``Generic``/``Protocol`` markers and ``object`` are not
bases in this model, and a class with no remaining base extends ``object``.
"""

from __future__ import annotations

import collections
import collections.abc as cabc
import functools
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Protocol, Sequence, Tuple, TypeVar

from .forms import ParameterizedType, declared_form, erasure
from .nesting import enclosing_class, is_inner_class

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassSignature:
    """Declared generic structure of one class.

    Attributes:
        type_parameters: The class's own type parameters, in declaration order
        superclass: Declared (possibly parameterized) superclass, or None
        interfaces: Declared (possibly parameterized) secondary bases
    """

    type_parameters: Tuple[TypeVar, ...] = ()
    superclass: Optional[Any] = None
    interfaces: Tuple[Any, ...] = ()

    @property
    def bases(self) -> Tuple[Any, ...]:
        """Interfaces first, then the superclass."""
        if self.superclass is None:
            return self.interfaces
        return self.interfaces + (self.superclass,)


_REGISTERED: Dict[type, ClassSignature] = {}
_DERIVED: Dict[type, ClassSignature] = {}


def register_signature(
    cls: type,
    type_parameters: Sequence[TypeVar] = (),
    superclass: Optional[Any] = None,
    interfaces: Sequence[Any] = (),
) -> ClassSignature:
    """Declare the generic signature of a class that has no runtime TypeVars.

    Args:
        cls: The class to describe
        type_parameters: Its type parameters
        superclass: Its declared superclass (e.g. ``dict[_KT, _VT]``)
        interfaces: Its declared interfaces (e.g. ``MutableSequence[_T]``)

    Returns:
        The registered signature
    """
    signature = ClassSignature(tuple(type_parameters), superclass, tuple(interfaces))
    _REGISTERED[cls] = signature
    _DERIVED.pop(cls, None)
    is_declared_subclass.cache_clear()
    return signature


def signature_of(cls: type) -> ClassSignature:
    """Return the generic signature of a class."""
    if not isinstance(cls, type):
        raise TypeError(f"Expected a class, got {cls!r}")
    registered = _REGISTERED.get(cls)
    if registered is not None:
        return registered
    derived = _DERIVED.get(cls)
    if derived is None:
        derived = _derive_signature(cls)
        _DERIVED[cls] = derived
    return derived


def type_parameters(cls: type) -> Tuple[TypeVar, ...]:
    return signature_of(cls).type_parameters


def _derive_signature(cls: type) -> ClassSignature:
    if cls is object:
        return ClassSignature()
    declared = cls.__dict__.get("__orig_bases__", cls.__bases__)
    bases = [b for b in declared if not _is_generic_marker(b)]
    superclass = bases[0] if bases else object
    return ClassSignature(_own_type_parameters(cls), superclass, tuple(bases[1:]))


def _is_generic_marker(base: Any) -> bool:
    if isinstance(base, ParameterizedType):
        return False
    origin = getattr(base, "__origin__", None) or base
    return origin is Generic or origin is Protocol or origin is object


def _own_type_parameters(cls: type) -> Tuple[TypeVar, ...]:
    params = tuple(p for p in getattr(cls, "__parameters__", ()) if isinstance(p, TypeVar))
    if not params or not is_inner_class(cls):
        return params
    # Parameters of the enclosing chain belong to the owner, not to cls
    owned = set()
    owner = enclosing_class(cls)
    while owner is not None:
        owned.update(signature_of(owner).type_parameters)
        owner = enclosing_class(owner) if is_inner_class(owner) else None
    return tuple(p for p in params if p not in owned)


@functools.lru_cache(maxsize=None)
def is_declared_subclass(sub: type, sup: type) -> bool:
    """Whether ``sup`` is reachable from ``sub`` through declared bases.

    Unlike ``issubclass`` this ignores ABC virtual registration: only the
    declared lattice can carry type-parameter bindings from one level to the
    next.
    """
    if sub is sup or sup is object:
        return True
    return any(is_declared_subclass(erasure(base), sup) for base in signature_of(sub).bases)


def is_standard_library_class(cls: type) -> bool:
    """Whether a class is defined by the standard library (or builtins)."""
    module = getattr(cls, "__module__", None) or ""
    return module.partition(".")[0] in sys.stdlib_module_names


def generic_bases(cls: type) -> Tuple[Any, ...]:
    """Declared bases of ``cls`` as normalized forms, interfaces first."""
    return tuple(declared_form(b) for b in signature_of(cls).bases)


# =============================================================================
# Builtin and collections.abc signatures
# =============================================================================

_T = TypeVar("_T")
_KT = TypeVar("_KT")
_VT = TypeVar("_VT")


def _register_builtins() -> None:
    register_signature(cabc.Iterable, (_T,))
    register_signature(cabc.Container, (_T,))
    register_signature(cabc.Sized)
    register_signature(cabc.Reversible, (_T,), interfaces=(cabc.Iterable[_T],))
    register_signature(
        cabc.Collection,
        (_T,),
        interfaces=(cabc.Sized, cabc.Iterable[_T], cabc.Container[_T]),
    )
    register_signature(
        cabc.Sequence, (_T,), interfaces=(cabc.Reversible[_T], cabc.Collection[_T])
    )
    register_signature(cabc.MutableSequence, (_T,), interfaces=(cabc.Sequence[_T],))
    register_signature(cabc.Set, (_T,), interfaces=(cabc.Collection[_T],))
    register_signature(cabc.MutableSet, (_T,), interfaces=(cabc.Set[_T],))
    register_signature(cabc.Mapping, (_KT, _VT), interfaces=(cabc.Collection[_KT],))
    register_signature(
        cabc.MutableMapping, (_KT, _VT), interfaces=(cabc.Mapping[_KT, _VT],)
    )

    register_signature(list, (_T,), object, (cabc.MutableSequence[_T],))
    register_signature(tuple, (_T,), object, (cabc.Sequence[_T],))
    register_signature(collections.deque, (_T,), object, (cabc.MutableSequence[_T],))
    register_signature(set, (_T,), object, (cabc.MutableSet[_T],))
    register_signature(frozenset, (_T,), object, (cabc.Set[_T],))
    register_signature(dict, (_KT, _VT), object, (cabc.MutableMapping[_KT, _VT],))
    register_signature(collections.OrderedDict, (_KT, _VT), dict[_KT, _VT])
    register_signature(collections.defaultdict, (_KT, _VT), dict[_KT, _VT])
    register_signature(collections.Counter, (_T,), dict[_T, int])
    register_signature(type, (_T,), object)


_register_builtins()
