#!/usr/bin/env python3
"""
Pointer Resolver for Chat Share Parser
Resolves back-references in flattened (heap-style) payload arrays.

A flattened payload stores a value graph as one list. Objects refer to other
entries by index: a key "_<n>" names the property stored at heap[n], and the
key's value is the index of the property value. Role literals are stored
once and referenced from the objects that use them.
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from models import MessageRole

logger = logging.getLogger(__name__)

DEFAULT_ROLE_POINTER_KEY = '_49'
DEFAULT_ROLE_LOOKBACK_WINDOW = 50

ROLE_LITERALS = {role.value: role for role in MessageRole}

def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

def role_literal(value: Any) -> Optional[MessageRole]:
    """Return the role if value is exactly 'user' or 'assistant'"""
    if isinstance(value, str):
        return ROLE_LITERALS.get(value)
    return None

def pointer_target(value: Any, key: str = DEFAULT_ROLE_POINTER_KEY) -> Optional[int]:
    """
    Read a pointer reference

    Args:
        value: A payload entry
        key: The well-known pointer key

    Returns:
        The referenced index, or None if value is not a pointer object
    """
    if isinstance(value, dict) and key in value and _is_index(value[key]):
        return value[key]
    return None

class RoleIndexMap:
    """Read-only map from payload index to the role literal stored there"""

    def __init__(self, roles: Dict[int, MessageRole]):
        self._roles = MappingProxyType(dict(roles))

    @classmethod
    def from_payload(cls, payload: List[Any]) -> "RoleIndexMap":
        roles = {}
        for index, value in enumerate(payload):
            role = role_literal(value)
            if role is not None:
                roles[index] = role
        return cls(roles)

    def get(self, index: int) -> Optional[MessageRole]:
        return self._roles.get(index)

    def __contains__(self, index: object) -> bool:
        return index in self._roles

    def __len__(self) -> int:
        return len(self._roles)

    @property
    def indices(self) -> Mapping[int, MessageRole]:
        return self._roles

def resolve_role(payload: List[Any], index: int, role_map: RoleIndexMap,
                 window: int = DEFAULT_ROLE_LOOKBACK_WINDOW,
                 pointer_key: str = DEFAULT_ROLE_POINTER_KEY) -> Optional[MessageRole]:
    """
    Resolve the role governing the entry at `index` by scanning backward

    At each position the pointer strategy is tried first, then the direct
    role literal. The scan covers positions index-1 down to index-window.

    Args:
        payload: The flat array
        index: Position to resolve (exclusive start of the scan)
        role_map: Role literal positions in the same array
        window: Number of positions to look back
        pointer_key: Key carrying role pointers

    Returns:
        The resolved role, or None if the window holds no usable marker
    """
    lower = max(0, index - window)
    for position in range(index - 1, lower - 1, -1):
        value = payload[position]

        target = pointer_target(value, pointer_key)
        if target is not None:
            role = role_map.get(target)
            if role is not None:
                return role

        role = role_literal(value)
        if role is not None:
            return role

    return None

class FlatGraphDecoder:
    """
    Rebuilds nested values from a flattened heap

    Object keys of the form "_<n>" name the property heap[n]; their values
    and integer list items are heap indices. Decoding is memoized per
    instance, and an index that is being decoded resolves to None when
    reached again.
    """

    def __init__(self, heap: List[Any]):
        self.heap = heap
        self._cache: Dict[int, Any] = {}

    def decode_index(self, index: int) -> Any:
        if index in self._cache:
            return self._cache[index]
        if not 0 <= index < len(self.heap):
            return None

        self._cache[index] = None
        decoded = self.decode_value(self.heap[index])
        self._cache[index] = decoded
        return decoded

    def decode_value(self, value: Any) -> Any:
        if isinstance(value, list):
            return [
                self.decode_index(item) if _is_index(item) else self.decode_value(item)
                for item in value
            ]

        if isinstance(value, dict):
            if not any(key.startswith('_') for key in value):
                return value

            decoded = {}
            for key, child_index in value.items():
                if not key.startswith('_') or not _is_index(child_index):
                    continue
                name = self._property_name(key)
                if name is not None:
                    decoded[name] = self.decode_index(child_index)
            return decoded

        return value

    def _property_name(self, key: str) -> Optional[str]:
        try:
            name_index = int(key[1:])
        except ValueError:
            return None
        if not 0 <= name_index < len(self.heap):
            return None
        name = self.heap[name_index]
        return name if isinstance(name, str) else None
