#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Capacity-bounded key/value store

Evicts the oldest inserted key (insertion order, not access order) when a
new key arrives at capacity. Overwriting an existing key keeps its slot.
"""
from collections import OrderedDict
from typing import Any, Dict, Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar

from .logging import logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class BoundedCache(Generic[K, V]):

    def __init__(self, max_size: int, name: str = "cache"):
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self.name = name
        self._entries: "OrderedDict[K, V]" = OrderedDict()

    def set(self, key: K, value: V) -> None:
        if key in self._entries:
            self._entries[key] = value
            return
        if len(self._entries) >= self.max_size:
            evicted_key, _ = self._entries.popitem(last=False)
            logger.debug(f"Cache eviction from {self.name}: {evicted_key!r} (size {len(self._entries)})")
        self._entries[key] = value

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        return self._entries.get(key, default)

    def has(self, key: K) -> bool:
        return key in self._entries

    def delete(self, key: K) -> bool:
        if key in self._entries:
            del self._entries[key]
            return True
        return False

    def clear(self) -> int:
        """Remove every entry and return how many there were."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def keys(self) -> List[K]:
        return list(self._entries.keys())

    def items(self) -> List[Tuple[K, V]]:
        return list(self._entries.items())

    def to_dict(self) -> Dict[K, V]:
        return dict(self._entries)

    def __contains__(self, key: Any) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._entries.keys()))

    def __repr__(self) -> str:
        return f"BoundedCache(name={self.name!r}, size={len(self._entries)}, max_size={self.max_size})"
