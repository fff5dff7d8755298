"""
Keyed client-side query cache.
"""

import copy
from typing import Any, Dict, Hashable, List, Tuple

CacheKey = Tuple[Hashable, ...]


class QueryCache:
    """
    Values keyed by tuples such as ``("contact-page-members", page_id)``.

    Reads and writes copy, so no caller ever holds a reference into cached
    state. Only the sync engine writes here.
    """

    def __init__(self):
        self._data: Dict[CacheKey, Any] = {}

    def has(self, key: CacheKey) -> bool:
        return key in self._data

    def get(self, key: CacheKey, default: Any = None) -> Any:
        return copy.deepcopy(self._data.get(key, default))

    def set(self, key: CacheKey, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def remove(self, key: CacheKey) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[CacheKey]:
        return list(self._data)
