"""In-memory preview cache keyed by (product, artwork URL)."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

CacheKey = Tuple[str, str]


class PreviewCache:
    """
    Rendered PNGs for the lifetime of the process.

    Entries are never evicted, so memory grows with the number of distinct
    artwork URLs served. Concurrent renders of the same key simply overwrite
    each other (last writer wins).
    """

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, bytes] = {}

    def get(self, key: CacheKey) -> Optional[bytes]:
        return self._entries.get(key)

    def put(self, key: CacheKey, value: bytes) -> None:
        self._entries[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
