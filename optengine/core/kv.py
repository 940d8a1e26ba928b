"""Ordered key/value snapshots reported to observers."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Tuple


class KV:
    """Ordered mapping from string keys to reportable values.

    Insertion order is the display order. Setting an existing key replaces
    its value in place without moving it.

    Example:
        >>> kv = KV().set("alpha", 0.5).set("direction_norm", 1.2)
        >>> list(kv)
        ['alpha', 'direction_norm']
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = {}
        if data:
            for key, value in data.items():
                self.set(key, value)

    @classmethod
    def from_pairs(cls, *pairs: Tuple[str, Any]) -> "KV":
        kv = cls()
        for key, value in pairs:
            kv.set(key, value)
        return kv

    def set(self, key: str, value: Any) -> "KV":
        if not isinstance(key, str):
            raise TypeError(f"KV keys must be str, got {type(key).__name__}")
        self._data[key] = value
        return self

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def merge(self, other: Optional["KV"]) -> "KV":
        """Return a new KV with the entries of ``other`` appended (later wins)."""
        merged = KV(self._data)
        if other is not None:
            for key, value in other.items():
                merged.set(key, value)
        return merged

    def items(self) -> Iterator[Tuple[str, Any]]:
        return iter(self._data.items())

    def keys(self) -> list[str]:
        return list(self._data)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self._data.items())
        return f"KV({body})"

    def __getstate__(self) -> Dict[str, Any]:
        return self._data

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self._data = dict(state)


__all__ = ["KV"]
