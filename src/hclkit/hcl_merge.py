"""
Duplicate-key merge for HCL mappings.

`MapValues` is the ordered `Key -> Value` mapping used for object stanzas and
merged bodies. `MapValues.new_merged` folds a sequence of pairs left to right:

- a new key is inserted;
- a repeated key where either side is a scalar or tuple raises
  `IllegalMultipleEntriesError`;
- two objects are appended (their stanza lists are concatenated);
- two block collections are extended;
- an object colliding with a block collection raises `ErrorMergingKeysError`.

The fold never mutates the values it is given; merged values are new objects.
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from hclkit.hcl_constants import MERGEABLE_KINDS, OBJECT_KIND
from hclkit.hcl_errors import ErrorMergingKeysError, IllegalMultipleEntriesError

logger = logging.getLogger(__name__)


def merge_values(key: Any, existing: Any, incoming: Any) -> Any:
    """Combines two values found under the same key.

    Args:
        key: The colliding key (used in error messages).
        existing: The value already stored.
        incoming: The value being folded in.

    Returns:
        A new value holding both.

    Raises:
        IllegalMultipleEntriesError: If either value is a scalar or tuple.
        ErrorMergingKeysError: If one is an object and the other a block collection.
    """
    if existing.kind not in MERGEABLE_KINDS:
        raise IllegalMultipleEntriesError(str(key), existing.kind)
    if incoming.kind not in MERGEABLE_KINDS:
        raise IllegalMultipleEntriesError(str(key), incoming.kind)
    if existing.kind != incoming.kind:
        raise ErrorMergingKeysError(str(key), existing.kind, incoming.kind)

    if existing.kind == OBJECT_KIND:
        logger.debug("Appending object stanzas under key %r", str(key))
        return existing.replace(existing.unwrap() + incoming.unwrap())

    logger.debug("Extending block collection under key %r", str(key))
    blocks = existing.unwrap().copy()
    blocks.extend(incoming.unwrap())
    return existing.replace(blocks)


class MapValues:
    """An insertion-ordered mapping from keys to values.

    Keys hash and compare by their text, so lookups accept plain strings.
    """

    def __init__(self, values: dict[Any, Any] | None = None):
        self._values: dict[Any, Any] = dict(values) if values is not None else {}

    @classmethod
    def new_merged(cls, pairs: Iterable[tuple[Any, Any]]) -> "MapValues":
        """Folds `(key, value)` pairs, combining repeated keys.

        Raises:
            IllegalMultipleEntriesError: On a repeated scalar or tuple key.
            ErrorMergingKeysError: On a repeated key with mismatched variants.
        """
        merged: dict[Any, Any] = {}
        for key, value in pairs:
            if key in merged:
                # The dict keeps the first key object, and with it the key kind.
                merged[key] = merge_values(key, merged[key], value)
            else:
                merged[key] = value
        return cls(merged)

    def get(self, key: Any, default: Any = None) -> Any:
        return self._values.get(key, default)

    def keys(self):
        return self._values.keys()

    def values(self):
        return self._values.values()

    def items(self):
        return self._values.items()

    def len_scalar(self) -> int:
        return sum(value.len_scalar() for value in self._values.values())

    def map_values(self, fn) -> "MapValues":
        """Returns a new mapping with `fn` applied to every value."""
        return MapValues({key: fn(value) for key, value in self._values.items()})

    def to_python(self) -> dict[str, Any]:
        return {str(key): value.to_python() for key, value in self._values.items()}

    def __getitem__(self, key: Any) -> Any:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, MapValues) and self._values == other._values

    def __repr__(self) -> str:
        return f"MapValues({self._values!r})"
