"""
Maps parsed HCL bodies onto dataclass record types.

`deserialize_into(body, record_type)` merges the body and fills the dataclass
fields from it:

- Attributes fill fields by name (or by `field(metadata={"hcl": "name"})`),
  coerced with the typed `Value` accessors: `int`, `float` (integers widen),
  `bool`, `str`, `list[T]`, `tuple[T, ...]`, `dict[str, T]`, `Optional[T]`,
  nested dataclasses (from a single-stanza object) and `Any` (plain data).
- Blocks fill fields typed as a dataclass (exactly one block body),
  `list[Dataclass]` (every body, labels ignored), `dict[str, T]` (one label
  level per dict, `T` again a dataclass, list or dict) or `Any` (a list of
  `{"labels": [...], "body": {...}}`).
- Missing fields with a default keep it; missing `Optional` fields are None.

Example:
    @dataclass
    class Rule:
        name: str
        cidrs: list[str]

    @dataclass
    class Group:
        name: str
        allow: list[Rule] = field(default_factory=list)

    group = deserialize_into(parse(text), Group)

Raises:
    DeserializeError: If a required field is missing, a value has the wrong
        variant, or a field type cannot be produced from HCL.
"""

import dataclasses
import logging
import types
import typing
from typing import Any, TypeVar, Union

from hclkit.hcl_ast import Body, Value
from hclkit.hcl_blocks import BlockBody
from hclkit.hcl_constants import BLOCK_KIND, OBJECT_KIND
from hclkit.hcl_errors import DeserializeError, UnexpectedVariantError
from hclkit.hcl_merge import MapValues

logger = logging.getLogger(__name__)

T = TypeVar("T")

HCL_NAME = "hcl"
"""Dataclass field metadata key naming the HCL key of a field."""

_UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)


def deserialize_into(body: Body, record_type: type[T]) -> T:
    """Builds a `record_type` instance from a body.

    Args:
        body: A merged or unmerged body; it is merged first.
        record_type: A dataclass type.

    Returns:
        The populated record.

    Raises:
        DeserializeError: On any mapping failure.
        IllegalMultipleEntriesError, ErrorMergingKeysError: If the body cannot be merged.
    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise DeserializeError(f"{record_type!r} is not a dataclass type")
    logger.debug("Deserializing body into %s", record_type.__name__)
    return _record(body.merge(), record_type, record_type.__name__)


def _record(body: Body, record_type: Any, path: str) -> Any:
    hints = typing.get_type_hints(record_type)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(record_type):
        if not f.init:
            continue
        name = f.metadata.get(HCL_NAME, f.name)
        field_type = hints.get(f.name, Any)
        field_path = f"{path}.{name}"
        value = body.get(name)
        if value is None:
            if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
                continue
            if _is_optional(field_type):
                kwargs[f.name] = None
                continue
            raise DeserializeError(f"Missing required field {field_path}")
        kwargs[f.name] = _convert(value, field_type, field_path)
    return record_type(**kwargs)


def _is_optional(tp: Any) -> bool:
    return typing.get_origin(tp) in _UNION_TYPES and type(None) in typing.get_args(tp)


def _is_dataclass_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def _convert(value: Value, tp: Any, path: str) -> Any:
    try:
        return _convert_value(value, tp, path)
    except UnexpectedVariantError as e:
        raise DeserializeError(f"{path}: {e.message}") from e


def _convert_value(value: Value, tp: Any, path: str) -> Any:
    if value.kind == BLOCK_KIND:
        return _blocks_field(value, tp, path)
    if tp is Any:
        return value.to_python()
    if tp is list:
        tp = list[Any]
    elif tp is dict:
        tp = dict[str, Any]

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin in _UNION_TYPES:
        if value.is_null() and type(None) in args:
            return None
        candidates = [arg for arg in args if arg is not type(None)]
        if len(candidates) == 1:
            return _convert(value, candidates[0], path)
        for candidate in candidates:
            try:
                return _convert(value, candidate, path)
            except DeserializeError:
                continue
        raise DeserializeError(f"{path}: {value.kind} matches none of {tp!r}")

    if tp is bool:
        return value.as_boolean()
    if tp is int:
        return value.as_integer()
    if tp is float:
        return float(value.as_number())
    if tp is str:
        return value.as_string()
    if origin is list:
        item_type = args[0] if args else Any
        if value.kind == OBJECT_KIND and _is_dataclass_type(item_type):
            return [_stanza(stanza, item_type, f"{path}[{i}]") for i, stanza in enumerate(value.as_object())]
        return [_convert(item, item_type, f"{path}[{i}]") for i, item in enumerate(value.as_list())]

    if origin is tuple:
        items = value.as_list()
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(_convert(item, args[0], f"{path}[{i}]") for i, item in enumerate(items))
        if len(args) != len(items):
            raise DeserializeError(f"{path}: expected {len(args)} items, got {len(items)}")
        return tuple(_convert(item, arg, f"{path}[{i}]") for i, (item, arg) in enumerate(zip(args, items)))

    if origin is dict:
        item_type = args[1] if len(args) == 2 else Any
        combined = MapValues.new_merged(pair for stanza in value.as_object() for pair in stanza.items())
        return {str(key): _convert(item, item_type, f"{path}.{key}") for key, item in combined.items()}

    if _is_dataclass_type(tp):
        stanzas = value.as_object()
        if len(stanzas) != 1:
            raise DeserializeError(f"{path}: expected a single object, got {len(stanzas)}")
        return _stanza(stanzas[0], tp, path)

    raise DeserializeError(f"{path}: unsupported field type {tp!r}")


def _blocks_field(value: Value, tp: Any, path: str) -> Any:
    blocks = value.as_blocks()
    if len(blocks) != 1:
        raise DeserializeError(f"{path}: expected one block type, got {list(blocks)}")
    entry = next(iter(blocks.types.values()))
    return _block_node(entry, tp, path)


def _stanza(stanza: MapValues, record_type: Any, path: str) -> Any:
    return _record(Body(mapping=stanza), record_type, path)


def _block_node(node: BlockBody, tp: Any, path: str) -> Any:
    """Maps one level of the block index onto `tp`."""
    if tp is dict:
        tp = dict[str, Any]
    if tp is Any:
        return [
            {"labels": [str(label) for label in labels], "body": body.to_dict()}
            for labels, body in node.flat_iter()
        ]

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin in _UNION_TYPES:
        candidates = [arg for arg in args if arg is not type(None)]
        if len(candidates) != 1:
            raise DeserializeError(f"{path}: ambiguous block field type {tp!r}")
        return _block_node(node, candidates[0], path)

    if _is_dataclass_type(tp):
        bodies = [body for _, body in node.flat_iter()]
        if len(bodies) != 1:
            raise DeserializeError(f"{path}: expected exactly one block, got {len(bodies)}")
        return _record(bodies[0].merge(), tp, path)

    if origin is list:
        item_type = args[0] if args else Any
        if not _is_dataclass_type(item_type):
            raise DeserializeError(f"{path}: blocks map to list[dataclass], got {tp!r}")
        return [
            _record(body.merge(), item_type, f"{path}[{i}]")
            for i, (_, body) in enumerate(node.flat_iter())
        ]

    if origin is dict:
        item_type = args[1] if len(args) == 2 else Any
        if node.leaf or node.children is None:
            raise DeserializeError(f"{path}: dict fields need labeled blocks")
        return {
            str(label): _block_node(child, item_type, f"{path}.{label}")
            for label, child in node.children.items()
        }

    raise DeserializeError(f"{path}: blocks cannot fill a field of type {tp!r}")
