"""
Emits parsed HCL trees as JSON.

This module defines the `JsonEmitter` class used by the `Renderer` for the
`json` output format.

Output shape:
    - Merged body: an object from key to value.
    - Unmerged body: an array of elements, each
      `{"kind": "attribute", "key": ..., "value": ...}` or
      `{"kind": "block", "type": ..., "labels": [...], "body": ...}`.
    - Tuples become arrays; objects become an array with one object per stanza.
    - Block collections become an object from block type to an array of
      `{"labels": [...], "body": ...}`.

Non-finite floats (`1e400` parses to infinity) have no JSON form and are
rejected rather than written as the non-standard `Infinity` token.

Raises:
    - `NotImplementedError`: If an unrecognized node kind has no emitter method.
    - `InvalidNumberError`: If the tree holds an infinite or NaN float.
"""

import json
import math
from typing import Any

from hclkit.hcl_ast import Attribute, Block, Body, Value, node_kind
from hclkit.hcl_errors import InvalidNumberError


class JsonEmitter:
    """Emits JSON from HCL tree nodes.

    Each `emit_<kind>` method returns the plain-data form of its node. The
    result of `emit_body` is kept as the document serialized by `get_output`.

    Attributes:
        document (Any): The plain-data form of the last emitted body.
        indent (int): Indentation passed to `json.dumps`.
    """

    def __init__(self) -> None:
        self.document: Any = None
        self.indent = 2

    def get_output(self) -> str:
        return json.dumps(self.document, indent=self.indent, ensure_ascii=False, allow_nan=False)

    def emit_body(self, body: Body) -> Any:
        self.document = self._body(body)
        return self.document

    def emit_attribute(self, attribute: Attribute) -> dict[str, Any]:
        return {"kind": "attribute", "key": attribute.key.text, "value": self._visit(attribute.value)}

    def emit_block(self, block: Block) -> dict[str, Any]:
        return {
            "kind": "block",
            "type": block.type,
            "labels": [label.text for label in block.labels],
            "body": self._body(block.body),
        }

    def emit_null(self, value: Value) -> None:
        return None

    def emit_integer(self, value: Value) -> int:
        return value.as_integer()

    def emit_float(self, value: Value) -> float:
        number = value.as_float()
        if not math.isfinite(number):
            raise InvalidNumberError(repr(number))
        return number

    def emit_boolean(self, value: Value) -> bool:
        return value.as_boolean()

    def emit_string(self, value: Value) -> str:
        return value.as_string()

    def emit_tuple(self, value: Value) -> list[Any]:
        return [self._visit(item) for item in value.as_list()]

    def emit_object(self, value: Value) -> list[dict[str, Any]]:
        return [
            {str(key): self._visit(item) for key, item in stanza.items()}
            for stanza in value.as_object()
        ]

    def emit_blocks(self, value: Value) -> dict[str, list[dict[str, Any]]]:
        result: dict[str, list[dict[str, Any]]] = {}
        for block_type, labels, body in value.as_blocks().flat_iter():
            result.setdefault(block_type, []).append(
                {"labels": [str(label) for label in labels], "body": self._body(body)}
            )
        return result

    def _body(self, body: Body) -> Any:
        if body.is_merged:
            return {key.text: self._visit(value) for key, value in body}
        return [self._visit(element) for element in body.elements]

    def _visit(self, node: Any) -> Any:
        method_name = f"emit_{node_kind(node)}"
        if not hasattr(self, method_name):
            raise NotImplementedError(f"No emitter method for node kind '{node_kind(node)}'")
        return getattr(self, method_name)(node)
