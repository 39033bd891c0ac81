"""
Defines the document tree produced by the HCL parser.

Classes:
    Key:
        An attribute or object element name. Identifier, quoted string, or
        verbatim expression text; compares and hashes by its text.

    BlockLabel:
        A label qualifying a block type. Identifier or quoted string;
        compares and hashes by its text.

    Value:
        Tagged union of expression values: null, integer, float, boolean,
        string, tuple, object, plus block collections inside merged bodies.
        Typed accessors raise `UnexpectedVariantError` on the wrong variant.

    Attribute:
        A `key = value` body element.

    Block:
        A typed, optionally labeled, nested body.

    Body:
        Either the ordered element list produced by the parser (unmerged) or
        the key-to-value mapping produced by `Body.merge()` (merged).

    ElementDict:
        TypedDict shape of one unmerged body element, as returned by
        `Body.to_elements()`.

Usage:
    Bodies come out of `hcl_parser.parse`. Downstream code either walks the
    unmerged elements in source order, or merges the body and queries it by
    key and block label path.

Example:
    body = parse('a = 1\nb { c = "x" }\n').merge()
    body.get("a").as_integer()                     # 1
    body.blocks().get("b").bodies()[0].get("c")    # Value.string('x')
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Any, TypedDict, Union

from hclkit.hcl_blocks import Blocks
from hclkit.hcl_constants import (
    BLOCK_KIND,
    BOOLEAN_KIND,
    FLOAT_KIND,
    INTEGER_KIND,
    NULL_KIND,
    OBJECT_KIND,
    SCALAR_KINDS,
    STRING_KIND,
    TUPLE_KIND,
    VALUE_KINDS,
)
from hclkit.hcl_errors import BugError, UnexpectedVariantError
from hclkit.hcl_lexer import is_id_continue, is_id_start
from hclkit.hcl_merge import MapValues

logger = logging.getLogger(__name__)


class _Name:
    """Text with a syntactic kind; equal to any name or str with the same text."""

    KINDS: tuple[str, ...] = ()

    def __init__(self, text: str, kind: str):
        if kind not in self.KINDS:
            raise BugError(f"Unknown {type(self).__name__} kind {kind!r}")
        self.text = text
        self.kind = kind

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.text!r}, {self.kind!r})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, _Name):
            return self.text == other.text
        if isinstance(other, str):
            return self.text == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.text)


class Key(_Name):
    IDENTIFIER = "identifier"
    STRING = "string"
    EXPRESSION = "expression"
    KINDS = (IDENTIFIER, STRING, EXPRESSION)

    def __init__(self, name: str, kind: str = IDENTIFIER):
        super().__init__(name, kind)

    @property
    def name(self) -> str:
        return self.text

    @classmethod
    def for_text(cls, text: str) -> "Key":
        """Identifier key when `text` is a valid identifier, else a string key."""
        return cls(text, cls.IDENTIFIER if _is_identifier(text) else cls.STRING)


class BlockLabel(_Name):
    IDENTIFIER = "identifier"
    STRING = "string"
    KINDS = (IDENTIFIER, STRING)

    def __init__(self, text: str, kind: str = STRING):
        super().__init__(text, kind)


def _is_identifier(text: str) -> bool:
    return bool(text) and is_id_start(text[0]) and all(is_id_continue(c) for c in text[1:])


class Value:
    """
    An HCL expression value.

    A single class tagged by `kind`; the payload type depends on the kind:

        null      None
        integer   int (signed 64-bit range)
        float     float
        boolean   bool
        string    str
        tuple     list[Value]
        object    list[MapValues], one entry per `{ ... }` stanza
        block     Blocks (merged bodies only)

    Integers and floats are distinct variants and never compare equal.

    Args:
        kind (str): One of `hcl_constants.VALUE_KINDS`.
        payload (Any): The payload matching `kind`.

    Raises:
        BugError: If `kind` is not a known value kind.
    """

    def __init__(self, kind: str, payload: Any = None):
        if kind not in VALUE_KINDS:
            raise BugError(f"Unknown value kind {kind!r}")
        self.kind = kind
        self._payload = payload

    # Construction

    @classmethod
    def null(cls) -> "Value":
        return cls(NULL_KIND)

    @classmethod
    def from_int(cls, value: int) -> "Value":
        return cls(INTEGER_KIND, value)

    @classmethod
    def from_float(cls, value: float) -> "Value":
        return cls(FLOAT_KIND, value)

    @classmethod
    def from_bool(cls, value: bool) -> "Value":
        return cls(BOOLEAN_KIND, value)

    @classmethod
    def from_str(cls, value: str) -> "Value":
        return cls(STRING_KIND, value)

    @classmethod
    def from_list(cls, values: Iterable["Value"]) -> "Value":
        return cls(TUPLE_KIND, list(values))

    @classmethod
    def from_stanzas(cls, stanzas: Iterable[MapValues]) -> "Value":
        return cls(OBJECT_KIND, list(stanzas))

    @classmethod
    def from_mapping(cls, pairs: Iterable[tuple[Any, "Value"]]) -> "Value":
        """Builds a single-stanza object, folding repeated keys."""
        keyed = ((key if isinstance(key, Key) else Key.for_text(key), value) for key, value in pairs)
        return cls(OBJECT_KIND, [MapValues.new_merged(keyed)])

    @classmethod
    def from_blocks(cls, blocks: Blocks) -> "Value":
        return cls(BLOCK_KIND, blocks)

    @classmethod
    def from_python(cls, obj: Any) -> "Value":
        """Converts plain Python data to a Value.

        `dict` becomes a single-stanza object; `list` and `tuple` become a
        tuple value. Values, MapValues and Blocks are accepted as-is.

        Raises:
            TypeError: If `obj` has no HCL counterpart.
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.from_bool(obj)
        if isinstance(obj, int):
            return cls.from_int(obj)
        if isinstance(obj, float):
            return cls.from_float(obj)
        if isinstance(obj, str):
            return cls.from_str(obj)
        if isinstance(obj, (list, tuple)):
            return cls.from_list(cls.from_python(item) for item in obj)
        if isinstance(obj, dict):
            return cls.from_mapping((key, cls.from_python(value)) for key, value in obj.items())
        if isinstance(obj, MapValues):
            return cls.from_stanzas([obj])
        if isinstance(obj, Blocks):
            return cls.from_blocks(obj)
        raise TypeError(f"Cannot convert {type(obj).__name__} to an HCL value")

    def replace(self, payload: Any) -> "Value":
        """Returns a new value of the same kind with a different payload."""
        return Value(self.kind, payload)

    # Inspection

    @property
    def variant_name(self) -> str:
        return self.kind

    def is_null(self) -> bool:
        return self.kind == NULL_KIND

    def is_scalar(self) -> bool:
        return self.kind in SCALAR_KINDS

    def unwrap(self) -> Any:
        """Returns the raw payload without checking the variant."""
        return self._payload

    def _expect(self, *kinds: str) -> Any:
        if self.kind not in kinds:
            raise UnexpectedVariantError(" or ".join(kinds), self.kind)
        return self._payload

    def as_integer(self) -> int:
        return self._expect(INTEGER_KIND)

    def as_float(self) -> float:
        return self._expect(FLOAT_KIND)

    def as_number(self) -> int | float:
        return self._expect(INTEGER_KIND, FLOAT_KIND)

    def as_boolean(self) -> bool:
        return self._expect(BOOLEAN_KIND)

    def as_string(self) -> str:
        return self._expect(STRING_KIND)

    def as_list(self) -> list["Value"]:
        return self._expect(TUPLE_KIND)

    def as_object(self) -> list[MapValues]:
        return self._expect(OBJECT_KIND)

    def as_blocks(self) -> Blocks:
        return self._expect(BLOCK_KIND)

    def len_scalar(self) -> int:
        """Counts scalar leaves below (and including) this value."""
        if self.kind in SCALAR_KINDS:
            return 1
        if self.kind == TUPLE_KIND:
            return sum(item.len_scalar() for item in self._payload)
        if self.kind == OBJECT_KIND:
            return sum(stanza.len_scalar() for stanza in self._payload)
        return sum(body.len_scalar() for _, _, body in self._payload.flat_iter())

    # Transformation

    def merge(self) -> "Value":
        """Merges every body nested in this value. Scalars are returned as-is."""
        if self.kind == TUPLE_KIND:
            return self.replace([item.merge() for item in self._payload])
        if self.kind == OBJECT_KIND:
            return self.replace([stanza.map_values(Value.merge) for stanza in self._payload])
        if self.kind == BLOCK_KIND:
            return self.replace(self._payload.map_bodies(Body.merge))
        return self

    def to_python(self) -> Any:
        """
        Converts the value to plain Python data.

        Objects become a list of dicts (one per stanza). Block collections
        become a dict from block type to a list of `{"labels": [...], "body": {...}}`.
        """
        if self.kind in SCALAR_KINDS:
            return self._payload
        if self.kind == TUPLE_KIND:
            return [item.to_python() for item in self._payload]
        if self.kind == OBJECT_KIND:
            return [stanza.to_python() for stanza in self._payload]
        result: dict[str, list[dict[str, Any]]] = {}
        for block_type, labels, body in self._payload.flat_iter():
            result.setdefault(block_type, []).append(
                {"labels": [str(label) for label in labels], "body": body.to_dict()}
            )
        return result

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Value) and self.kind == other.kind and self._payload == other._payload

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self.kind == NULL_KIND:
            return "Value.null()"
        return f"Value.{self.kind}({self._payload!r})"


class Attribute:
    """A `key = value` element of a body."""

    def __init__(self, key: Key | str, value: Value):
        self.key = key if isinstance(key, Key) else Key.for_text(key)
        self.value = value

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Attribute) and self.key == other.key and self.value == other.value

    def __repr__(self) -> str:
        return f"Attribute({self.key.text!r}, {self.value!r})"


class Block:
    """
    A typed, optionally labeled, nested body.

    Args:
        type_ (str): The block type identifier.
        labels (list[BlockLabel | str]): Labels in source order; plain strings
            become string labels.
        body (Body): The nested body.
        line (int): Source line of the block type (default is 0).
        col (int): Source column of the block type (default is 0).
    """

    def __init__(
        self,
        type_: str,
        labels: Iterable[BlockLabel | str] | None = None,
        body: Union["Body", None] = None,
        line: int = 0,
        col: int = 0,
    ):
        self.type = type_
        self.labels: list[BlockLabel] = [
            label if isinstance(label, BlockLabel) else BlockLabel(label) for label in labels or []
        ]
        self.body = body if body is not None else Body()
        self.line = line
        self.col = col

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Block)
            and self.type == other.type
            and self.labels == other.labels
            and self.body == other.body
        )

    def __repr__(self) -> str:
        labels = ", ".join(repr(label.text) for label in self.labels)
        return f"Block({self.type!r}, [{labels}], {self.body!r})"


Element = Union[Attribute, Block]


class ElementDict(TypedDict, total=False):
    """
    Plain-data shape of one unmerged body element.

    Fields:
        kind (str): "attribute" or "block".
        key (str): Attribute key (attributes only).
        value (Any): Attribute value as plain Python data (attributes only).
        type (str): Block type (blocks only).
        labels (list[str]): Block labels (blocks only).
        body (list[ElementDict]): Nested elements (blocks only).
    """

    kind: str
    key: str
    value: Any
    type: str
    labels: list[str]
    body: list["ElementDict"]


class Body:
    """
    An HCL body in one of two forms.

    Unmerged: the ordered list of `Attribute` and `Block` elements exactly as
    parsed, repeated keys included. Merged: a `MapValues` from key to value
    where attribute values are kept and blocks of one type are indexed into a
    `Value.from_blocks(...)` under the block type.

    Args:
        elements (list[Attribute | Block], optional): Elements of an unmerged body.
        mapping (MapValues, optional): Contents of a merged body.

    Methods:
        merge(): Returns the merged form.
        unmerge(): Returns the unmerged form.
        get(key): Merged: the value or None. Unmerged: all values for the key, or None.
        attributes(), blocks(): Split views of the contents.
        len_scalar(): Recursive count of scalar leaves.
        to_dict(), to_elements(): Plain-data views.
    """

    def __init__(self, elements: Iterable[Element] | None = None, mapping: MapValues | None = None):
        if elements is not None and mapping is not None:
            raise BugError("A body is either merged or unmerged, not both")
        self._mapping = mapping
        self._elements: list[Element] | None = None if mapping is not None else list(elements or [])

    @classmethod
    def new_unmerged(cls, elements: Iterable[Element]) -> "Body":
        return cls(elements=elements)

    @classmethod
    def new_merged(cls, pairs: Iterable[tuple[Key, Value]]) -> "Body":
        """Builds a merged body by folding `(key, value)` pairs.

        Raises:
            IllegalMultipleEntriesError: On a repeated scalar or tuple key.
            ErrorMergingKeysError: On a repeated key with mismatched variants.
        """
        return cls(mapping=MapValues.new_merged(pairs))

    @property
    def is_merged(self) -> bool:
        return self._mapping is not None

    @property
    def elements(self) -> list[Element]:
        """The element list of an unmerged body."""
        if self._elements is None:
            raise BugError("Merged bodies have no element list; call unmerge() first")
        return self._elements

    @property
    def mapping(self) -> MapValues:
        """The mapping of a merged body."""
        if self._mapping is None:
            raise BugError("Unmerged bodies have no mapping; call merge() first")
        return self._mapping

    def merge(self) -> "Body":
        """
        Returns the merged form of this body.

        Attribute values are merged recursively; blocks are grouped per type
        into a block collection and their bodies merged. A merged body is
        returned unchanged.

        Raises:
            IllegalMultipleEntriesError: If a scalar or tuple key repeats.
            ErrorMergingKeysError: If a repeated key mixes objects and blocks.
        """
        if self._mapping is not None:
            return self
        logger.debug("Merging body of %d elements", len(self.elements))
        return Body.new_merged(self._merge_pairs())

    def _merge_pairs(self) -> Iterator[tuple[Key, Value]]:
        for element in self.elements:
            if isinstance(element, Attribute):
                yield element.key, element.value.merge()
            else:
                merged = Block(element.type, element.labels, element.body.merge(), element.line, element.col)
                yield Key(element.type), Value.from_blocks(Blocks.new([merged]))

    def unmerge(self) -> "Body":
        """Returns the unmerged form, rebuilding blocks from their index."""
        if self._mapping is None:
            return self
        elements: list[Element] = []
        for key, value in self._mapping.items():
            if value.kind == BLOCK_KIND:
                for block_type, labels, body in value.as_blocks().flat_iter():
                    elements.append(Block(block_type, labels, body.unmerge()))
            else:
                elements.append(Attribute(key, value))
        return Body(elements=elements)

    def get(self, key: str) -> Value | list[Value] | None:
        if self._mapping is not None:
            return self._mapping.get(key)
        found = [value for element_key, value in self if element_key == key]
        return found or None

    def attributes(self) -> list[Attribute]:
        if self._mapping is not None:
            return [Attribute(key, value) for key, value in self._mapping.items() if value.kind != BLOCK_KIND]
        return [element for element in self.elements if isinstance(element, Attribute)]

    def blocks(self) -> Blocks:
        """All blocks of this body, indexed by type and label path."""
        if self._mapping is not None:
            index = Blocks()
            for value in self._mapping.values():
                if value.kind == BLOCK_KIND:
                    index.extend(value.as_blocks())
            return index
        return Blocks.new(element for element in self.elements if isinstance(element, Block))

    def len_scalar(self) -> int:
        return sum(value.len_scalar() for _, value in self)

    def to_dict(self) -> dict[str, Any]:
        """The merged contents as plain Python data (merging a copy if needed)."""
        return self.merge().mapping.to_python()

    def to_elements(self) -> list[ElementDict]:
        """The unmerged elements as plain Python data."""
        result: list[ElementDict] = []
        for element in self.unmerge().elements:
            if isinstance(element, Attribute):
                result.append({"kind": "attribute", "key": element.key.text, "value": element.value.to_python()})
            else:
                result.append(
                    {
                        "kind": "block",
                        "type": element.type,
                        "labels": [label.text for label in element.labels],
                        "body": element.body.to_elements(),
                    }
                )
        return result

    def __iter__(self) -> Iterator[tuple[Key, Value]]:
        if self._mapping is not None:
            yield from self._mapping.items()
            return
        for element in self.elements:
            if isinstance(element, Attribute):
                yield element.key, element.value
            else:
                yield Key(element.type), Value.from_blocks(Blocks.new([element]))

    def __len__(self) -> int:
        if self._mapping is not None:
            return len(self._mapping)
        return len(self.elements)

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Body)
            and self._mapping == other._mapping
            and self._elements == other._elements
        )

    def __repr__(self) -> str:
        if self._mapping is not None:
            return f"Body(merged={self._mapping!r})"
        return f"Body({self._elements!r})"


def node_kind(node: Any) -> str:
    """Names a tree node for `emit_<kind>` dispatch.

    Bodies are "body", attributes "attribute", blocks "block" and values their
    value kind, except block collections, which are "blocks".

    Raises:
        TypeError: If `node` is not a tree node.
    """
    if isinstance(node, Body):
        return "body"
    if isinstance(node, Attribute):
        return "attribute"
    if isinstance(node, Block):
        return "block"
    if isinstance(node, Value):
        return "blocks" if node.kind == BLOCK_KIND else node.kind
    raise TypeError(f"Not an HCL tree node: {type(node).__name__}")
