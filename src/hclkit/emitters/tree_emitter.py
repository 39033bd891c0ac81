"""
Emits parsed HCL trees as an indented debug listing.

The `TreeEmitter` prints one node per line, nested nodes indented by two
spaces. Scalars are shown inline with their variant, strings re-escaped so the
listing stays one line per node:

    Body (merged)
      name = String("foobar")
      allow = Blocks
        allow
          Body (merged)
            cidrs = Tuple
              String("127.0.0.1/32")
"""

from typing import Any

from hclkit.hcl_ast import Attribute, Block, Body, Value, node_kind
from hclkit.hcl_literals import escape_text


class TreeEmitter:
    """Emits a debug tree from HCL tree nodes.

    Every `emit_<kind>` method takes the node and a prefix (such as `"key = "`)
    to put in front of the node's first line.

    Attributes:
        lines (list[str]): Accumulated output lines.
        indent (int): Current indentation level.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.indent = 0

    def indent_str(self) -> str:
        return "  " * self.indent

    def get_output(self) -> str:
        return "\n".join(self.lines) + "\n"

    def line(self, text: str) -> None:
        self.lines.append(f"{self.indent_str()}{text}")

    def emit_body(self, body: Body, prefix: str = "") -> None:
        self.line(f"{prefix}Body ({'merged' if body.is_merged else 'unmerged'})")
        self.indent += 1
        if body.is_merged:
            for key, value in body:
                self._visit(value, f"{key.text} = ")
        else:
            for element in body.elements:
                self._visit(element)
        self.indent -= 1

    def emit_attribute(self, attribute: Attribute, prefix: str = "") -> None:
        self._visit(attribute.value, f"{prefix}{attribute.key.text} = ")

    def emit_block(self, block: Block, prefix: str = "") -> None:
        labels = "".join(f' "{escape_text(label.text)}"' for label in block.labels)
        self.line(f"{prefix}Block {block.type}{labels}")
        self.indent += 1
        self.emit_body(block.body)
        self.indent -= 1

    def emit_null(self, value: Value, prefix: str = "") -> None:
        self.line(f"{prefix}Null")

    def emit_integer(self, value: Value, prefix: str = "") -> None:
        self.line(f"{prefix}Integer({value.as_integer()})")

    def emit_float(self, value: Value, prefix: str = "") -> None:
        self.line(f"{prefix}Float({value.as_float()!r})")

    def emit_boolean(self, value: Value, prefix: str = "") -> None:
        self.line(f"{prefix}Boolean({'true' if value.as_boolean() else 'false'})")

    def emit_string(self, value: Value, prefix: str = "") -> None:
        self.line(f'{prefix}String("{escape_text(value.as_string())}")')

    def emit_tuple(self, value: Value, prefix: str = "") -> None:
        self.line(f"{prefix}Tuple")
        self.indent += 1
        for item in value.as_list():
            self._visit(item)
        self.indent -= 1

    def emit_object(self, value: Value, prefix: str = "") -> None:
        self.line(f"{prefix}Object")
        self.indent += 1
        for stanza in value.as_object():
            self.line("Stanza")
            self.indent += 1
            for key, item in stanza.items():
                self._visit(item, f"{key.text} = ")
            self.indent -= 1
        self.indent -= 1

    def emit_blocks(self, value: Value, prefix: str = "") -> None:
        self.line(f"{prefix}Blocks")
        self.indent += 1
        for block_type, labels, body in value.as_blocks().flat_iter():
            quoted = "".join(f' "{escape_text(str(label))}"' for label in labels)
            self.line(f"{block_type}{quoted}")
            self.indent += 1
            self.emit_body(body)
            self.indent -= 1
        self.indent -= 1

    def _visit(self, node: Any, prefix: str = "") -> None:
        method_name = f"emit_{node_kind(node)}"
        if not hasattr(self, method_name):
            raise NotImplementedError(f"No emitter method for node kind '{node_kind(node)}'")
        getattr(self, method_name)(node, prefix)
