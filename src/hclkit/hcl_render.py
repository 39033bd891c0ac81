"""
Provides the `Renderer` class and emitter interface for turning parsed HCL trees into text.

Classes and Features:
    - Emitter (Protocol): Interface for all output emitters. Requires `__init__`,
      `emit_body` and `get_output`.
    - JsonEmitter: Emits the tree as JSON.
    - TreeEmitter: Emits an indented, human-readable debug tree.
    - Renderer: Selects an emitter by output format name and dispatches a
      `Body` to its `emit_body` method.

Usage:
    The CLI renders the (optionally merged) body returned by the parser.

Example:
    >>> renderer = Renderer("json")
    >>> text = renderer.render(parse('a = 1\\n'))

Raises:
    ValueError: If the output format is not supported.
    TypeError: If the renderer is given something other than a `Body`.
    NotImplementedError: If an emitter lacks an `emit_*` method for a node kind.
"""

from typing import Any, Protocol

from hclkit.emitters.json_emitter import JsonEmitter
from hclkit.emitters.tree_emitter import TreeEmitter
from hclkit.hcl_ast import Body, node_kind


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all hclkit output emitters.

    Methods:
        __init__(): Initializes the emitter.
        emit_body(body): Emits a complete body.
        get_output(): Returns the complete emitted text.
    """

    def __init__(self) -> None: ...  # pragma: no cover

    def emit_body(self, body: Body) -> Any: ...  # pragma: no cover

    def get_output(self) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

EMITTERS: dict[str, EmitterType] = {
    "json": JsonEmitter,
    "tree": TreeEmitter,
}


class Renderer:
    """Dispatches parsed HCL bodies to the emitter for an output format.

    Attributes:
        emitter (Emitter): The selected emitter instance.
    """

    def __init__(self, output_format: str) -> None:
        """Initializes the renderer with the desired output format.

        Args:
            output_format: The output format name ("json" or "tree").

        Raises:
            ValueError: If the output format is not supported.
        """
        output_format = output_format.lower()
        if output_format not in EMITTERS:
            raise ValueError(f"Unknown output format: {output_format!r}")
        self.emitter: Emitter = EMITTERS[output_format]()

    def render(self, body: Body) -> str:
        """Renders a body with the selected emitter.

        Args:
            body: A merged or unmerged body.

        Returns:
            The emitted text.

        Raises:
            TypeError: If `body` is not a Body.
        """
        if not isinstance(body, Body):
            raise TypeError("Renderer expects a Body instance.")
        self._visit(body)
        return self.emitter.get_output()

    def _visit(self, node: Any) -> None:
        """Invokes the emit method for a node's kind on the emitter.

        Raises:
            NotImplementedError: If the emitter does not support the node kind.
        """
        method_name = f"emit_{node_kind(node)}"
        if hasattr(self.emitter, method_name):
            getattr(self.emitter, method_name)(node)
        else:
            raise NotImplementedError(
                f"No emitter method for node kind '{node_kind(node)}' in {type(self.emitter).__name__}"
            )
