"""
hclkit CLI Entrypoint.

This module provides the command-line interface for parsing HCL documents and
printing the resulting tree.

Features:
    - Read HCL from a file or from standard input (`-`).
    - Parse, and merge unless `--no-merge` is given.
    - Render the tree as an indented debug tree or as JSON.
    - Write to a file or to standard output (`-`).
    - Report parse and merge errors on standard error with exit status 1.

Example usage:
    hclkit parse main.hcl
    hclkit parse --no-merge --format json main.hcl out.json
    cat main.hcl | hclkit parse - -
    python -m hclkit.hcl_cli parse --verbose main.hcl

Functions:
    run_parse(input_path: str = "-", output_path: str = "-", merge: bool = True,
              output_format: str = "tree", max_depth: int = MAX_NESTING_DEPTH) -> None:
        Runs the parse pipeline (read → parse → merge → render → write).

    build_parser() -> argparse.ArgumentParser:
        Builds the argument parser with its `parse` subcommand.

    main(argv: list[str] | None = None) -> None:
        Parses CLI arguments, configures logging and runs the selected command.
"""

import argparse
import logging
import sys

from hclkit.hcl_constants import MAX_NESTING_DEPTH
from hclkit.hcl_errors import HclError, HclIOError
from hclkit.hcl_parser import parse_file
from hclkit.hcl_render import EMITTERS, Renderer

logger = logging.getLogger(__name__)

STDIO_PATH = "-"


def run_parse(
    input_path: str = STDIO_PATH,
    output_path: str = STDIO_PATH,
    merge: bool = True,
    output_format: str = "tree",
    max_depth: int = MAX_NESTING_DEPTH,
) -> None:
    """
    Parse an HCL document and write the rendered tree.

    Args:
        input_path (str): Path to read HCL from, or `-` for standard input.
        output_path (str): Path to write the tree to, or `-` for standard output.
        merge (bool): If True, merges the body before rendering. Defaults to True.
        output_format (str): "tree" or "json". Defaults to "tree".
        max_depth (int): Deepest accepted nesting of tuples, objects and blocks.

    Raises:
        HclError: On any read, parse, merge or write failure.
    """
    if input_path == STDIO_PATH:
        logger.debug("Reading HCL from standard input")
        body = parse_file(getattr(sys.stdin, "buffer", sys.stdin), merge, max_depth)
    else:
        logger.debug("Reading HCL from %s", input_path)
        body = parse_file(input_path, merge, max_depth)

    text = Renderer(output_format).render(body)

    if output_path == STDIO_PATH:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        return

    logger.debug("Writing %s output to %s", output_format, output_path)
    try:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise HclIOError(f"Cannot write {output_path}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hclkit", description="HCL Parser")
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    parse_cmd = commands.add_parser(
        "parse", help="Parse a HCL file and print out the abstract syntax tree"
    )
    parse_cmd.add_argument(
        "--no-merge",
        dest="merge",
        action="store_false",
        help="Do not merge value after parsing",
    )
    parse_cmd.add_argument(
        "-f",
        "--format",
        dest="output_format",
        choices=sorted(EMITTERS),
        default="tree",
        help="Output format (default: tree)",
    )
    parse_cmd.add_argument(
        "--max-depth",
        type=int,
        default=MAX_NESTING_DEPTH,
        help=f"Maximum nesting of tuples, objects and blocks (default: {MAX_NESTING_DEPTH})",
    )
    parse_cmd.add_argument("--verbose", action="store_true", help="Log debug messages to stderr")
    parse_cmd.add_argument(
        "input",
        nargs="?",
        default=STDIO_PATH,
        metavar="input_path",
        help="Path to read the HCL from. Use - to refer to STDIN",
    )
    parse_cmd.add_argument(
        "output",
        nargs="?",
        default=STDIO_PATH,
        metavar="output_path",
        help="Path to write the parsed AST to. Use - to refer to STDOUT",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the hclkit CLI.

    Parses command-line arguments, configures logging (WARNING, or DEBUG with
    `--verbose`) and runs the `parse` command. Errors raised by hclkit are
    printed to standard error and end the process with exit status 1;
    usage errors exit with status 2.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        run_parse(
            input_path=args.input,
            output_path=args.output,
            merge=args.merge,
            output_format=args.output_format,
            max_depth=args.max_depth,
        )
    except HclError as e:
        logger.debug("Command failed with %s", e.kind.value)
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
