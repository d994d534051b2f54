"""Print parser callbacks in the plain-text trace format of vtparse_test."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import IO, Callable, List, Optional

from .parser import Parser
from .table import Action

__all__ = ["VTParseHandler", "null_handler", "main"]


def describe_char(char: int, codes_only: bool) -> str:
    if codes_only:
        return f"0x{char:02x}"
    return f"0x{char:02x} ('{chr(char)}')"


class VTParseHandler:
    def __init__(self, codes_only: bool = False, out: Optional[IO[str]] = None):
        self.codes_only = codes_only
        self.out = out if out is not None else sys.stdout

    def describe(self, parser: Parser, action: Action, char: int) -> List[str]:
        lines = [f"Received action {action}"]
        if char != 0:
            lines.append(f"Char: {describe_char(char, self.codes_only)}")
        if parser.num_intermediate_chars > 0:
            lines.append(f"{parser.num_intermediate_chars} Intermediate chars:")
            for c in parser.intermediate:
                lines.append(f"  {describe_char(c, self.codes_only)}")
        if parser.num_params > 0:
            # the count may exceed what was stored; only stored values are printed
            lines.append(f"{parser.num_params} Parameters:")
            for p in parser.parameters:
                lines.append(f"\t{p}")
        lines.append("")
        return lines

    def __call__(self, parser: Parser, action: Action, char: int) -> None:
        for line in self.describe(parser, action, char):
            print(line, file=self.out)


def null_handler(parser: Parser, action: Action, char: int) -> None:
    pass


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(
        prog="vtparse", description="print the actions of a terminal byte stream"
    )
    ap.add_argument(
        "--codes-only",
        action="store_true",
        help="print characters as hex codes only",
    )
    ap.add_argument(
        "-n",
        "--null",
        action="store_true",
        help="null handler that does nothing (for profiling)",
    )
    ap.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="log every state transition to stderr",
    )
    ap.add_argument(
        "file",
        nargs="?",
        default="-",
        type=argparse.FileType("rb"),
        help="the file to parse, or - for stdin (defaults to stdin)",
    )
    args = ap.parse_args(argv)
    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s:%(name)s: %(message)s"
        )
    handler: Callable[[Parser, Action, int], None]
    if args.null:
        handler = null_handler
    else:
        handler = VTParseHandler(codes_only=args.codes_only)
    parser_ = Parser(handler, debug=args.debug)
    infile = args.file
    # work around argparse bug (https://github.com/python/cpython/pull/13165)
    if hasattr(infile, "buffer"):
        infile = infile.buffer
    with infile:
        parser_.parse(infile)
