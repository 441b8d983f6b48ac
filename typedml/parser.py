"""Document assembler: builds the TML tree from source text with an indentation stack."""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike
from typing import Any, NotRequired, Optional, TypedDict, Union

from .document import TMLDocument
from .line_parser import ParsedLine, parse_line
from .logger import Logger
from .nodes import ArrayValue, AttributeNode, BlockNode, CommentNode, Node, ObjectValue, ValueNode
from .position import create_line_position, create_position
from .utils import common_indent, leading_whitespace, resolve_config
from .values import TMLError, is_structured, parse_tml_value, parse_value

QUOTES = ('"', "'")


class TMLReadError(TMLError):
    def __init__(self, path: Union[str, PathLike], reason: Exception):
        super().__init__(f"Could not read {path}: {reason}")
        self.path = path
        self.reason = reason


class ParserConfig(TypedDict):
    parse: NotRequired[bool]
    hydrate_parents: NotRequired[bool]
    recover_unbalanced: NotRequired[bool]
    strip_comments: NotRequired[bool]
    enable_logger: NotRequired[bool]


class ParserConfigRequired(TypedDict):
    parse: bool
    hydrate_parents: bool
    recover_unbalanced: bool
    strip_comments: bool
    enable_logger: bool


DEFAULT_CONFIG: ParserConfigRequired = {
    "parse": True,
    "hydrate_parents": True,
    "recover_unbalanced": True,
    "strip_comments": False,
    "enable_logger": True,
}


@dataclass
class PendingValue:
    block: BlockNode
    indent: int
    start_line: int
    lines: list[str] = field(default_factory=list)


@dataclass
class PendingComment:
    start_line: int
    start_column: int
    lines: list[str] = field(default_factory=list)


def count_unescaped(text: str, char: str) -> int:
    return sum(1 for i, current in enumerate(text) if current == char and (i == 0 or text[i - 1] != "\\"))


def find_unclosed_comment(line: str) -> int:
    """Column of a ``/*`` outside quotes that is not closed on the same line, or -1.

    Comment markers only count at the start of a word, so ``http://`` stays text.
    """
    quote: Optional[str] = None
    i = 0
    while i < len(line):
        char = line[i]
        at_word_start = i == 0 or line[i - 1].isspace()
        if char in QUOTES and (i == 0 or line[i - 1] != "\\"):
            if quote == char:
                quote = None
            elif quote is None:
                quote = char
        elif quote is None and at_word_start and line.startswith("//", i):
            return -1
        elif quote is None and at_word_start and line.startswith("/*", i):
            close = line.find("*/", i + 2)
            if close == -1:
                return i
            i = close + 2
            continue
        i += 1
    return -1


def recover_unbalanced(source: str) -> tuple[str, str]:
    """Appends closing quotes and braces to the last non-blank line; returns the new source and the suffix."""
    suffix = ""
    for quote in QUOTES:
        if count_unescaped(source, quote) % 2:
            suffix += quote
    missing = source.count("{") - source.count("}")
    if missing > 0:
        suffix += "}" * missing
    if not suffix:
        return source, suffix
    body = source.rstrip()
    return body + suffix + source[len(body) :], suffix


def strip_comments(nodes: list[Any]) -> list[Any]:
    """Removes every comment from a tree, including those inside objects and arrays."""
    kept = [node for node in nodes if not isinstance(node, CommentNode)]
    for node in kept:
        if isinstance(node, BlockNode):
            node.children = strip_comments(node.children)
        elif isinstance(node, (AttributeNode, ValueNode)):
            _strip_value_comments(node.value)
    return kept


def _strip_value_comments(value: Any) -> None:
    if isinstance(value, ObjectValue):
        value.fields = [entry for entry in value.fields if not isinstance(entry, CommentNode)]
        for entry in value.fields:
            _strip_value_comments(entry.value)
    elif isinstance(value, ArrayValue):
        value.elements = [entry for entry in value.elements if not isinstance(entry, CommentNode)]
        for entry in value.elements:
            _strip_value_comments(entry.value)


class TMLParser:
    """Walks source lines keeping a stack of ``(indent, block)`` pairs.

    A line that is more indented than the stack top becomes its child; a line at
    the same or lower indentation pops until it finds its parent. Two kinds of
    input span several lines and are collected before being turned into nodes:
    values opened by a block header with a bare trailing ``:``, and ``/* */``
    comments whose closing marker is on a later line.
    """

    def __init__(self, source: str, config: Optional[ParserConfig] = None):
        self.config = resolve_config(config or {}, DEFAULT_CONFIG)
        self.logger = Logger(config={"name": "TML Parser", "is_enabled": self.config["enable_logger"]}).logger
        self.source = source.replace("\r\n", "\n")
        self.roots: list[Node] = []
        self._stack: list[tuple[int, BlockNode]] = []
        self._value: Optional[PendingValue] = None
        self._comment: Optional[PendingComment] = None
        self.document = TMLDocument()
        if self.config["parse"]:
            self.document = self.parse()
            self.logger.debug(f"Parsed {len(self.document)} root node(s)")

    def parse(self) -> TMLDocument:
        self.roots = []
        self._stack = []
        self._value = None
        self._comment = None
        source = self.source
        trimmed = source.strip()
        if not trimmed:
            return TMLDocument()
        if "\n" not in trimmed and is_structured(trimmed):
            self.roots.append(self._parse_standalone_literal(source, trimmed))
            return self._finish()

        if self.config["recover_unbalanced"]:
            source, suffix = recover_unbalanced(source)
            if suffix:
                self.logger.warning(f"Unbalanced input, appended {suffix!r} at end of document")

        lines = source.split("\n")
        for line_number, line in enumerate(lines, start=1):
            self._feed(line, line_number)
        if self._value is not None:
            self._finish_value()
        if self._comment is not None:
            self.logger.warning(f"Block comment opened on line {self._comment.start_line} is never closed")
            self._finish_comment(len(lines), None)
        return self._finish()

    def _parse_standalone_literal(self, source: str, trimmed: str) -> ValueNode:
        line_number, line = next((i, line) for i, line in enumerate(source.split("\n"), start=1) if line.strip())
        column = leading_whitespace(line)
        position = create_line_position(line_number, column, column + len(trimmed))
        return ValueNode(value=parse_value(trimmed, position), position=position)

    def _finish(self) -> TMLDocument:
        roots = self.roots
        if self.config["strip_comments"]:
            roots = strip_comments(roots)
        document = TMLDocument(nodes=roots)
        if self.config["hydrate_parents"]:
            document.hydrate_parents()
            self.logger.debug(f"Hydrated {len(document.arena)} arena entries")
        return document

    # Line dispatch -----------------------------------------------------------
    def _feed(self, line: str, line_number: int) -> None:
        if self._comment is not None:
            self._continue_comment(line, line_number)
            return
        if self._value is not None:
            if self._continue_value(line):
                return
            self._finish_value()
        if not line.strip():
            return
        opener = find_unclosed_comment(line)
        if opener != -1:
            self._begin_comment(line, line_number, opener)
            return
        self._handle(parse_line(line, line_number), line_number, pop=True)

    def _handle(self, parsed: ParsedLine, line_number: int, pop: bool) -> None:
        node = parsed.node
        if node is None:
            return
        if pop:
            self._pop_to(parsed.indent)
        self._attach(node)
        if isinstance(node, BlockNode):
            self._stack.append((parsed.indent, node))
            if parsed.opens_value:
                self._value = PendingValue(block=node, indent=parsed.indent, start_line=line_number + 1)

    def _pop_to(self, indent: int) -> None:
        while self._stack and indent <= self._stack[-1][0]:
            self._stack.pop()

    def _attach(self, node: Node) -> None:
        # pydantic copies lists on validation; append to the model's own list
        if self._stack:
            self._stack[-1][1].children.append(node)
        else:
            self.roots.append(node)

    # Multi-line values -------------------------------------------------------
    def _continue_value(self, line: str) -> bool:
        pending = self._value
        assert pending is not None
        if not line.strip():
            pending.lines.append("")
            return True
        if leading_whitespace(line) > pending.indent:
            pending.lines.append(line)
            return True
        return False

    def _finish_value(self) -> None:
        pending = self._value
        assert pending is not None
        self._value = None
        lines = pending.lines
        while lines and not lines[-1].strip():
            lines.pop()
        first = next((i for i, line in enumerate(lines) if line.strip()), None)
        if first is None:
            return
        content = lines[first:]
        position = create_position(
            pending.start_line + first,
            common_indent(content),
            pending.start_line + len(lines) - 1,
            len(content[-1].rstrip()),
        )
        value = parse_tml_value("\n".join(content), position)
        pending.block.children.append(ValueNode(value=value, is_multiline=True, position=position))
        self.logger.debug(f"Collected {len(content)} line(s) of value for block {pending.block.name!r}")

    # Multi-line block comments -----------------------------------------------
    def _begin_comment(self, line: str, line_number: int, opener: int) -> None:
        before = line[:opener]
        if before.strip():
            parsed = parse_line(before, line_number)
            # the comment follows the content, so a value cannot be opened here
            parsed.opens_value = False
            self._handle(parsed, line_number, pop=True)
        else:
            self._pop_to(leading_whitespace(line))
        self._comment = PendingComment(start_line=line_number, start_column=opener, lines=[line])

    def _continue_comment(self, line: str, line_number: int) -> None:
        pending = self._comment
        assert pending is not None
        pending.lines.append(line)
        close = line.find("*/")
        if close == -1:
            return
        self._finish_comment(line_number, close)
        rest = line[close + 2 :]
        if rest.strip():
            # keep the original columns for whatever follows the comment
            self._handle(parse_line(" " * (close + 2) + rest, line_number), line_number, pop=False)

    def _finish_comment(self, end_line: int, close: Optional[int]) -> None:
        pending = self._comment
        assert pending is not None
        self._comment = None
        joined = "\n".join(pending.lines)
        last = pending.lines[-1]
        if close is None:
            end, end_column = len(joined), len(last)
        else:
            end, end_column = len(joined) - len(last) + close, close + 2
        text = joined[pending.start_column + 2 : end].strip()
        position = create_position(pending.start_line, pending.start_column, end_line, end_column)
        self._attach(CommentNode(value=text, is_line_comment=False, position=position))


def parse_tml(source: str, hydrate_parents: bool = True, config: Optional[ParserConfig] = None) -> TMLDocument:
    """Parses TML source into a document; never raises on malformed input."""
    resolved: ParserConfig = {**(config or {}), "hydrate_parents": hydrate_parents, "parse": True}
    return TMLParser(source, resolved).document


def parse_file(path: Union[str, PathLike], config: Optional[ParserConfig] = None) -> TMLDocument:
    try:
        with open(path, "r", encoding="utf-8") as file:
            source = file.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise TMLReadError(path, exc) from exc
    return TMLParser(source, {**(config or {}), "parse": True}).document


__all__ = [
    "TMLReadError",
    "ParserConfig",
    "DEFAULT_CONFIG",
    "TMLParser",
    "recover_unbalanced",
    "find_unclosed_comment",
    "strip_comments",
    "parse_tml",
    "parse_file",
]
