"""Typed value parsing: scalars and the structured object/array scanner."""

from __future__ import annotations

import re
from typing import Optional

from .logger import Logger
from .nodes import (
    ArrayElement,
    ArrayValue,
    BooleanValue,
    CommentNode,
    NumberValue,
    ObjectField,
    ObjectValue,
    StringValue,
    Value,
)
from .position import Point, Position, create_line_position
from .utils import dedent_lines

MAX_NESTING_DEPTH = 64
NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "'": "'", "\\": "\\"}
KEY_STOP_CHARS = set(":,{}[]")

logger = Logger(config={"name": "TML Values"}).logger


class TMLError(Exception):
    pass


class StructuredValueError(TMLError):
    def __init__(self, message: str, text: str):
        super().__init__(f"{message}: {text!r}")
        self.text = text


def is_quoted(text: str) -> bool:
    return len(text) >= 2 and text[0] in ('"', "'") and text[-1] == text[0]


def is_object_literal(text: str) -> bool:
    return text.startswith("{") and text.endswith("}")


def is_array_literal(text: str) -> bool:
    return text.startswith("[") and text.endswith("]")


def is_structured(text: str) -> bool:
    return is_object_literal(text) or is_array_literal(text)


def is_boolean(text: str) -> bool:
    return text in ("true", "false")


def is_numeric(text: str) -> bool:
    return bool(text) and NUMBER_RE.fullmatch(text) is not None


def is_unquoted_string(text: str) -> bool:
    trimmed = text.strip()
    return not (is_quoted(trimmed) or is_boolean(trimmed) or is_numeric(trimmed) or is_structured(trimmed))


def unescape(text: str) -> str:
    return ESCAPE_RE.sub(lambda match: ESCAPES.get(match.group(1), match.group(0)), text)


def parse_string_value(text: str, position: Optional[Position] = None) -> StringValue:
    parsed = text.strip()
    if is_quoted(parsed):
        parsed = unescape(parsed[1:-1])
    return StringValue(value=parsed, position=position)


def parse_number_value(text: str, position: Optional[Position] = None) -> NumberValue:
    return NumberValue(value=float(text.strip()), position=position)


def parse_boolean_value(text: str, position: Optional[Position] = None) -> BooleanValue:
    return BooleanValue(value=text.strip() == "true", position=position)


def _dispatch(text: str, position: Optional[Position], depth: int) -> Value:
    trimmed = text.strip()
    if is_structured(trimmed):
        if depth > MAX_NESTING_DEPTH:
            logger.warning(f"Literal nested deeper than {MAX_NESTING_DEPTH} levels kept as a string")
            return StringValue(value=trimmed, position=position)
        return StructuredValueParser(trimmed, position, depth).parse()
    if is_boolean(trimmed):
        return parse_boolean_value(trimmed, position)
    if is_numeric(trimmed):
        return parse_number_value(trimmed, position)
    return parse_string_value(trimmed, position)


def parse_value(text: str, position: Optional[Position] = None) -> Value:
    """Parses one value expression; malformed structured literals become Strings."""
    try:
        return _dispatch(text, position, 0)
    except StructuredValueError as exc:
        logger.warning(f"Failed to parse structured value, falling back to string: {exc}")
        return StringValue(value=text.strip(), position=position)


def normalize_multiline(content: str) -> str:
    return "\n".join(dedent_lines(content.split("\n"))).strip()


class StructuredValueParser:
    """Single left-to-right scan over the inner text of an object or array literal.

    Tracks the active quote plus nested brace/bracket depth. At depth zero,
    outside quotes, a ``,`` separates entries, and so does whitespace when the
    lookahead shows another entry starting (commas are optional). Comments at
    depth zero become Comment entries in source order. Each entry value is
    dispatched again, which gives full recursion for nested literals.
    """

    def __init__(self, text: str, position: Optional[Position] = None, depth: int = 0):
        self.text = text.strip()
        self.position = position
        self.depth = depth
        self.content = self.text[1:-1]
        self._origin = self._resolve_origin()
        if "\n" in self.content:
            self.content = normalize_multiline(self.content)
            self._origin = None
        self._quote: Optional[str] = None
        self._braces = 0
        self._brackets = 0

    def parse(self) -> Value:
        if is_object_literal(self.text):
            return self.parse_object()
        return self.parse_array()

    def parse_object(self) -> ObjectValue:
        entries: list = []
        content = self.content
        key_span: Optional[tuple[int, int]] = None
        start = 0
        i = 0
        while i <= len(content):
            char = content[i] if i < len(content) else ","
            if i < len(content) and self._is_free:
                comment = self._match_comment(i)
                if comment is not None:
                    end, node = comment
                    if key_span is not None and content[start:i].strip():
                        entries.append(self._field(key_span, (start, i)))
                        key_span = None
                    elif key_span is None and content[start:i].strip():
                        entries.append(self._field((start, i), None))
                    entries.append(node)
                    start = i = end
                    continue
            self._track(content, i, char)
            if char == ":" and self._is_free and key_span is None:
                key_span = (start, i)
                start = i + 1
            elif self._is_free and (
                char == ","
                or (
                    char.isspace()
                    and key_span is not None
                    and content[start:i].strip()
                    and self._starts_new_field(i + 1)
                )
            ):
                if key_span is not None:
                    entries.append(self._field(key_span, (start, i)))
                elif content[start:i].strip():
                    entries.append(self._field((start, i), None))
                key_span = None
                start = i + 1
            i += 1
        self._check_balanced()
        return ObjectValue(fields=entries, position=self.position)

    def parse_array(self) -> ArrayValue:
        entries: list = []
        content = self.content
        start = 0
        i = 0
        while i <= len(content):
            char = content[i] if i < len(content) else ","
            if i < len(content) and self._is_free:
                comment = self._match_comment(i)
                if comment is not None:
                    end, node = comment
                    if content[start:i].strip():
                        entries.append(self._element((start, i)))
                    entries.append(node)
                    start = i = end
                    continue
            self._track(content, i, char)
            if self._is_free and (
                char == ","
                or (char.isspace() and content[start:i].strip() and self._starts_new_element(i + 1))
            ):
                if content[start:i].strip():
                    entries.append(self._element((start, i)))
                start = i + 1
            i += 1
        self._check_balanced()
        return ArrayValue(elements=entries, position=self.position)

    # Scanner state -----------------------------------------------------------
    @property
    def _is_free(self) -> bool:
        return self._quote is None and self._braces == 0 and self._brackets == 0

    def _track(self, content: str, i: int, char: str) -> None:
        if char in ('"', "'") and (i == 0 or content[i - 1] != "\\"):
            if self._quote == char:
                self._quote = None
            elif self._quote is None:
                self._quote = char
            return
        if self._quote is not None:
            return
        if char == "{":
            self._braces += 1
        elif char == "}":
            self._braces -= 1
        elif char == "[":
            self._brackets += 1
        elif char == "]":
            self._brackets -= 1
        if self._braces < 0 or self._brackets < 0:
            raise StructuredValueError("Unbalanced closing bracket", self.text)

    def _check_balanced(self) -> None:
        if self._braces or self._brackets:
            raise StructuredValueError("Unclosed bracket", self.text)

    def _match_comment(self, i: int) -> Optional[tuple[int, CommentNode]]:
        content = self.content
        if content.startswith("//", i):
            end = content.find("\n", i)
            end = len(content) if end == -1 else end
            text = content[i + 2 : end]
            is_line = True
        elif content.startswith("/*", i):
            close = content.find("*/", i + 2)
            end = len(content) if close == -1 else close + 2
            text = content[i + 2 : close if close != -1 else end]
            is_line = False
        else:
            return None
        node = CommentNode(value=text.strip(), is_line_comment=is_line, position=self._span(i, end))
        return end, node

    def _skip_space(self, j: int) -> int:
        while j < len(self.content) and self.content[j].isspace():
            j += 1
        return j

    def _starts_new_field(self, j: int) -> bool:
        content = self.content
        j = self._skip_space(j)
        k = j
        while k < len(content) and content[k] not in KEY_STOP_CHARS and not content[k].isspace():
            k += 1
        has_key = k > j
        k = self._skip_space(k)
        return has_key and k < len(content) and content[k] == ":"

    def _starts_new_element(self, j: int) -> bool:
        j = self._skip_space(j)
        return j < len(self.content) and self.content[j] != ","

    # Entries -----------------------------------------------------------------
    def _trimmed(self, span: tuple[int, int]) -> tuple[str, int, int]:
        raw = self.content[span[0] : span[1]]
        text = raw.strip()
        begin = span[0] + (len(raw) - len(raw.lstrip())) if text else span[0]
        return text, begin, begin + len(text)

    def _child(self, text: str, position: Optional[Position]) -> Value:
        return _dispatch(text, position, self.depth + 1)

    def _field(self, key_span: tuple[int, int], value_span: Optional[tuple[int, int]]) -> ObjectField:
        key, key_begin, key_end = self._trimmed(key_span)
        if is_quoted(key):
            key = unescape(key[1:-1])
        if value_span is None:
            value_text, value_begin, value_end = "", key_end, key_end
        else:
            value_text, value_begin, value_end = self._trimmed(value_span)
        value_position = self._span(value_begin, value_end)
        return ObjectField(
            key=key,
            key_position=self._span(key_begin, key_end),
            value=self._child(value_text, value_position),
            position=self._span(key_begin, value_end if value_text else key_end),
        )

    def _element(self, span: tuple[int, int]) -> ArrayElement:
        text, begin, end = self._trimmed(span)
        position = self._span(begin, end)
        return ArrayElement(value=self._child(text, position), position=position)

    # Positions ---------------------------------------------------------------
    def _resolve_origin(self) -> Optional[Point]:
        position = self.position
        if position is None or not position.is_single_line or "\n" in self.text:
            return None
        if position.end.column - position.start.column != len(self.text):
            return None
        # content offsets are relative to the character after the opening bracket
        return Point(line=position.start.line, column=position.start.column + 1)

    def _span(self, begin: int, end: int) -> Optional[Position]:
        if self._origin is None:
            return self.position
        return create_line_position(self._origin.line, self._origin.column + begin, self._origin.column + end)


def parse_tml_value(source: str, position: Optional[Position] = None) -> Value:
    """Parses text known to hold a single value, possibly spread over several lines.

    Structured literals are parsed as such; several non-blank lines of plain
    text become one String with the common indentation removed and newlines
    kept; a single line goes through ``parse_value``.
    """
    normalized = source.replace("\r\n", "\n")
    trimmed = normalized.strip()
    if is_structured(trimmed):
        try:
            return _dispatch(trimmed, position, 0)
        except StructuredValueError as exc:
            logger.warning(f"Failed to parse structured value, falling back to string: {exc}")
    lines = normalized.split("\n")
    non_blank = [line for line in lines if line.strip()]
    if len(non_blank) > 1:
        text = "\n".join(dedent_lines(lines)).strip("\n")
        return StringValue(value=text, position=position)
    return parse_value(non_blank[0] if non_blank else "", position)


__all__ = [
    "MAX_NESTING_DEPTH",
    "TMLError",
    "StructuredValueError",
    "StructuredValueParser",
    "is_quoted",
    "is_structured",
    "is_boolean",
    "is_numeric",
    "is_unquoted_string",
    "unescape",
    "parse_string_value",
    "parse_number_value",
    "parse_boolean_value",
    "parse_value",
    "parse_tml_value",
]
