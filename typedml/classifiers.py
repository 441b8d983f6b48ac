"""Builders for attribute, comment and value nodes from single-line fragments."""

from __future__ import annotations

import re
from typing import Optional

from .nodes import AttributeNode, BooleanValue, CommentNode, ValueNode
from .position import create_line_position
from .values import parse_value

BARE_NAME_RE = re.compile(r"[A-Za-z_$@#][\w$@#.\-]*")


def looks_like_attribute(text: str) -> bool:
    return "=" in text or text.endswith("!")


def looks_like_bare_name(text: str) -> bool:
    return BARE_NAME_RE.fullmatch(text) is not None


def parse_attribute(text: str, line: int, start_column: int) -> AttributeNode:
    position = create_line_position(line, start_column, start_column + len(text))
    equals = text.find("=")
    if equals > 0:
        key = text[:equals].strip()
        raw = text[equals + 1 :]
        value_text = raw.strip()
        value_start = start_column + equals + 1 + (len(raw) - len(raw.lstrip()))
        value_position = create_line_position(line, value_start, value_start + len(value_text))
        return AttributeNode(key=key, value=parse_value(value_text, value_position), position=position)
    # key! shortcut, or a fragment with no usable key=value split
    key = text[:-1] if equals == -1 and text.endswith("!") else text
    return AttributeNode(key=key, value=BooleanValue(value=True, position=position), position=position)


def parse_line_comment(text: str, line: int, start_column: int) -> CommentNode:
    value = text[2:].strip() if text.startswith("//") else text.strip()
    return CommentNode(
        value=value,
        is_line_comment=True,
        position=create_line_position(line, start_column, start_column + len(text)),
    )


def parse_block_comment(text: str, line: int, start_column: int) -> CommentNode:
    return CommentNode(
        value=text[2:-2].strip(),
        is_line_comment=False,
        position=create_line_position(line, start_column, start_column + len(text)),
    )


def parse_comment(text: str, line: int, start_column: int) -> CommentNode:
    if text.startswith("//"):
        return parse_line_comment(text, line, start_column)
    return parse_block_comment(text, line, start_column)


def parse_value_node(text: str, line: int, start_column: int, end_column: Optional[int] = None) -> ValueNode:
    """Builds a Value node from ``:value`` text; the node spans the colon, its value only the literal."""
    body = text[1:] if text.startswith(":") else text
    literal = body.strip()
    value_start = start_column + (len(text) - len(body)) + (len(body) - len(body.lstrip()))
    value_position = create_line_position(line, value_start, value_start + len(literal))
    if end_column is None:
        end_column = start_column + len(text.rstrip())
    return ValueNode(
        value=parse_value(literal, value_position),
        position=create_line_position(line, start_column, end_column),
    )


__all__ = [
    "looks_like_attribute",
    "looks_like_bare_name",
    "parse_attribute",
    "parse_line_comment",
    "parse_block_comment",
    "parse_comment",
    "parse_value_node",
]
