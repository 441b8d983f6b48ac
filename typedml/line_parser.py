"""Classifies one physical line into an ``(indent, node)`` pair."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .classifiers import (
    looks_like_attribute,
    looks_like_bare_name,
    parse_attribute,
    parse_block_comment,
    parse_comment,
    parse_line_comment,
    parse_value_node,
)
from .nodes import BlockNode, Node
from .position import create_line_position
from .tokenizer import LineTokenizer, Token, TokenType, find_comment_start
from .utils import leading_whitespace


@dataclass(slots=True)
class ParsedLine:
    indent: int
    node: Optional[Node]
    # the block header ends with a bare ":" and more-indented lines form its value
    opens_value: bool = False


def find_top_level_colon(text: str) -> int:
    quote: Optional[str] = None
    depth = 0
    for i, char in enumerate(text):
        if char in ('"', "'") and (i == 0 or text[i - 1] != "\\"):
            if quote == char:
                quote = None
            elif quote is None:
                quote = char
        elif quote is not None:
            continue
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth = max(depth - 1, 0)
        elif char == ":" and depth == 0:
            return i
    return -1


def _has_whitespace(text: str) -> bool:
    return any(char.isspace() for char in text)


def parse_line(line: str, line_number: int) -> ParsedLine:
    trimmed = line.strip()
    if not trimmed:
        return ParsedLine(0, None)
    indent = leading_whitespace(line)

    if trimmed.startswith("//"):
        return ParsedLine(indent, parse_line_comment(trimmed, line_number, indent))
    if trimmed.startswith("/*") and trimmed.endswith("*/") and len(trimmed) >= 4:
        return ParsedLine(indent, parse_block_comment(trimmed, line_number, indent))
    if trimmed.startswith(":"):
        return ParsedLine(indent, parse_value_node(trimmed, line_number, indent))

    colon = find_top_level_colon(trimmed)
    if looks_like_attribute(trimmed) and not _has_whitespace(trimmed) and colon == -1:
        return ParsedLine(indent, parse_attribute(trimmed, line_number, indent))
    if colon > 0 and not _has_whitespace(trimmed[:colon]):
        return _parse_named_value(trimmed, line_number, indent, colon)
    return _parse_block_line(trimmed, line_number, indent)


def _parse_named_value(trimmed: str, line_number: int, indent: int, colon: int) -> ParsedLine:
    """``name: value`` lines, with an optional trailing comment."""
    rest = trimmed[colon + 1 :]
    comment = find_comment_start(rest)
    value_text = (rest if comment == -1 else rest[:comment]).rstrip()
    children: list[Node] = []
    if value_text.strip():
        children.append(parse_value_node(":" + value_text, line_number, indent + colon))
    opens_value = not value_text.strip()
    if comment != -1:
        tokens = LineTokenizer(rest[comment:], indent + colon + 1 + comment).tokenize()
        trailing, _ = _classify_tokens(tokens, line_number)
        children.extend(trailing)
    block = BlockNode(
        name=trimmed[:colon],
        children=children,
        position=create_line_position(line_number, indent, indent + len(trimmed)),
    )
    return ParsedLine(indent, block, opens_value)


def _parse_block_line(trimmed: str, line_number: int, indent: int) -> ParsedLine:
    tokens = LineTokenizer(trimmed, indent).tokenize()
    children: list[Node] = []
    while tokens and tokens[0].is_comment:
        token = tokens.pop(0)
        children.append(parse_comment(token.value, line_number, token.column))
    if not tokens:
        return ParsedLine(indent, children[0] if children else None)

    first = tokens[0]
    name = first.value
    if name.startswith("$") and "=" in name:
        # "$name=key..." carries a leading attribute glued to the block name
        name, _, attribute = name.partition("=")
        if attribute:
            children.append(parse_attribute(attribute, line_number, first.column + len(name) + 1))
    trailing, opens_value = _classify_tokens(tokens[1:], line_number)
    children.extend(trailing)
    block = BlockNode(
        name=name,
        children=children,
        position=create_line_position(line_number, indent, indent + len(trimmed)),
    )
    return ParsedLine(indent, block, opens_value)


def _classify_tokens(tokens: list[Token], line_number: int) -> tuple[list[Node], bool]:
    children: list[Node] = []
    opens_value = False
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.type == TokenType.LINE_COMMENT:
            children.append(parse_line_comment(token.value, line_number, token.column))
            break
        if token.type == TokenType.BLOCK_COMMENT:
            children.append(parse_block_comment(token.value, line_number, token.column))
        elif token.type == TokenType.VALUE or token.value.startswith(":"):
            end = i + 1
            if token.value == ":" and end < len(tokens) and _starts_literal(tokens[end]):
                # a detached colon always takes the literal after it
                end += 1
            while end < len(tokens) and _continues_value(tokens[end]):
                end += 1
            text = _join_tokens(tokens[i:end])
            if text[1:].strip():
                children.append(parse_value_node(text, line_number, token.column, tokens[end - 1].end_column))
            else:
                opens_value = True
            i = end
            continue
        elif looks_like_attribute(token.value):
            children.append(parse_attribute(token.value, line_number, token.column))
        else:
            children.append(
                BlockNode(
                    name=token.value,
                    position=create_line_position(line_number, token.column, token.end_column),
                )
            )
        i += 1
    return children, opens_value


def _starts_literal(token: Token) -> bool:
    return token.type == TokenType.WORD and not looks_like_attribute(token.value)


def _continues_value(token: Token) -> bool:
    return (
        token.type == TokenType.WORD
        and not looks_like_attribute(token.value)
        and not looks_like_bare_name(token.value)
    )


def _join_tokens(tokens: list[Token]) -> str:
    """Source text covered by consecutive tokens, keeping the spacing between them."""
    text = tokens[0].value
    for previous, token in zip(tokens, tokens[1:]):
        text += " " * (token.column - previous.end_column) + token.value
    return text


__all__ = ["ParsedLine", "parse_line", "find_top_level_colon"]
