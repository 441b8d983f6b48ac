"""Renders TML trees back to source text (and to JSON)."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Literal, NotRequired, Optional, TypedDict

from .classifiers import BARE_NAME_RE
from .logger import Logger
from .nodes import (
    ArrayValue,
    AttributeNode,
    BlockNode,
    BooleanValue,
    CommentNode,
    Node,
    NumberValue,
    ObjectValue,
    StringValue,
    Value,
    ValueNode,
    node_to_dict,
)
from .utils import resolve_config
from .values import is_unquoted_string

Context = Literal["attribute", "value", "member"]

ATTRIBUTE_SAFE_RE = re.compile(r"[A-Za-z0-9_.@#$%+\-]+")
MEMBER_SAFE_RE = ATTRIBUTE_SAFE_RE
VALUE_UNSAFE_CHARS = set("\"'{}[]\\\n\r\t")
QUOTE_ESCAPES = {"\\": "\\\\", '"': '\\"', "'": "\\'", "\n": "\\n", "\t": "\\t", "\r": "\\r"}


class FormatterConfig(TypedDict):
    indent_size: NotRequired[int]
    pretty: NotRequired[bool]
    include_positions: NotRequired[bool]


class FormatterConfigRequired(TypedDict):
    indent_size: int
    pretty: bool
    include_positions: bool


DEFAULT_FORMATTER_CONFIG: FormatterConfigRequired = {
    "indent_size": 2,
    "pretty": True,
    "include_positions": False,
}

logger = Logger(config={"name": "TML Formatter"}).logger


def quote(text: str) -> str:
    return '"' + "".join(QUOTE_ESCAPES.get(char, char) for char in text) + '"'


def format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _same_start_line(block: BlockNode, child: Node) -> bool:
    if block.position is None or child.position is None:
        return False
    return block.position.start.line == child.position.start.line


@dataclass
class TMLFormatter:
    indent_size: int = 2
    pretty: bool = True
    include_positions: bool = False

    @classmethod
    def from_config(cls, config: Optional[FormatterConfig] = None) -> TMLFormatter:
        return cls(**resolve_config(config or {}, DEFAULT_FORMATTER_CONFIG))

    def format(self, nodes: list[Node]) -> str:
        lines: list[str] = []
        for node in nodes:
            lines.extend(self.format_node(node, 0))
        return "\n".join(lines)

    def format_json(self, nodes: list[Node]) -> str:
        data = [node_to_dict(node, include_positions=self.include_positions) for node in nodes]
        return json.dumps(data, indent=self.indent_size if self.pretty else None, ensure_ascii=False)

    def format_node(self, node: Node, level: int) -> list[str]:
        if isinstance(node, BlockNode):
            return self.format_block(node, level)
        if isinstance(node, AttributeNode):
            return self._format_attribute_line(node, level)
        if isinstance(node, ValueNode):
            return self._format_standalone_value(node, level)
        return self.format_comment(node, level)

    # Blocks ------------------------------------------------------------------
    def format_block(self, block: BlockNode, level: int) -> list[str]:
        """Header line first: the name, the leading run of children that fit on one
        line, an optional ``: value`` and an optional trailing ``//`` comment. Every
        other child goes on its own, more indented line. A multi-line value closes
        the header with a bare ``:`` and follows as indented content."""
        children = list(block.children)
        parts = [block.name]
        index = 0
        while index < len(children) and self._is_inline_header_child(block, children[index]):
            parts.append(self._format_inline(children[index]))
            index += 1
        header = " ".join(parts)

        trailing: Optional[CommentNode] = None
        if index < len(children) and self._is_trailing_comment(block, children[index]):
            trailing = children[index]  # type: ignore[assignment]
        multiline = self._multiline_value_at(children, index + (1 if trailing is not None else 0))
        if multiline is not None:
            header += ":" if trailing is None else f": // {trailing.value}".rstrip()
            return [self._indent(level) + header, *self._format_multiline_content(multiline, level + 1)]

        if index < len(children) and isinstance(children[index], ValueNode) and not children[index].is_multiline:
            header += ": " + self.format_value(children[index].value, "value")  # type: ignore[union-attr]
            index += 1
        if index < len(children) and self._is_trailing_comment(block, children[index]):
            header += " " + self.format_comment(children[index], 0)[0]  # type: ignore[arg-type]
            index += 1

        lines = [self._indent(level) + header]
        for child in children[index:]:
            lines.extend(self.format_node(child, level + 1))
        return lines

    def _multiline_value_at(self, children: list[Node], index: int) -> Optional[ValueNode]:
        if index != len(children) - 1:
            return None
        child = children[index]
        if isinstance(child, ValueNode) and child.is_multiline:
            return child
        return None

    def _is_inline_header_child(self, block: BlockNode, child: Node) -> bool:
        if isinstance(child, AttributeNode):
            return True
        # bare blocks and block comments stay inline only if they were written there
        if not _same_start_line(block, child):
            return False
        if isinstance(child, BlockNode):
            return not child.children and BARE_NAME_RE.fullmatch(child.name) is not None
        if isinstance(child, CommentNode):
            return not child.is_line_comment and "\n" not in child.value
        return False

    def _is_trailing_comment(self, block: BlockNode, child: Node) -> bool:
        return isinstance(child, CommentNode) and child.is_line_comment and _same_start_line(block, child)

    def _format_inline(self, child: Node) -> str:
        if isinstance(child, AttributeNode):
            return self.format_attribute(child)
        if isinstance(child, BlockNode):
            return child.name
        return self.format_comment(child, 0)[0]  # type: ignore[arg-type]

    # Attributes and values ---------------------------------------------------
    def format_attribute(self, attribute: AttributeNode, tight: bool = False) -> str:
        value = attribute.value
        if isinstance(value, BooleanValue) and value.value:
            return f"{attribute.key}!"
        return f"{attribute.key}={self.format_value(value, 'attribute', tight)}"

    def _format_attribute_line(self, attribute: AttributeNode, level: int) -> list[str]:
        # on its own line an attribute must stay a single whitespace-free token
        text = self.format_attribute(attribute, tight=True)
        if any(char.isspace() for char in text):
            logger.warning(f"Attribute {attribute.key!r} cannot be placed on its own line without changing meaning")
        return [self._indent(level) + text]

    def _format_standalone_value(self, node: ValueNode, level: int) -> list[str]:
        if node.is_multiline:
            # a collected value needs a header; keep the content on one line
            logger.warning("Multi-line value without a header rendered as a single-line value")
        return [f"{self._indent(level)}: {self.format_value(node.value, 'value')}"]

    def _format_multiline_content(self, node: ValueNode, level: int) -> list[str]:
        value = node.value
        indent = self._indent(level)
        if isinstance(value, StringValue) and "\n" in value.value:
            return [indent + line if line.strip() else "" for line in value.value.split("\n")]
        if isinstance(value, (ObjectValue, ArrayValue)) and (self.pretty or self._needs_spreading(value)):
            return [indent + line for line in self.format_structured_lines(value)]
        return [indent + self.format_value(value, "value")]

    def format_value(self, value: Value, context: Context = "value", tight: bool = False) -> str:
        if isinstance(value, BooleanValue):
            return "true" if value.value else "false"
        if isinstance(value, NumberValue):
            return format_number(value.value)
        if isinstance(value, StringValue):
            return self.format_string(value.value, context)
        return self.format_structured_inline(value, tight)

    def format_string(self, text: str, context: Context) -> str:
        if not text or not is_unquoted_string(text) or text != text.strip():
            return quote(text)
        if context == "value":
            if any(char in VALUE_UNSAFE_CHARS for char in text) or "//" in text or "/*" in text:
                return quote(text)
            return text
        pattern = ATTRIBUTE_SAFE_RE if context == "attribute" else MEMBER_SAFE_RE
        return text if pattern.fullmatch(text) else quote(text)

    def format_key(self, key: str) -> str:
        return key if BARE_NAME_RE.fullmatch(key) else quote(key)

    # Structured values -------------------------------------------------------
    def format_structured_inline(self, value: ObjectValue | ArrayValue, tight: bool = False) -> str:
        """One-line literal; ``tight`` drops the spaces after separators so the literal is a single token."""
        entries = value.fields if isinstance(value, ObjectValue) else value.elements
        opener, closer = ("{", "}") if isinstance(value, ObjectValue) else ("[", "]")
        parts: list[str] = []
        for i, entry in enumerate(entries):
            if isinstance(entry, CommentNode):
                if entry.is_line_comment and i == len(entries) - 1:
                    parts.append(f"// {entry.value}")
                else:
                    parts.append(f"/* {entry.value} */")
            else:
                parts.append(self._format_entry(entry, inline=True, tight=tight)[0])
        return opener + ("," if tight else ", ").join(parts) + closer

    def format_structured_lines(self, value: ObjectValue | ArrayValue) -> list[str]:
        entries = value.fields if isinstance(value, ObjectValue) else value.elements
        opener, closer = ("{", "}") if isinstance(value, ObjectValue) else ("[", "]")
        if not entries:
            return [opener + closer]
        inner = " " * self.indent_size
        lines = [opener]
        for entry in entries:
            if isinstance(entry, CommentNode):
                lines.extend(inner + line for line in self.format_comment(entry, 0))
                continue
            entry_lines = self._format_entry(entry, inline=False)
            entry_lines[-1] += ","
            lines.extend(inner + line for line in entry_lines)
        lines.append(closer)
        return lines

    def _format_entry(self, entry: Any, inline: bool, tight: bool = False) -> list[str]:
        separator = ":" if tight else ": "
        prefix = self.format_key(entry.key) + separator if entry.type == "Field" else ""
        value = entry.value
        if not inline and isinstance(value, (ObjectValue, ArrayValue)):
            nested = self.format_structured_lines(value)
            nested[0] = prefix + nested[0]
            return nested
        return [prefix + self.format_value(value, "member", tight)]

    def _needs_spreading(self, value: Any) -> bool:
        """True when a line comment sits before other entries, which only a spread layout can hold."""
        entries = value.fields if isinstance(value, ObjectValue) else value.elements
        for i, entry in enumerate(entries):
            if isinstance(entry, CommentNode):
                if entry.is_line_comment and i < len(entries) - 1:
                    return True
            elif isinstance(entry.value, (ObjectValue, ArrayValue)) and self._needs_spreading(entry.value):
                return True
        return False

    # Comments ----------------------------------------------------------------
    def format_comment(self, comment: CommentNode, level: int) -> list[str]:
        indent = self._indent(level)
        if comment.is_line_comment:
            return [f"{indent}// {comment.value}".rstrip()]
        # continuation lines keep their own indentation; it is part of the text
        return (f"{indent}/* {comment.value} */").split("\n")

    def _indent(self, level: int) -> str:
        return "" if level <= 0 else " " * (self.indent_size * level)


def stringify_tml(nodes: list[Node], **options: Any) -> str:
    return TMLFormatter.from_config(options).format(nodes)  # type: ignore[arg-type]


def format_json(nodes: list[Node], **options: Any) -> str:
    return TMLFormatter.from_config(options).format_json(nodes)  # type: ignore[arg-type]


__all__ = [
    "FormatterConfig",
    "DEFAULT_FORMATTER_CONFIG",
    "TMLFormatter",
    "quote",
    "format_number",
    "stringify_tml",
    "format_json",
]
