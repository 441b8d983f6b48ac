"""Parser, position queries and formatter for TML, an indentation-sensitive typed markup language."""

from .position import Point, Position, create_point, create_position, create_line_position, is_position_in_range, range_size
from .nodes import (
    ArrayElement,
    ArrayValue,
    AttributeNode,
    BlockNode,
    BooleanValue,
    CommentNode,
    Node,
    NumberValue,
    ObjectField,
    ObjectValue,
    StringValue,
    Value,
    ValueNode,
    node_to_dict,
    strip_positions,
    walk,
)
from .tokenizer import LineTokenizer, Token, TokenType, tokenize_line
from .values import TMLError, StructuredValueError, parse_value, parse_tml_value
from .line_parser import ParsedLine, parse_line
from .document import TMLDocument
from .parser import TMLParser, TMLReadError, ParserConfig, parse_tml, parse_file, strip_comments
from .position_index import PositionIndex
from .find_nodes import (
    find_blocks_by_name,
    find_node_at_position,
    find_node_at_position_with_index,
    find_nodes_by_type,
    find_parent_block,
)
from .cache import CachedDocument, DocumentCache
from .formatter import FormatterConfig, TMLFormatter, format_json, stringify_tml

__all__ = [
    "Point",
    "Position",
    "create_point",
    "create_position",
    "create_line_position",
    "is_position_in_range",
    "range_size",
    "ArrayElement",
    "ArrayValue",
    "AttributeNode",
    "BlockNode",
    "BooleanValue",
    "CommentNode",
    "Node",
    "NumberValue",
    "ObjectField",
    "ObjectValue",
    "StringValue",
    "Value",
    "ValueNode",
    "node_to_dict",
    "strip_positions",
    "walk",
    "LineTokenizer",
    "Token",
    "TokenType",
    "tokenize_line",
    "TMLError",
    "StructuredValueError",
    "parse_value",
    "parse_tml_value",
    "ParsedLine",
    "parse_line",
    "TMLDocument",
    "TMLParser",
    "TMLReadError",
    "ParserConfig",
    "parse_tml",
    "parse_file",
    "strip_comments",
    "PositionIndex",
    "find_blocks_by_name",
    "find_node_at_position",
    "find_node_at_position_with_index",
    "find_nodes_by_type",
    "find_parent_block",
    "CachedDocument",
    "DocumentCache",
    "FormatterConfig",
    "TMLFormatter",
    "format_json",
    "stringify_tml",
]
