"""Node definitions for the TML syntax tree."""

from __future__ import annotations

from typing import Annotated, Any, Iterator, Literal, Optional, Union

from pydantic import BaseModel, Field

from .position import Position

POSITION_KEYS = {"position", "key_position"}


class TreeItem(BaseModel):
    position: Optional[Position] = None
    # arena indices assigned by parent hydration, never dumped
    node_id: Optional[int] = Field(default=None, exclude=True, repr=False)
    parent_id: Optional[int] = Field(default=None, exclude=True, repr=False)

    def __eq__(self, other: object) -> bool:
        # arena indices are bookkeeping, not content
        if not isinstance(other, TreeItem):
            return NotImplemented
        return type(self) is type(other) and self.model_dump() == other.model_dump()


class StringValue(TreeItem):
    type: Literal["String"] = "String"
    value: str


class NumberValue(TreeItem):
    type: Literal["Number"] = "Number"
    value: float


class BooleanValue(TreeItem):
    type: Literal["Boolean"] = "Boolean"
    value: bool


class CommentNode(TreeItem):
    type: Literal["Comment"] = "Comment"
    value: str
    is_line_comment: bool


class ObjectField(BaseModel):
    type: Literal["Field"] = "Field"
    key: str
    key_position: Optional[Position] = None
    value: Value
    position: Optional[Position] = None


class ArrayElement(BaseModel):
    type: Literal["Element"] = "Element"
    value: Value
    position: Optional[Position] = None


class ObjectValue(TreeItem):
    type: Literal["Object"] = "Object"
    fields: list[FieldEntry] = Field(default_factory=list)


class ArrayValue(TreeItem):
    type: Literal["Array"] = "Array"
    elements: list[ElementEntry] = Field(default_factory=list)


class AttributeNode(TreeItem):
    type: Literal["Attribute"] = "Attribute"
    key: str
    value: Value


class ValueNode(TreeItem):
    type: Literal["Value"] = "Value"
    value: Value
    is_multiline: bool = False


class BlockNode(TreeItem):
    type: Literal["Block"] = "Block"
    name: str
    children: list[Node] = Field(default_factory=list)

    def attributes(self) -> list[AttributeNode]:
        return [child for child in self.children if isinstance(child, AttributeNode)]

    def blocks(self) -> list[BlockNode]:
        return [child for child in self.children if isinstance(child, BlockNode)]

    def value_node(self) -> ValueNode | None:
        return next((child for child in self.children if isinstance(child, ValueNode)), None)


Value = Annotated[
    Union[StringValue, NumberValue, BooleanValue, ObjectValue, ArrayValue],
    Field(discriminator="type"),
]
FieldEntry = Annotated[Union[ObjectField, CommentNode], Field(discriminator="type")]
ElementEntry = Annotated[Union[ArrayElement, CommentNode], Field(discriminator="type")]
Node = Annotated[
    Union[BlockNode, AttributeNode, ValueNode, CommentNode],
    Field(discriminator="type"),
]

for _model in (ObjectField, ArrayElement, ObjectValue, ArrayValue, AttributeNode, ValueNode, BlockNode):
    _model.model_rebuild()


def walk(nodes: list[Node]) -> Iterator[Node]:
    """Pre-order traversal over nodes, descending into block children."""
    for node in nodes:
        yield node
        if isinstance(node, BlockNode):
            yield from walk(node.children)


def value_comments(value: Any) -> Iterator[CommentNode]:
    """Comments embedded in an object/array value, at any depth."""
    if isinstance(value, ObjectValue):
        entries = value.fields
    elif isinstance(value, ArrayValue):
        entries = value.elements
    else:
        return
    for entry in entries:
        if isinstance(entry, CommentNode):
            yield entry
        else:
            yield from value_comments(entry.value)


def _drop_positions(data: Any) -> Any:
    if isinstance(data, dict):
        return {key: _drop_positions(item) for key, item in data.items() if key not in POSITION_KEYS}
    if isinstance(data, list):
        return [_drop_positions(item) for item in data]
    return data


def node_to_dict(item: BaseModel, include_positions: bool = True) -> dict[str, Any]:
    data = item.model_dump()
    return data if include_positions else _drop_positions(data)


def strip_positions(nodes: list[Node]) -> list[dict[str, Any]]:
    """Plain-data form of a tree with every position removed, for structural comparison."""
    return [node_to_dict(node, include_positions=False) for node in nodes]


__all__ = [
    "TreeItem",
    "StringValue",
    "NumberValue",
    "BooleanValue",
    "CommentNode",
    "ObjectField",
    "ArrayElement",
    "ObjectValue",
    "ArrayValue",
    "AttributeNode",
    "ValueNode",
    "BlockNode",
    "Value",
    "FieldEntry",
    "ElementEntry",
    "Node",
    "walk",
    "value_comments",
    "node_to_dict",
    "strip_positions",
]
