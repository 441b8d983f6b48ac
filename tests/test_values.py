import pytest

from typedml import ArrayValue, BooleanValue, CommentNode, NumberValue, ObjectValue, StringValue
from typedml.position import create_line_position
from typedml.values import (
    MAX_NESTING_DEPTH,
    StructuredValueError,
    StructuredValueParser,
    is_numeric,
    is_unquoted_string,
    parse_tml_value,
    parse_value,
)


def element_values(array):
    return [element.value.value for element in array.elements if element.type == "Element"]


@pytest.mark.parametrize(
    "text, expected",
    [("42", 42.0), ("-1.5e2", -150.0), ("+3", 3.0), (".5", 0.5), ("7.", 7.0)],
)
def test_numbers(text, expected):
    value = parse_value(text)
    assert isinstance(value, NumberValue)
    assert value.value == expected


@pytest.mark.parametrize("text", ["1.2.3", "0x10", "Infinity", "NaN", "1e", "12px", ""])
def test_numeric_looking_text_stays_a_string(text):
    assert not is_numeric(text)
    assert isinstance(parse_value(text), StringValue)


def test_booleans_are_lowercase_only():
    assert parse_value("true") == BooleanValue(value=True)
    assert parse_value(" false ") == BooleanValue(value=False)
    assert parse_value("True") == StringValue(value="True")


def test_quoted_strings_resolve_escapes():
    assert parse_value(r'"a\nb\t\"c\""').value == 'a\nb\t"c"'
    assert parse_value(r"'it\'s'").value == "it's"
    assert parse_value(r'"keep \x"').value == r"keep \x"


def test_unquoted_strings_are_verbatim():
    assert parse_value("  hello world ").value == "hello world"
    assert parse_value('"42"') == StringValue(value="42")


def test_is_unquoted_string():
    assert is_unquoted_string("hello")
    assert not is_unquoted_string('"hello"')
    assert not is_unquoted_string("12")
    assert not is_unquoted_string("true")
    assert not is_unquoted_string("[a]")


@pytest.mark.parametrize("text", ["[a b c]", "[a, b, c]", "[a,b,c]", "[ a ,b  c ]"])
def test_optional_commas_in_arrays(text):
    value = parse_value(text)
    assert isinstance(value, ArrayValue)
    assert element_values(value) == ["a", "b", "c"]


def test_optional_commas_in_objects():
    value = parse_value("{a: 1 b: two, c: true}")
    assert isinstance(value, ObjectValue)
    assert [(field.key, field.value.value) for field in value.fields] == [("a", 1.0), ("b", "two"), ("c", True)]


def test_unquoted_object_strings_keep_spaces():
    value = parse_value("{name: John Smith, age: 30}")
    assert [(field.key, field.value.value) for field in value.fields] == [("name", "John Smith"), ("age", 30.0)]


def test_nested_literals():
    value = parse_value('[1, [2, 3], {a: "x, y"}]')
    first, nested, obj = value.elements
    assert first.value.value == 1.0
    assert element_values(nested.value) == [2.0, 3.0]
    assert obj.value.fields[0].key == "a"
    assert obj.value.fields[0].value.value == "x, y"


def test_quoted_keys_and_keys_without_values():
    value = parse_value('{"a b": 1, c}')
    assert [field.key for field in value.fields] == ["a b", "c"]
    assert value.fields[1].value == StringValue(value="")


def test_comments_are_kept_in_order():
    value = parse_value("[a /* one */ b, c // two]")
    kinds = [entry.type for entry in value.elements]
    assert kinds == ["Element", "Comment", "Element", "Element", "Comment"]
    assert value.elements[1].value == "one"
    assert value.elements[4].value == "two"
    assert value.elements[4].is_line_comment


def test_comment_completes_pending_field():
    value = parse_value("{a: 1 /* note */ b: 2}")
    assert [entry.type for entry in value.fields] == ["Field", "Comment", "Field"]


def test_empty_literals():
    assert parse_value("[]") == ArrayValue(elements=[])
    assert parse_value("{ }") == ObjectValue(fields=[])


@pytest.mark.parametrize("text", ["[a, [b]", "[a]]", "{a: {b: 1}"])
def test_unbalanced_literal_falls_back_to_string(text):
    value = parse_value(text)
    assert value == StringValue(value=text)


def test_structured_parser_raises_on_imbalance():
    with pytest.raises(StructuredValueError):
        StructuredValueParser("[a, [b]").parse()


def test_nesting_depth_is_bounded():
    depth = MAX_NESTING_DEPTH + 6
    value = parse_value("[" * depth + "]" * depth)
    arrays = 0
    while isinstance(value, ArrayValue):
        arrays += 1
        value = value.elements[0].value
    assert arrays == MAX_NESTING_DEPTH + 1
    assert isinstance(value, StringValue)
    assert value.value.startswith("[")


def test_child_positions_for_single_line_literals():
    position = create_line_position(1, 7, 13)
    value = parse_value("[a, b]", position)
    a, b = value.elements
    assert (a.position.start.column, a.position.end.column) == (8, 9)
    assert (b.position.start.column, b.position.end.column) == (11, 12)


def test_field_key_and_value_positions():
    value = parse_value("{a: 1}", create_line_position(1, 3, 9))
    [field] = value.fields
    assert (field.key_position.start.column, field.key_position.end.column) == (4, 5)
    assert (field.value.position.start.column, field.value.position.end.column) == (7, 8)
    assert (field.position.start.column, field.position.end.column) == (4, 8)


def test_embedded_comment_position():
    value = parse_value("[a /* c */ b]", create_line_position(1, 3, 16))
    comment = value.elements[1]
    assert isinstance(comment, CommentNode)
    assert (comment.position.start.column, comment.position.end.column) == (6, 13)


def test_multi_line_plain_text_keeps_newlines():
    value = parse_tml_value("  line1\n    line2\n")
    assert value == StringValue(value="line1\n  line2")


def test_multi_line_structured_value():
    value = parse_tml_value("{\n  a: 1\n  b: [x, y]\n  // note\n  c: done\n}")
    assert isinstance(value, ObjectValue)
    assert [entry.type for entry in value.fields] == ["Field", "Field", "Comment", "Field"]
    assert element_values(value.fields[1].value) == ["x", "y"]
    assert value.fields[3].value.value == "done"


def test_single_line_tml_value_is_scalar():
    assert parse_tml_value("  12 ") == NumberValue(value=12)
