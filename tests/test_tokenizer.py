from typedml.tokenizer import LineTokenizer, TokenType, find_comment_start, tokenize_line


def test_splits_on_unquoted_whitespace():
    assert tokenize_line("div class=x id=y") == ["div", "class=x", "id=y"]


def test_keeps_quoted_and_bracketed_whitespace():
    assert tokenize_line('div class="a b" data=[1, 2] cfg={a: 1}') == [
        "div",
        'class="a b"',
        "data=[1, 2]",
        "cfg={a: 1}",
    ]


def test_escaped_quote_does_not_close_string():
    assert tokenize_line(r'x="a \" b" y') == [r'x="a \" b"', "y"]


def test_line_comment_takes_rest_of_line():
    tokens = LineTokenizer("a b // rest of line").tokenize()
    assert [token.value for token in tokens] == ["a", "b", "// rest of line"]
    assert tokens[-1].type == TokenType.LINE_COMMENT
    assert tokens[-1].column == 4


def test_closed_block_comment_is_one_token():
    tokens = LineTokenizer("a /* c d */ b").tokenize()
    assert [token.value for token in tokens] == ["a", "/* c d */", "b"]
    assert tokens[1].type == TokenType.BLOCK_COMMENT


def test_unclosed_block_comment_is_ordinary_text():
    assert tokenize_line("a /* open") == ["a", "/*", "open"]


def test_colon_starting_a_token_is_ordinary_text():
    assert tokenize_line("div :hello id=x") == ["div", ":hello", "id=x"]
    assert tokenize_line("div : hello") == ["div", ":", "hello"]


def test_comment_markers_inside_a_word_are_text():
    assert tokenize_line("a href=http://x.com/p data=[a,/* c */b]") == ["a", "href=http://x.com/p", "data=[a,/* c */b]"]


def test_value_colon_takes_rest_of_line():
    tokens = LineTokenizer("div id=x: some text // note").tokenize()
    assert [token.value for token in tokens] == ["div", "id=x", ": some text", "// note"]
    assert tokens[2].type == TokenType.VALUE
    assert tokens[2].column == 8


def test_token_columns_include_offset():
    tokens = LineTokenizer("div class=x", offset=4).tokenize()
    assert [(token.value, token.column, token.end_column) for token in tokens] == [
        ("div", 4, 7),
        ("class=x", 8, 15),
    ]


def test_unbalanced_closing_bracket_is_clamped():
    assert tokenize_line("a] b c") == ["a]", "b", "c"]


def test_find_comment_start_ignores_quotes_and_brackets():
    assert find_comment_start('"http://x" // c') == 11
    assert find_comment_start("[a // b]") == -1
    assert find_comment_start("x /* c */") == 2
    assert find_comment_start("x /* open") == -1
    assert find_comment_start("http://x") == -1
    assert find_comment_start(" http://x // c") == 10
    assert find_comment_start("a/*b*/") == -1
