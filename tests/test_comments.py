from typedml import BlockNode, CommentNode, parse_tml


def test_line_comments_keep_their_place():
    [div] = parse_tml("div\n  // first\n  p\n  // second")
    assert [child.type for child in div.children] == ["Comment", "Block", "Comment"]
    assert [div.children[0].value, div.children[2].value] == ["first", "second"]


def test_multi_line_block_comment_in_block():
    [div] = parse_tml("div\n  /* first\n     second */\n  p")
    comment, p = div.children
    assert isinstance(comment, CommentNode)
    assert not comment.is_line_comment
    assert comment.value == "first\n     second"
    assert (comment.position.start.line, comment.position.start.column) == (2, 2)
    assert (comment.position.end.line, comment.position.end.column) == (3, 14)
    assert p.name == "p"


def test_content_before_comment_is_parsed_first():
    [div] = parse_tml("div /* start\n  end */")
    [comment] = div.children
    assert comment.value == "start\n  end"
    assert (comment.position.start.line, comment.position.start.column) == (1, 4)
    assert (comment.position.end.line, comment.position.end.column) == (2, 8)


def test_content_after_comment_close_continues_parsing():
    comment, p = parse_tml("/* a\nb */ p: x")
    assert comment.value == "a\nb"
    assert isinstance(p, BlockNode)
    assert p.children[0].value.value == "x"
    assert p.position.start.column == 5


def test_content_after_comment_close_attaches_to_enclosing_block():
    [root] = parse_tml("root\n  /* a\n  */ child")
    comment, child = root.children
    assert comment.value == "a"
    assert child.name == "child"
    assert child.position.start.column == 5


def test_unclosed_comment_runs_to_end_of_document():
    [comment] = parse_tml("/* never closed\nstill going")
    assert comment.value == "never closed\nstill going"
    assert (comment.position.end.line, comment.position.end.column) == (2, 11)


def test_comment_marker_inside_quotes_is_text():
    p = parse_tml('p: "a /* b"\nq')[0]
    assert p.children[0].value.value == "a /* b"


def test_single_line_comment_forms():
    document = parse_tml("// line\n/* block */\ndiv /* inline */ x=1 // tail")
    line, block, div = document
    assert line.is_line_comment and line.value == "line"
    assert not block.is_line_comment and block.value == "block"
    assert [child.type for child in div.children] == ["Comment", "Attribute", "Comment"]
    assert div.children[2].value == "tail"


def test_comment_dedent_pops_the_stack():
    document = parse_tml("a\n  b\n/* root\n comment */\nc")
    assert [node.type for node in document] == ["Block", "Comment", "Block"]
