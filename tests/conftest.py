import os
import sys

import pytest

# Ensure the project root is on sys.path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from typedml import BlockNode, parse_tml  # noqa: E402

SAMPLE_DOCUMENT = """$schema: "https://example.com/schema/tml-html/1.0"
html lang=en
  head
    title: "My Website"
    meta charset="UTF-8"
  body
    h1: Welcome to TML
    img src=logo.png alt="Site Logo"
    button disabled!
    // Structured values
    tags: [item1, item2, item3]
    config: {server: "api.example.com", retries: 3}
    description:
      This is a multiline string
      that spans several lines
    /* block
       comment */
"""


@pytest.fixture
def sample_source():
    return SAMPLE_DOCUMENT


@pytest.fixture
def sample_document(sample_source):
    return parse_tml(sample_source)


@pytest.fixture
def tml_file(tmp_path, sample_source):
    path = tmp_path / "sample.tml"
    path.write_text(sample_source, encoding="utf-8")
    return path


def child_block(block, name):
    """First child block with the given name."""
    for child in block.children:
        if isinstance(child, BlockNode) and child.name == name:
            return child
    raise AssertionError(f"Block {block.name!r} has no child block {name!r}")
