from typedml import CommentNode, DocumentCache, create_point

SOURCE = "div\n  // note\n  p: x"


def test_same_version_returns_cached_entry():
    cache = DocumentCache()
    first = cache.get("file:///a.tml", 1, SOURCE)
    second = cache.get("file:///a.tml", 1, "ignored because the version matches")
    assert second is first
    assert len(cache) == 1 and "file:///a.tml" in cache


def test_new_version_reparses():
    cache = DocumentCache()
    first = cache.get("file:///a.tml", 1, SOURCE)
    second = cache.get("file:///a.tml", 2, "other")
    assert second is not first
    assert second.version == 2
    assert [node.name for node in second.document] == ["other"]


def test_lookup_through_cache():
    cache = DocumentCache()
    found = cache.find_node_at_position("file:///a.tml", 1, SOURCE, create_point(2, 4))
    assert isinstance(found, CommentNode)
    assert cache.get("file:///a.tml", 1, SOURCE).document.parent_of(found).name == "div"


def test_invalidate_and_clear():
    cache = DocumentCache()
    cache.get("a", 1, SOURCE)
    cache.get("b", 1, SOURCE)
    cache.invalidate("a")
    cache.invalidate("missing")
    assert "a" not in cache and "b" in cache
    cache.clear()
    assert len(cache) == 0


def test_cache_passes_parser_config():
    cache = DocumentCache(config={"strip_comments": True})
    [div] = cache.get("a", 1, SOURCE).document
    assert [child.type for child in div.children] == ["Block"]
