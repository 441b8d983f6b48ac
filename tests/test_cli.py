import json

import pytest

import tmlfmt
from typedml import parse_tml, strip_positions


def test_writes_normalized_tml(tml_file, tmp_path, capsys, sample_document):
    out_dir = tmp_path / "out"
    tmlfmt.main([str(tml_file), "-o", str(out_dir)])
    written = out_dir / "sample.tml"
    assert written.exists()
    assert "Wrote" in capsys.readouterr().out
    text = written.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert strip_positions(parse_tml(text)) == strip_positions(sample_document)


def test_writes_json(tml_file, tmp_path):
    out_dir = tmp_path / "out"
    tmlfmt.main([str(tml_file), "-o", str(out_dir), "--json", "--no-pretty"])
    data = json.loads((out_dir / "sample.json").read_text(encoding="utf-8"))
    assert [node["type"] for node in data] == ["Block", "Block"]
    assert "position" not in data[0]


def test_directory_input(tmp_path, sample_source):
    source_dir = tmp_path / "src"
    source_dir.mkdir()
    (source_dir / "a.tml").write_text("a: 1\n", encoding="utf-8")
    (source_dir / "b.tml").write_text("b\n  // c\n", encoding="utf-8")
    (source_dir / "notes.txt").write_text("skip me", encoding="utf-8")
    out_dir = tmp_path / "out"
    tmlfmt.main([str(source_dir), "-o", str(out_dir), "--strip-comments"])
    assert sorted(path.name for path in out_dir.iterdir()) == ["a.tml", "b.tml"]
    assert (out_dir / "b.tml").read_text(encoding="utf-8") == "b\n"


def test_query_prints_node(tml_file, capsys):
    tmlfmt.main([str(tml_file), "--query", "2:7"])
    out = capsys.readouterr().out
    header, _, body = out.partition("\n")
    assert header == "Attribute at 2:7 (in html)"
    assert json.loads(body)["key"] == "lang"


def test_query_miss(tml_file, capsys):
    tmlfmt.main([str(tml_file), "--query", "40:0"])
    assert capsys.readouterr().out.strip() == "No node at 40:0"


def test_query_rejects_malformed_point(tml_file):
    with pytest.raises(SystemExit):
        tmlfmt.main([str(tml_file), "--query", "two:seven"])


def test_missing_input(tmp_path):
    with pytest.raises(FileNotFoundError):
        tmlfmt.main([str(tmp_path / "missing.tml")])


def test_empty_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        tmlfmt.collect_inputs(tmp_path)
