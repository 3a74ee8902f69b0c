from pathlib import Path

from atlas_docaudit.docs.corpus import (
    DEFAULT_EXCLUDE,
    compute_corpus_hash,
    discover_paths,
    read_source,
)
from tests.fixtures.docs_tree import write_tree


def test_discover_paths_is_sorted_and_filtered(tmp_path: Path):
    write_tree(
        tmp_path,
        {
            "index.md": "x",
            "b/z.md": "x",
            "a/b.md": "x",
            "a/c.txt": "x",
            "_site/x.md": "x",
        },
    )
    found = [p.relative_to(tmp_path).as_posix() for p in discover_paths(tmp_path, ["**/*.md"], DEFAULT_EXCLUDE)]

    assert found == ["a/b.md", "b/z.md", "index.md"]


def test_double_star_exclude_matches_root_files(tmp_path: Path):
    write_tree(tmp_path, {"draft.md": "x", "a/draft.md": "x", "a/keep.md": "x"})
    found = [p.relative_to(tmp_path).as_posix() for p in discover_paths(tmp_path, ["**/*.md"], ["**/draft.md"])]

    assert found == ["a/keep.md"]


def test_read_source_keeps_raw_bytes(tmp_path: Path):
    write_tree(tmp_path, {"a/b.md": b"\xff\xfe broken"})
    src = read_source(tmp_path, tmp_path / "a" / "b.md")

    assert src.path == "a/b.md"
    assert src.raw == b"\xff\xfe broken"
    assert src.size == 9
    assert len(src.sha256) == 64


def test_corpus_hash_is_order_independent_and_content_sensitive(tmp_path: Path):
    write_tree(tmp_path, {"a.md": "one", "b.md": "two"})
    a = read_source(tmp_path, tmp_path / "a.md")
    b = read_source(tmp_path, tmp_path / "b.md")

    assert compute_corpus_hash([a, b]) == compute_corpus_hash([b, a])

    (tmp_path / "b.md").write_text("changed", encoding="utf-8")
    b2 = read_source(tmp_path, tmp_path / "b.md")
    assert compute_corpus_hash([a, b2]) != compute_corpus_hash([a, b])
