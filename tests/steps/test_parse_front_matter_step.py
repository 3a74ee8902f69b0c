from atlas_docaudit.core.pipeline.types import StepStatus
from atlas_docaudit.steps.ingest.scan import IngestScanStep
from atlas_docaudit.steps.parse.front_matter import ParseFrontMatterStep
from tests.fixtures.docs_tree import page
from tests.fixtures.pipeline import rules_of, run_steps

FILES = {
    "ok.md": page("OK", "/ok/", "# OK\n"),
    "none.md": "# No front matter\n",
    "open.md": "---\ntitle: x\n# never closed\n",
    "yaml.md": "---\ntitle: [\n---\nbody\n",
    "list.md": "---\n- a\n---\n",
}


def test_front_matter_defects_become_findings(make_ctx) -> None:
    ctx = make_ctx(FILES)

    sr = run_steps(ctx, IngestScanStep(), ParseFrontMatterStep())["parse.front_matter"]

    assert sr.status == StepStatus.SUCCESS
    assert rules_of(sr) == [
        "FRONT_MATTER_NOT_MAPPING",
        "FRONT_MATTER_MISSING",
        "FRONT_MATTER_UNTERMINATED",
        "FRONT_MATTER_INVALID_YAML",
    ]
    assert sr.metrics["documents"] == 5
    assert sr.metrics["with_front_matter"] == 1


def test_every_document_is_published(make_ctx) -> None:
    ctx = make_ctx(FILES)
    run_steps(ctx, IngestScanStep(), ParseFrontMatterStep())

    docs = {d.path: d for d in ctx.get_artifact("docs.documents")}

    assert sorted(docs) == ["list.md", "none.md", "ok.md", "open.md", "yaml.md"]
    ok = docs["ok.md"]
    assert ok.front_matter == {"layout": "section", "title": "OK", "permalink": "/ok/"}
    assert ok.body == "# OK\n"
    assert ok.body_line == 6
    assert ok.front_matter_usable
    assert not docs["yaml.md"].front_matter_usable
    assert docs["yaml.md"].front_matter == {}
    assert docs["none.md"].body == "# No front matter\n"


def test_undecodable_bytes_do_not_stop_parsing(make_ctx) -> None:
    ctx = make_ctx({"bad.md": b"---\ntitle: ok\n---\nbroken \xff\n"})

    sr = run_steps(ctx, IngestScanStep(), ParseFrontMatterStep())["parse.front_matter"]

    assert sr.status == StepStatus.SUCCESS
    (doc,) = ctx.get_artifact("docs.documents")
    assert doc.front_matter == {"title": "ok"}
    assert "\ufffd" in doc.body
