"""Testes do catálogo de regras e do modelo Finding."""

import pytest

from atlas_docaudit.core.findings import (
    RULES,
    Finding,
    Severity,
    count_by_severity,
    default_severity,
    make_finding,
    sort_findings,
)


def test_every_rule_has_valid_severity_and_description():
    for rule, spec in RULES.items():
        assert Severity(spec["severity"]) is default_severity(rule)
        assert spec["description"]


def test_unknown_rule_is_rejected():
    with pytest.raises(KeyError):
        default_severity("NOT_A_RULE")


def test_make_finding_uses_catalog_severity_and_collects_details():
    f = make_finding("ANCHOR_DUPLICATE", path="a.md", line=3, message="dup", anchor="x")

    assert f.severity == Severity.WARNING
    assert f.details == {"anchor": "x"}


def test_make_finding_severity_override():
    f = make_finding("LINK_BROKEN_PAGE", path="a.md", message="m", severity=Severity.INFO)
    assert f.severity == Severity.INFO


def test_finding_dict_round_trip():
    f = make_finding("DIFF_MARKERS", path="zh/a.md", line=1, message="m", ratio=0.9)
    data = f.to_dict()

    assert data == {
        "rule": "DIFF_MARKERS",
        "severity": "error",
        "path": "zh/a.md",
        "line": 1,
        "message": "m",
        "details": {"ratio": 0.9},
    }
    assert Finding.from_dict(data) == f


def test_sort_and_count():
    fs = [
        make_finding("LINK_BROKEN_PAGE", path="b.md", line=2, message="x"),
        make_finding("TRANSLATION_MISSING", path="a.md", message="x"),
        make_finding("ANCHOR_DUPLICATE", path="a.md", line=5, message="x"),
    ]

    ordered = sort_findings(fs)

    assert [(f.path, f.line) for f in ordered] == [("a.md", None), ("a.md", 5), ("b.md", 2)]
    assert count_by_severity(fs) == {"error": 2, "warning": 1, "info": 0}
