from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.types import StepStatus
from atlas_docaudit.steps.contract.load import ContractLoadStep


def _ctx(config: dict, *, base_dir: Path | None = None) -> RunContext:
    meta = {"base_dir": str(base_dir)} if base_dir is not None else {}
    return RunContext(
        run_id="test",
        created_at=datetime(2026, 1, 16, tzinfo=timezone.utc),
        config=config,
        contract={},
        meta=meta,
    )


def test_contract_load_success(tmp_path: Path) -> None:
    contract_path = tmp_path / "site.contract.yaml"
    contract_path.write_text(
        """
contract_version: '1.0'
front_matter:
  required: [layout, title, permalink]
  layouts: [section]
templates:
  languages: [java, py]
translations:
  - source: documentation/sdks/python.md
    translation: zh/documentation/sdks/python.md
""".lstrip(),
        encoding="utf-8",
    )

    ctx = _ctx({"contract": {"path": str(contract_path)}})
    sr = ContractLoadStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    assert ctx.contract["contract_version"] == "1.0"
    assert ctx.contract["front_matter"]["optional"] == ["redirect_from"]
    assert ctx.contract["templates"]["includes_dir"] == "_includes"
    assert sr.metrics == {"required_keys": 3, "languages": 2, "translations": 1}
    assert sr.payload["contract"]["path"].endswith("site.contract.yaml")
    assert len(sr.payload["contract"]["hash"]) == 64


def test_contract_path_is_resolved_against_base_dir(tmp_path: Path) -> None:
    (tmp_path / "c.json").write_text(json.dumps({"contract_version": "1.0"}), encoding="utf-8")

    sr = ContractLoadStep().run(_ctx({"contract": {"path": "c.json"}}, base_dir=tmp_path))

    assert sr.status == StepStatus.SUCCESS
    assert Path(sr.payload["contract"]["path"]) == tmp_path / "c.json"


def test_contract_load_missing_path() -> None:
    sr = ContractLoadStep().run(_ctx({}))

    assert sr.status == StepStatus.FAILED
    err = sr.payload["error"]
    assert err["type"] == "CONTRACT_PATH_MISSING"
    assert err["decision_required"] is True
    assert err["details"]["expected_config_key"] == "contract.path"


def test_contract_load_file_not_found(tmp_path: Path) -> None:
    sr = ContractLoadStep().run(_ctx({"contract": {"path": str(tmp_path / "missing.yaml")}}))

    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "ContractFileNotFoundError"


def test_contract_load_invalid_parse(tmp_path: Path) -> None:
    contract_path = tmp_path / "bad.yaml"
    contract_path.write_text("contract_version: [", encoding="utf-8")

    sr = ContractLoadStep().run(_ctx({"contract": {"path": str(contract_path)}}))

    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "ContractParseError"


def test_contract_load_invalid_schema(tmp_path: Path) -> None:
    contract = {
        "contract_version": "1.0",
        "front_matter": {"required": ["title"], "optional": ["title"]},
    }
    contract_path = tmp_path / "contract.json"
    contract_path.write_text(json.dumps(contract), encoding="utf-8")

    sr = ContractLoadStep().run(_ctx({"contract": {"path": str(contract_path)}}))

    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "ContractValidationError"
    assert "overlaps" in sr.payload["error"]["message"]
