# tests/core/pipeline/test_registry.py
"""
Testes do StepRegistry (validação estrutural pré-execução).

Invariantes:
    - ids duplicados são rejeitados no momento do registro
    - ids vazios são rejeitados
    - a ordem de registro é preservada
"""

import pytest

from atlas_docaudit.core.pipeline.registry import DuplicateStepIdError, StepRegistry


def test_registry_rejects_duplicate_step_id(DummyStep):
    reg = StepRegistry()
    reg.add(DummyStep(step_id="ingest.scan"))
    with pytest.raises(DuplicateStepIdError):
        reg.add(DummyStep(step_id="ingest.scan"))


def test_registry_rejects_empty_id(DummyStep):
    with pytest.raises(ValueError):
        StepRegistry().add(DummyStep(step_id="  "))


def test_registry_preserves_insertion_order(DummyStep):
    reg = StepRegistry()
    for sid in ("ingest.scan", "audit.encoding", "contract.load"):
        reg.add(DummyStep(step_id=sid))

    assert reg.ids() == ["ingest.scan", "audit.encoding", "contract.load"]
    assert [s.id for s in reg.list()] == reg.ids()
    assert reg.get("audit.encoding").id == "audit.encoding"
