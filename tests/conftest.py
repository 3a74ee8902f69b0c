# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas DocAudit.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- um contrato de site reduzido
- contexto de execução controlado (RunContext)
- Steps dummy para testes estruturais
- uma árvore de documentação sintética em `tmp_path`

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Dados retornados são determinísticos e isolados
    - Steps dummy utilizam duck typing em vez de herança

Limites explícitos:
    - Não substituir testes de integração
    - Não validar semântica completa de config ou contract
"""

from datetime import datetime, timezone

import pytest

from tests.fixtures.docs_tree import write_tree


# =====================================================
# Config loader fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real.

    Representa o conteúdo típico de `docaudit.defaults.yaml`, base sobre a
    qual overrides locais são aplicados via deep-merge.
    """
    return """\
engine:
  fail_fast: false
docs:
  root: site
  include: ["**/*.md"]
  exclude: ["_site/**"]
steps:
  audit.diff_markers:
    threshold: 0.8
    min_lines: 3
  audit.translations:
    enabled: true
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML de overrides locais (`docaudit.local.yaml`)."""
    return """\
docs:
  exclude: ["drafts/**"]
steps:
  audit.translations:
    enabled: false
"""


# =====================================================
# Pipeline fixtures (Step + RunContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """Configuração mínima já resolvida (sem loader, sem merge)."""
    return {
        "engine": {"fail_fast": True},
        "steps": {"ingest.scan": {"enabled": True}},
    }


@pytest.fixture
def dummy_contract() -> dict:
    """Contrato de site mínimo e válido (v1)."""
    return {
        "contract_version": "1.0",
        "front_matter": {"required": ["layout", "title", "permalink"], "optional": ["redirect_from"]},
        "templates": {"languages": ["java", "py"]},
        "translations": [],
    }


@pytest.fixture
def dummy_ctx(dummy_config, dummy_contract):
    """
    RunContext determinístico para testes do core.

    `run_id` e `created_at` são fixos; config e contract são injetados
    explicitamente via fixtures.
    """
    from atlas_docaudit.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        contract=dummy_contract,
        meta={"source": "pytest"},
    )


@pytest.fixture
def DummyStep():
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de um Step.

    Retorna uma *classe* (não uma instância). O Step sempre termina com
    SUCCESS e registra o artefato `<id>.ok` no RunContext.
    """
    from atlas_docaudit.core.pipeline.types import StepKind, StepStatus, StepResult

    class _DummyStep:
        def __init__(
            self,
            step_id: str = "ingest.scan",
            kind: StepKind = StepKind.DIAGNOSTIC,
            depends_on=None,
        ):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []

        def run(self, ctx):
            ctx.set_artifact(f"{self.id}.ok", True)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                metrics={},
                warnings=[],
                artifacts={"ok": f"{self.id}.ok"},
                payload={"note": "dummy"},
            )

    return _DummyStep


# =====================================================
# Documentation tree fixtures
# =====================================================

@pytest.fixture
def make_ctx(tmp_path):
    """
    Factory de RunContext para testes de Steps sobre uma árvore em `tmp_path`.

    Uso:
        ctx = make_ctx({"index.md": "---\\ntitle: x\\n---\\n"}, contract={...})
    """
    from atlas_docaudit.core.pipeline.context import RunContext

    def _make(files=None, *, config=None, contract=None, root_name: str = "site"):
        root = tmp_path / root_name
        root.mkdir(parents=True, exist_ok=True)
        write_tree(root, files or {})
        cfg = {"docs": {"root": root_name}}
        if config:
            cfg.update(config)
        return RunContext(
            run_id="run-test-001",
            created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
            config=cfg,
            contract=contract or {},
            meta={"base_dir": str(tmp_path), "run_dir": str(tmp_path / "run")},
        )

    return _make
