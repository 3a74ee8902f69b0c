# src/atlas_docaudit/core/traceability/manifest.py
"""
Manifest v1 — rastreabilidade forense de auditorias no Atlas DocAudit.

O Manifest consolida, de forma determinística e auditável:
    - metadados da execução (run)
    - hashes de entrada (config, contrato do site, corpus de documentos)
    - estado incremental dos Steps (status, métricas, warnings, payload)
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - A ordem do Event Log reflete a ordem de chamada da API
    - UTC é o timezone canônico para todos os timestamps
    - O Manifest é serializável e reconstruível (round-trip JSON)

Limites explícitos:
    - Não executa pipeline
    - Não decide políticas de execução
    - Não realiza migração de versões de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from atlas_docaudit.core.pipeline.types import StepResult


MANIFEST_SCHEMA_VERSION = "1"


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps timezone-naive são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class DocAuditManifest:
    """
    Manifest v1 — registro forense de uma auditoria.

    Campos principais:
        - run: run_id, started_at, docaudit_version, schema_version
        - inputs: config_hash, contract_hash, corpus_hash
        - steps: estado incremental de cada Step (indexado por step_id)
        - events: Event Log ordenado

    Invariantes:
        - `steps` é sempre um dicionário indexado por step_id
        - `events` é sempre uma lista ordenada
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável; alterações no retorno não afetam o Manifest."""
        return json.loads(
            json.dumps(
                {"run": self.run, "inputs": self.inputs, "steps": self.steps, "events": self.events},
                ensure_ascii=False,
                default=str,
            )
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocAuditManifest":
        return cls(
            run=dict(data.get("run", {}) or {}),
            inputs=dict(data.get("inputs", {}) or {}),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )

    def step_ids(self) -> List[str]:
        return list(self.steps.keys())


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    docaudit_version: str,
    config_hash: str,
    contract_hash: str,
    corpus_hash: Optional[str] = None,
) -> DocAuditManifest:
    """
    Cria o Manifest inicial de uma auditoria.

    ⚠️ Não emite eventos: o Event Log inicia vazio e só é preenchido por
    `add_event`, `step_started`, `step_finished` ou `step_failed`.
    """
    return DocAuditManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "docaudit_version": docaudit_version,
            "schema_version": MANIFEST_SCHEMA_VERSION,
        },
        inputs={
            "config_hash": config_hash,
            "contract_hash": contract_hash,
            "corpus_hash": corpus_hash,
        },
        steps={},
        events=[],
    )


def _get_manifest(manifest: Union[DocAuditManifest, Dict[str, Any]]) -> Tuple[DocAuditManifest, bool]:
    if isinstance(manifest, DocAuditManifest):
        return manifest, False
    return DocAuditManifest.from_dict(manifest), True


def _sync_back(manifest: Union[DocAuditManifest, Dict[str, Any]], m: DocAuditManifest, is_dict: bool) -> None:
    if is_dict:
        manifest.clear()  # type: ignore[union-attr]
        manifest.update(m.to_dict())  # type: ignore[union-attr]


def add_event(
    manifest: Union[DocAuditManifest, Dict[str, Any]],
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Adiciona exatamente um evento ao Event Log (sem reordenar ou deduplicar)."""
    m, is_dict = _get_manifest(manifest)

    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload
    m.events.append(ev)

    _sync_back(manifest, m, is_dict)


def step_started(
    manifest: Union[DocAuditManifest, Dict[str, Any]],
    *,
    step_id: str,
    kind: str,
    ts: datetime,
) -> None:
    """Marca o Step como `running` e registra `step_started` no Event Log."""
    m, is_dict = _get_manifest(manifest)

    m.steps.setdefault(step_id, {})
    m.steps[step_id].update(
        {
            "step_id": step_id,
            "kind": kind,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(m, event_type="step_started", ts=ts, step_id=step_id, payload={"kind": kind})

    _sync_back(manifest, m, is_dict)


def _result_as_dict(result: Union[StepResult, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(result, StepResult):
        return result.to_dict()
    return dict(result)


def step_finished(
    manifest: Union[DocAuditManifest, Dict[str, Any]],
    *,
    step_id: str,
    ts: datetime,
    result: Union[StepResult, Dict[str, Any]],
) -> None:
    """
    Registra a conclusão de um Step (status final, duração e resultado).

    `result` pode ser um StepResult ou sua forma em dicionário. O payload é
    persistido integralmente: é a fonte de verdade dos exports.
    """
    m, is_dict = _get_manifest(manifest)
    r = _result_as_dict(result)

    s = m.steps.setdefault(step_id, {"step_id": step_id})
    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = r.get("status", "success")
    s.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "summary": r.get("summary"),
            "metrics": r.get("metrics", {}) or {},
            "warnings": r.get("warnings", []) or [],
            "artifacts": r.get("artifacts", {}) or {},
            "payload": r.get("payload", {}) or {},
        }
    )
    if "kind" in r and "kind" not in s:
        s["kind"] = r["kind"]

    add_event(
        m,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": status, "duration_ms": s["duration_ms"]},
    )

    _sync_back(manifest, m, is_dict)


def step_failed(
    manifest: Union[DocAuditManifest, Dict[str, Any]],
    *,
    step_id: str,
    ts: datetime,
    error: str,
) -> None:
    """Marca o Step como `failed`, associa a mensagem e registra `step_failed`."""
    m, is_dict = _get_manifest(manifest)

    s = m.steps.setdefault(step_id, {"step_id": step_id})
    s.update({"status": "failed", "finished_at": _iso(ts), "error": error})
    add_event(m, event_type="step_failed", ts=ts, step_id=step_id, payload={"error": error})

    _sync_back(manifest, m, is_dict)


def save_manifest(manifest: Union[DocAuditManifest, Dict[str, Any]], path: Path) -> None:
    """Persiste o Manifest em JSON determinístico (sort_keys, UTF-8, indentado)."""
    data = manifest.to_dict() if isinstance(manifest, DocAuditManifest) else manifest
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_manifest(path: Path) -> DocAuditManifest:
    """Restaura um Manifest persistido (propaga erros de I/O e de JSON)."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return DocAuditManifest.from_dict(data)
