"""
Gerador canônico de `report.md` (v1) — Atlas DocAudit

Regras:
- O report.md é derivado EXCLUSIVAMENTE do Manifest final (dict).
- Não infere, não recalcula, não acessa filesystem fora do que está registrado.
- Mesmo Manifest => mesmo report.md (determinismo por ordenação estável).

Estrutura mínima obrigatória:
# Documentation Audit Report

## Executive Summary
## Pipeline Overview
## Findings by Rule
## Findings by File
## Findings
## Generated Artifacts
## Traceability
## Limitations
## Execution Metadata
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple


REQUIRED_SECTIONS: List[str] = [
    "# Documentation Audit Report",
    "## Executive Summary",
    "## Pipeline Overview",
    "## Findings by Rule",
    "## Findings by File",
    "## Findings",
    "## Generated Artifacts",
    "## Traceability",
    "## Limitations",
    "## Execution Metadata",
]

SUMMARY_STEP_ID = "audit.summary"


def _sorted_items(d: Any) -> List[Tuple[str, Any]]:
    if not isinstance(d, dict):
        return []
    return sorted(d.items(), key=lambda kv: kv[0])


def _as_pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2)


def _cell(value: Any) -> str:
    text = "" if value is None else str(value)
    return text.replace("|", "\\|").replace("\n", " ")


def _require_manifest(manifest: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(manifest, dict) or not manifest:
        raise ValueError("Manifest is required to generate report.md")
    return manifest


def _extract_step(manifest: Dict[str, Any], step_id: str) -> Dict[str, Any] | None:
    steps = manifest.get("steps")
    if not isinstance(steps, dict):
        return None
    step = steps.get(step_id)
    return step if isinstance(step, dict) else None


def summary_payload(manifest: Dict[str, Any]) -> Dict[str, Any]:
    """Payload de `audit.summary` registrado no Manifest (vazio quando ausente)."""
    step = _extract_step(manifest, SUMMARY_STEP_ID) or {}
    payload = step.get("payload")
    return payload if isinstance(payload, dict) else {}


def _collect_artifacts_from_steps(steps: Dict[str, Any]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for step_id, step in _sorted_items(steps):
        if not isinstance(step, dict):
            continue
        artifacts = step.get("artifacts")
        if not isinstance(artifacts, dict) or not artifacts:
            continue
        for art_key, art_val in _sorted_items(artifacts):
            if art_key == "payload_meta":
                continue
            out.append({"artifact_key": art_key, "path": art_val, "produced_by": step_id})
    return out


def generate_report_md(manifest: Dict[str, Any], *, max_findings: int = 200) -> str:
    """Gera o conteúdo completo do report.md a partir do Manifest final."""
    manifest = _require_manifest(manifest)

    run = manifest.get("run") if isinstance(manifest.get("run"), dict) else {}
    inputs = manifest.get("inputs") if isinstance(manifest.get("inputs"), dict) else {}
    steps = manifest.get("steps") if isinstance(manifest.get("steps"), dict) else {}
    events = manifest.get("events") if isinstance(manifest.get("events"), list) else []

    payload = summary_payload(manifest)
    summary = payload.get("summary") if isinstance(payload.get("summary"), dict) else {}
    findings = payload.get("findings") if isinstance(payload.get("findings"), list) else []

    lines: List[str] = []
    lines.append("# Documentation Audit Report\n")

    # Executive Summary (apenas o que foi registrado)
    lines.append("## Executive Summary")
    lines.append(f"- **Run ID**: `{run.get('run_id', '<unknown>')}`")
    lines.append(f"- **Started At (UTC)**: `{run.get('started_at', '<unknown>')}`")
    lines.append(f"- **DocAudit Version**: `{run.get('docaudit_version', '<unknown>')}`")
    if summary:
        verdict = "PASSED" if summary.get("passed") else "FAILED"
        by_sev = summary.get("by_severity") or {}
        lines.append(f"- **Verdict**: **{verdict}**")
        lines.append(
            f"- **Findings**: `{summary.get('total', 0)}` "
            f"(errors: `{by_sev.get('error', 0)}`, warnings: `{by_sev.get('warning', 0)}`, "
            f"info: `{by_sev.get('info', 0)}`)"
        )
    else:
        lines.append("- **Verdict**: `<unknown>` (no `audit.summary` payload in the Manifest)")
    failed = [sid for sid, s in _sorted_items(steps) if isinstance(s, dict) and s.get("status") == "failed"]
    if failed:
        lines.append(f"- **Failed steps**: {', '.join(f'`{s}`' for s in failed)}")
    lines.append("\nThis report consolidates the audit strictly from the Manifest.")
    lines.append("If something is absent here, it was absent from the Manifest.\n")

    # Pipeline Overview
    lines.append("## Pipeline Overview")
    if steps:
        for step_id, step in _sorted_items(steps):
            if not isinstance(step, dict):
                continue
            status = step.get("status", "unknown")
            kind = step.get("kind", "unknown")
            text = step.get("summary") or ""
            suffix = f": {text}" if text else ""
            lines.append(f"- **{step_id}** (`{kind}`) status `{status}`{suffix}")
    else:
        lines.append("No steps recorded in the Manifest.")
    lines.append("")

    # Findings by Rule
    lines.append("## Findings by Rule")
    by_rule = summary.get("by_rule") if isinstance(summary.get("by_rule"), dict) else {}
    if by_rule:
        lines.append("| Rule | Count |")
        lines.append("|---|---|")
        for rule, count in _sorted_items(by_rule):
            lines.append(f"| `{rule}` | {count} |")
    else:
        lines.append("No findings recorded.")
    lines.append("")

    # Findings by File
    lines.append("## Findings by File")
    top_files = summary.get("top_files") if isinstance(summary.get("top_files"), list) else []
    if top_files:
        lines.append("| File | Findings | Errors |")
        lines.append("|---|---|---|")
        for entry in top_files:
            lines.append(f"| `{_cell(entry.get('path'))}` | {entry.get('findings', 0)} | {entry.get('errors', 0)} |")
    else:
        lines.append("No files with findings.")
    lines.append("")

    # Findings
    lines.append("## Findings")
    if findings:
        lines.append("| Severity | Rule | Location | Message |")
        lines.append("|---|---|---|---|")
        for f in findings[:max_findings]:
            location = f.get("path", "")
            if f.get("line") is not None:
                location = f"{location}:{f['line']}"
            lines.append(
                f"| {_cell(f.get('severity'))} | `{_cell(f.get('rule'))}` | `{_cell(location)}` | {_cell(f.get('message'))} |"
            )
        if len(findings) > max_findings:
            lines.append(f"\n_{len(findings) - max_findings} more findings omitted; see findings.json._")
    else:
        lines.append("No findings recorded.")
    lines.append("")

    # Generated Artifacts
    lines.append("## Generated Artifacts")
    artifacts = _collect_artifacts_from_steps(steps)
    if artifacts:
        for a in artifacts:
            lines.append(f"- **{a['artifact_key']}**: `{a['path']}` (produced_by: `{a['produced_by']}`)")
    else:
        lines.append("No artifacts recorded in Manifest steps.")
    lines.append("")

    # Traceability
    lines.append("## Traceability")
    lines.append("- Source of truth: `Manifest` (final) only.")
    lines.append(f"- Config hash: `{inputs.get('config_hash', '<unknown>')}`")
    lines.append(f"- Contract hash: `{inputs.get('contract_hash', '<unknown>')}`")
    lines.append(f"- Corpus hash: `{inputs.get('corpus_hash', '<unknown>')}`")
    lines.append(f"- Events recorded: `{len(events)}`\n")

    # Limitations
    lines.append("## Limitations")
    lines.append("- Static analysis only: the site is not rendered and Liquid is not evaluated.")
    lines.append("- External links are counted, never fetched.")
    lines.append("- Detected defects are reported, never repaired.\n")

    # Execution Metadata
    lines.append("## Execution Metadata")
    lines.append("### run")
    lines.append("```json")
    lines.append(_as_pretty_json(run))
    lines.append("```")
    lines.append("### inputs")
    lines.append("```json")
    lines.append(_as_pretty_json(inputs))
    lines.append("```")

    content = "\n".join(lines) + "\n"

    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Report generation failed: missing required section: {sec}")

    return content
