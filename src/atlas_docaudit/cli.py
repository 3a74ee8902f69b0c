"""Interface de linha de comando: `atlas-docaudit`.

Comandos:
- `run`: audita a árvore de documentação e grava manifest + reports
- `report`: imprime o report Markdown de um manifest salvo
- `rules`: lista o catálogo de regras
- `version`: imprime a versão instalada

O código de saída de `run` é o do runner (0 ok, 1 findings `error`,
2 Step com falha ou config inválida).

Exemplo:
    $ atlas-docaudit run --config docaudit.yaml --local docaudit.local.yaml
    $ atlas-docaudit report runs/run-20240101T000000Z/manifest.json
    $ atlas-docaudit rules
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from atlas_docaudit import __version__
from atlas_docaudit.core.config.errors import ConfigError
from atlas_docaudit.core.config.loader import load_config
from atlas_docaudit.core.findings import RULES
from atlas_docaudit.core.traceability.manifest import load_manifest
from atlas_docaudit.report.report_md import generate_report_md
from atlas_docaudit.runner import EXIT_STEP_FAILED, AuditRun, default_run_id, run_audit

app = typer.Typer(
    name="atlas-docaudit",
    help="Auditoria determinística de integridade de sites de documentação em markdown",
    no_args_is_help=True,
)

_console = Console()

_SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "cyan"}
_STATUS_STYLE = {"success": "green", "skipped": "yellow", "failed": "red"}


def _print_run(audit: AuditRun, run_dir: Path) -> None:
    steps = Table(title=f"Run {audit.ctx.run_id}")
    steps.add_column("Step")
    steps.add_column("Status")
    steps.add_column("Findings", justify="right")
    steps.add_column("Summary")
    for sid, sr in list(audit.run_result.steps.items()) + list(audit.exports.items()):
        status = sr.status.value
        steps.add_row(
            sid,
            f"[{_STATUS_STYLE.get(status, 'white')}]{status}[/]",
            str(sr.metrics.get("findings", "")),
            sr.summary,
        )
    _console.print(steps)

    summary_step = audit.run_result.steps.get("audit.summary")
    summary = (summary_step.payload.get("summary") if summary_step is not None else None) or {}
    by_rule = summary.get("by_rule") or {}
    if by_rule:
        rules = Table(title="Findings by rule")
        rules.add_column("Rule")
        rules.add_column("Severity")
        rules.add_column("Count", justify="right")
        for rule, count in sorted(by_rule.items()):
            sev = RULES.get(rule, {}).get("severity", "error")
            rules.add_row(rule, f"[{_SEVERITY_STYLE.get(sev, 'white')}]{sev}[/]", str(count))
        _console.print(rules)

    verdict = {0: "[green]PASSED[/]", 1: "[red]FAILED[/] (error findings)"}.get(
        audit.exit_code, "[red]FAILED[/] (step failure)"
    )
    _console.print(f"Verdict: {verdict}")
    _console.print(f"Manifest: {run_dir / 'manifest.json'}")


@app.command()
def run(
    config: Path = typer.Option(..., "--config", "-c", help="Arquivo de config de defaults (YAML/JSON)"),
    local: Optional[Path] = typer.Option(None, "--local", "-l", help="Arquivo de overrides locais"),
    run_dir: Optional[Path] = typer.Option(None, "--run-dir", help="Diretório de saída do manifest e dos reports"),
    run_id: Optional[str] = typer.Option(None, "--run-id", help="Identificador explícito da run"),
) -> None:
    """Audita a árvore de documentação descrita por CONFIG."""
    try:
        cfg = load_config(defaults_path=str(config), local_path=str(local) if local else None)
    except ConfigError as e:
        typer.echo(f"Config error ({e.__class__.__name__}): {e}", err=True)
        raise typer.Exit(EXIT_STEP_FAILED)

    base_dir = config.resolve().parent
    created_at = datetime.now(timezone.utc)
    rid = run_id or default_run_id(created_at)
    out_dir = run_dir or (base_dir / "runs" / rid)

    audit = run_audit(cfg, run_dir=out_dir, run_id=rid, created_at=created_at, base_dir=base_dir)
    _print_run(audit, out_dir)
    raise typer.Exit(audit.exit_code)


@app.command()
def report(
    manifest: Path = typer.Argument(..., help="Caminho de um manifest.json salvo"),
) -> None:
    """Imprime o report Markdown de um MANIFEST salvo."""
    if not manifest.is_file():
        typer.echo(f"Manifest not found: {manifest}", err=True)
        raise typer.Exit(EXIT_STEP_FAILED)
    typer.echo(generate_report_md(load_manifest(manifest).to_dict()))


@app.command()
def rules() -> None:
    """Lista o catálogo de regras com as severidades default."""
    table = Table(title="Rule catalog")
    table.add_column("Rule")
    table.add_column("Severity")
    table.add_column("Description")
    for rule, spec in sorted(RULES.items()):
        sev = spec["severity"]
        table.add_row(rule, f"[{_SEVERITY_STYLE.get(sev, 'white')}]{sev}[/]", spec["description"])
    _console.print(table)


@app.command()
def version() -> None:
    """Imprime a versão instalada."""
    typer.echo(__version__)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
