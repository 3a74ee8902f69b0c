"""Step canônico: audit.diff_markers (v1).

Detecta markup de diff colado em conteúdo publicado:
- DIFF_MARKERS: proporção de linhas não vazias iniciadas por `+` maior ou
  igual a `threshold` (com pelo menos `min_lines` linhas)
- DIFF_HUNK_HEADER: um finding por cabeçalho `@@ ... @@`, `+++ b/`,
  `--- a/` ou `diff --git` fora de blocos de código

Config (`steps.audit.diff_markers`):
    threshold: float (default 0.8)
    min_lines: int   (default 3)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from atlas_docaudit.core.findings import DIFF_HUNK_HEADER, DIFF_MARKERS, Finding, make_finding
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult
from atlas_docaudit.docs.diffmarkup import find_diff_headers, plus_marker_stats
from atlas_docaudit.steps.common import (
    ARTIFACT_SOURCES,
    exception_result,
    findings_result,
    get_step_cfg,
    require_artifact,
)


@dataclass
class AuditDiffMarkersStep(Step):
    """Diagnóstico de marcadores de diff publicados."""

    id: str = "audit.diff_markers"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ingest.scan"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            sources = require_artifact(ctx, ARTIFACT_SOURCES, step_id=self.id)
            cfg = get_step_cfg(ctx, self.id)
            threshold = float(cfg.get("threshold", 0.8))
            min_lines = int(cfg.get("min_lines", 3))
            if not 0.0 < threshold <= 1.0:
                raise ValueError(f"steps.{self.id}.threshold must be in (0, 1], got {threshold}")

            findings: List[Finding] = []
            flagged = 0

            for src in sources:
                text = src.raw.decode("utf-8", errors="replace")

                stats = plus_marker_stats(text)
                if stats.lines >= min_lines and stats.ratio >= threshold:
                    flagged += 1
                    findings.append(
                        make_finding(
                            DIFF_MARKERS,
                            path=src.path,
                            line=stats.first_line,
                            message=(
                                f"{stats.plus_lines}/{stats.lines} non-blank lines start with `+` "
                                f"({stats.ratio:.0%}); content looks pasted from a diff"
                            ),
                            plus_lines=stats.plus_lines,
                            lines=stats.lines,
                            ratio=round(stats.ratio, 4),
                        )
                    )

                for header in find_diff_headers(text):
                    findings.append(
                        make_finding(
                            DIFF_HUNK_HEADER,
                            path=src.path,
                            line=header.line,
                            message=f"diff {header.kind} header in published content",
                            header=header.text[:120],
                        )
                    )

            return findings_result(
                ctx,
                step_id=self.id,
                kind=self.kind,
                findings=findings,
                summary=f"diff markup checked on {len(sources)} files",
                metrics={"files": len(sources), "flagged_files": flagged},
                payload={"threshold": threshold, "min_lines": min_lines},
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)
