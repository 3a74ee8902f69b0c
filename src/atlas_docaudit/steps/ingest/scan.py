"""Step canônico: ingest.scan (v1).

Responsabilidades:
- descobrir arquivos fonte sob `docs.root` (globs `docs.include` / `docs.exclude`)
- ler bytes brutos de forma determinística (ordem lexicográfica do path)
- registrar fingerprint por arquivo e `corpus_hash` do conjunto
- publicar `docs.root` e `docs.sources` como artifacts

Limites explícitos (v1):
- NÃO decodifica texto (ver `audit.encoding` e `parse.front_matter`)
- NÃO interpreta front-matter
- NÃO segue symlinks para fora da raiz
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from atlas_docaudit.core.config.loader import get_path
from atlas_docaudit.core.errors import docs_root_not_found
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_docaudit.docs.corpus import (
    DEFAULT_EXCLUDE,
    DEFAULT_INCLUDE,
    compute_corpus_hash,
    discover_paths,
    read_source,
)
from atlas_docaudit.steps.common import (
    ARTIFACT_ROOT,
    ARTIFACT_SOURCES,
    exception_result,
    failed_result,
    resolve_path,
)


def _patterns(value: Any, default: List[str]) -> List[str]:
    if value is None:
        return list(default)
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError("docs.include / docs.exclude must be a list of glob patterns")
    return list(value)


@dataclass
class IngestScanStep(Step):
    """Descobre e lê o corpus de documentos."""

    id: str = "ingest.scan"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def run(self, ctx: RunContext) -> StepResult:
        root_value = get_path(ctx.config or {}, "docs.root")
        if not isinstance(root_value, str) or not root_value.strip():
            err = docs_root_not_found(root=root_value, step=self.id)
            return failed_result(step_id=self.id, kind=self.kind, error=err.to_dict())

        root = resolve_path(ctx, root_value)
        if not root.is_dir():
            err = docs_root_not_found(root=str(root), step=self.id)
            return failed_result(step_id=self.id, kind=self.kind, error=err.to_dict())

        try:
            include = _patterns(get_path(ctx.config, "docs.include"), DEFAULT_INCLUDE)
            exclude = _patterns(get_path(ctx.config, "docs.exclude"), DEFAULT_EXCLUDE)

            sources = [read_source(root, p) for p in discover_paths(root, include, exclude)]
            corpus_hash = compute_corpus_hash(sources)

            ctx.set_artifact(ARTIFACT_ROOT, root)
            ctx.set_artifact(ARTIFACT_SOURCES, sources)

            total_bytes = sum(s.size for s in sources)
            warnings: List[str] = []
            if not sources:
                warnings.append(f"no files matched {include} under {root}")
                ctx.add_warning(step_id=self.id, message=warnings[0])

            ctx.log(step_id=self.id, level="info", message="corpus scanned", files=len(sources), bytes=total_bytes)

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"{len(sources)} files scanned",
                metrics={"files": len(sources), "bytes": total_bytes},
                warnings=warnings,
                artifacts={},
                payload={
                    "root": str(root),
                    "include": include,
                    "exclude": exclude,
                    "corpus_hash": corpus_hash,
                    "files": [{"path": s.path, "sha256": s.sha256, "bytes": s.size} for s in sources],
                },
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)
