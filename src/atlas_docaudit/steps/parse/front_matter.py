"""Step canônico: parse.front_matter (v1).

Responsabilidades:
- decodificar cada arquivo fonte como UTF-8 (com substituição, para que as
  auditorias seguintes ainda rodem sobre arquivos corrompidos)
- separar e interpretar o bloco de front-matter (`yaml.safe_load`)
- publicar `docs.documents` (lista ordenada de Document)

Findings:
- FRONT_MATTER_MISSING, FRONT_MATTER_UNTERMINATED,
  FRONT_MATTER_INVALID_YAML, FRONT_MATTER_NOT_MAPPING

Limites explícitos (v1):
- NÃO valida chaves ou valores (ver `audit.front_matter`)
- Documentos com front-matter inválido seguem publicados com `{}`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from atlas_docaudit.core.findings import (
    FRONT_MATTER_INVALID_YAML,
    FRONT_MATTER_MISSING,
    FRONT_MATTER_NOT_MAPPING,
    FRONT_MATTER_UNTERMINATED,
    Finding,
    make_finding,
)
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult
from atlas_docaudit.docs.markdown import (
    FRONT_MATTER_MISSING as STATUS_MISSING,
    FRONT_MATTER_UNTERMINATED as STATUS_UNTERMINATED,
    Document,
    FrontMatterNotMappingError,
    FrontMatterParseError,
    parse_front_matter,
    split_front_matter,
)
from atlas_docaudit.steps.common import (
    ARTIFACT_DOCUMENTS,
    ARTIFACT_SOURCES,
    exception_result,
    findings_result,
    require_artifact,
)


@dataclass
class ParseFrontMatterStep(Step):
    """Separa front-matter e corpo de cada documento."""

    id: str = "parse.front_matter"
    kind: StepKind = StepKind.TRANSFORM
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ingest.scan", "audit.encoding"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            sources = require_artifact(ctx, ARTIFACT_SOURCES, step_id=self.id)

            documents: List[Document] = []
            findings: List[Finding] = []

            for src in sources:
                text = src.raw.decode("utf-8", errors="replace")
                block = split_front_matter(text)

                fm = {}
                fm_error = None
                if block.status == STATUS_MISSING:
                    findings.append(
                        make_finding(
                            FRONT_MATTER_MISSING,
                            path=src.path,
                            line=1,
                            message="document does not start with a `---` front-matter block",
                        )
                    )
                elif block.status == STATUS_UNTERMINATED:
                    findings.append(
                        make_finding(
                            FRONT_MATTER_UNTERMINATED,
                            path=src.path,
                            line=1,
                            message="front-matter block opened with `---` is never closed",
                        )
                    )
                else:
                    try:
                        fm = parse_front_matter(block)
                    except FrontMatterParseError as e:
                        fm_error = FRONT_MATTER_INVALID_YAML
                        findings.append(
                            make_finding(FRONT_MATTER_INVALID_YAML, path=src.path, line=e.line, message=str(e))
                        )
                    except FrontMatterNotMappingError as e:
                        fm_error = FRONT_MATTER_NOT_MAPPING
                        findings.append(
                            make_finding(FRONT_MATTER_NOT_MAPPING, path=src.path, line=e.line, message=str(e))
                        )

                documents.append(
                    Document(
                        path=src.path,
                        text=text,
                        front_matter=fm,
                        front_matter_status=block.status,
                        body=block.body,
                        body_line=block.body_line,
                        front_matter_error=fm_error,
                    )
                )

            ctx.set_artifact(ARTIFACT_DOCUMENTS, documents)

            with_fm = sum(1 for d in documents if d.front_matter)
            return findings_result(
                ctx,
                step_id=self.id,
                kind=self.kind,
                findings=findings,
                summary=f"{len(documents)} documents parsed",
                metrics={"documents": len(documents), "with_front_matter": with_fm},
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)
