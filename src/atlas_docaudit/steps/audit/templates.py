"""Step canônico: audit.templates (v1).

Diretivas Liquid embutidas no corpo dos documentos:
- TEMPLATE_UNBALANCED: tag de bloco sem fechamento, `end*` sem abertura ou
  fechamento fora de ordem
- TEMPLATE_INCLUDE_MISSING: `{% include x %}` inexistente em
  `templates.includes_dir`; `{% include_relative x %}` resolvido a partir
  do diretório do documento
- TEMPLATE_UNKNOWN_LANGUAGE (warning): marcador `.language-xx` cuja
  linguagem não está em `templates.languages` (verificação desligada
  quando o contrato não declara linguagens)

Limites explícitos (v1):
- NÃO avalia expressões Liquid
- includes com nome dinâmico (`{{ ... }}`) são ignorados
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import List

from atlas_docaudit.core.findings import (
    TEMPLATE_INCLUDE_MISSING,
    TEMPLATE_UNBALANCED,
    TEMPLATE_UNKNOWN_LANGUAGE,
    Finding,
    make_finding,
)
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult
from atlas_docaudit.docs.liquid import check_tag_balance, extract_includes, extract_language_markers
from atlas_docaudit.docs.markdown import Document
from atlas_docaudit.steps.common import (
    ARTIFACT_DOCUMENTS,
    ARTIFACT_ROOT,
    effective_contract,
    exception_result,
    findings_result,
    require_artifact,
)

_ISSUE_MESSAGES = {
    "unclosed": "`{% {tag} %}` is never closed",
    "mismatched": "`{% {tag} %}` is closed out of order",
    "unexpected_end": "`{% {tag} %}` has no matching opening tag",
}


def _include_path(root: Path, includes_dir: str, doc: Document, tag: str, file: str) -> Path:
    if tag == "include_relative":
        return root / posixpath.normpath(posixpath.join(posixpath.dirname(doc.path), file))
    return root / includes_dir / file


@dataclass
class AuditTemplatesStep(Step):
    """Balanceamento de tags, includes e marcadores de linguagem."""

    id: str = "audit.templates"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["parse.front_matter", "contract.load"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            documents: List[Document] = require_artifact(ctx, ARTIFACT_DOCUMENTS, step_id=self.id)
            root: Path = require_artifact(ctx, ARTIFACT_ROOT, step_id=self.id)
            templates = effective_contract(ctx)["templates"]
            includes_dir = templates.get("includes_dir") or "_includes"
            languages = set(templates.get("languages") or [])

            findings: List[Finding] = []
            includes_checked = 0
            markers_checked = 0

            for doc in documents:
                for issue in check_tag_balance(doc.body, doc.body_line):
                    findings.append(
                        make_finding(
                            TEMPLATE_UNBALANCED,
                            path=doc.path,
                            line=issue.line,
                            message=_ISSUE_MESSAGES[issue.kind].replace("{tag}", issue.tag),
                            tag=issue.tag,
                            issue=issue.kind,
                            expected=issue.expected,
                        )
                    )

                for inc in extract_includes(doc.body, doc.body_line):
                    includes_checked += 1
                    target = _include_path(root, includes_dir, doc, inc.tag, inc.file)
                    if not target.is_file():
                        findings.append(
                            make_finding(
                                TEMPLATE_INCLUDE_MISSING,
                                path=doc.path,
                                line=inc.line,
                                message=f"{inc.tag} `{inc.file}` not found",
                                include=inc.file,
                                tag=inc.tag,
                            )
                        )

                if not languages:
                    continue
                for marker in extract_language_markers(doc.body, doc.body_line):
                    markers_checked += 1
                    if marker.language not in languages:
                        findings.append(
                            make_finding(
                                TEMPLATE_UNKNOWN_LANGUAGE,
                                path=doc.path,
                                line=marker.line,
                                message=f"language `{marker.language}` is not declared in templates.languages",
                                language=marker.language,
                            )
                        )

            return findings_result(
                ctx,
                step_id=self.id,
                kind=self.kind,
                findings=findings,
                summary=f"templates audited on {len(documents)} documents",
                metrics={
                    "documents": len(documents),
                    "includes": includes_checked,
                    "language_markers": markers_checked,
                },
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)
