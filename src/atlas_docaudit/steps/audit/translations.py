"""Step canônico: audit.translations (v1).

Para cada par `translations[*]` do contrato:
- fonte ausente       → TRANSLATION_SOURCE_MISSING
- tradução ausente    → TRANSLATION_MISSING
- estrutura divergente → TRANSLATION_STRUCTURE_MISMATCH

A impressão estrutural compara headings por nível, blocos de código e o
conjunto de chaves do front-matter. O texto em si não é comparado (a
tradução muda a prosa, não a estrutura). O finding carrega o diff por
dimensão.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from atlas_docaudit.core.findings import (
    TRANSLATION_MISSING,
    TRANSLATION_SOURCE_MISSING,
    TRANSLATION_STRUCTURE_MISMATCH,
    Finding,
    make_finding,
)
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult
from atlas_docaudit.docs.markdown import Document, structure_fingerprint
from atlas_docaudit.steps.common import (
    ARTIFACT_DOCUMENTS,
    effective_contract,
    exception_result,
    findings_result,
    require_artifact,
)


def structure_diff(source: Dict[str, Any], translation: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Diferenças entre duas impressões estruturais, por dimensão."""
    diff: List[Dict[str, Any]] = []
    for level in sorted(source["headings"]):
        s, t = source["headings"][level], translation["headings"].get(level, 0)
        if s != t:
            diff.append({"dimension": f"headings.{level}", "source": s, "translation": t})

    if source["code_blocks"] != translation["code_blocks"]:
        diff.append(
            {"dimension": "code_blocks", "source": source["code_blocks"], "translation": translation["code_blocks"]}
        )

    s_keys, t_keys = set(source["front_matter_keys"]), set(translation["front_matter_keys"])
    if s_keys != t_keys:
        diff.append(
            {
                "dimension": "front_matter_keys",
                "missing": sorted(s_keys - t_keys),
                "extra": sorted(t_keys - s_keys),
            }
        )
    return diff


@dataclass
class AuditTranslationsStep(Step):
    """Paridade estrutural entre fonte e tradução."""

    id: str = "audit.translations"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["parse.front_matter", "contract.load"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            documents: List[Document] = require_artifact(ctx, ARTIFACT_DOCUMENTS, step_id=self.id)
            pairs = effective_contract(ctx).get("translations") or []
            by_path = {d.path: d for d in documents}

            findings: List[Finding] = []
            compared = 0

            for pair in pairs:
                src_path, dst_path = pair["source"], pair["translation"]
                src, dst = by_path.get(src_path), by_path.get(dst_path)

                if src is None:
                    findings.append(
                        make_finding(
                            TRANSLATION_SOURCE_MISSING,
                            path=src_path,
                            message=f"source document of translation {dst_path} is not in the corpus",
                            translation=dst_path,
                        )
                    )
                if dst is None:
                    findings.append(
                        make_finding(
                            TRANSLATION_MISSING,
                            path=dst_path,
                            message=f"translation of {src_path} is not in the corpus",
                            source=src_path,
                        )
                    )
                if src is None or dst is None:
                    continue

                compared += 1
                s_fp, t_fp = structure_fingerprint(src), structure_fingerprint(dst)
                diff = structure_diff(s_fp, t_fp)
                if diff:
                    dims = ", ".join(d["dimension"] for d in diff)
                    findings.append(
                        make_finding(
                            TRANSLATION_STRUCTURE_MISMATCH,
                            path=dst_path,
                            message=f"structure differs from {src_path} ({dims})",
                            source=src_path,
                            diff=diff,
                        )
                    )

            return findings_result(
                ctx,
                step_id=self.id,
                kind=self.kind,
                findings=findings,
                summary=f"{compared}/{len(pairs)} translation pairs compared",
                metrics={"pairs": len(pairs), "compared": compared},
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)
