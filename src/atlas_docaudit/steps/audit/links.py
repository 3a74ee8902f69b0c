"""Step canônico: audit.links (v1).

Responsabilidades:
- construir o SiteIndex (rotas públicas de cada documento)
- resolver cada link interno:
    página inexistente         → LINK_BROKEN_PAGE
    âncora ausente no destino  → LINK_BROKEN_ANCHOR
- ids explícitos repetidos em um documento → ANCHOR_DUPLICATE (warning)

Links externos são contados, nunca acessados. Alvos Liquid não resolvíveis
estaticamente (`ignored`) e assets existentes não geram findings.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, List

from atlas_docaudit.core.findings import (
    ANCHOR_DUPLICATE,
    LINK_BROKEN_ANCHOR,
    LINK_BROKEN_PAGE,
    Finding,
    make_finding,
)
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult
from atlas_docaudit.docs import site as site_kinds
from atlas_docaudit.docs.markdown import Document, extract_anchors, extract_links
from atlas_docaudit.docs.site import SiteIndex
from atlas_docaudit.steps.common import (
    ARTIFACT_DOCUMENTS,
    ARTIFACT_ROOT,
    effective_contract,
    exception_result,
    findings_result,
    require_artifact,
)


def _duplicate_anchor_findings(doc: Document) -> List[Finding]:
    declared = [a for a in extract_anchors(doc) if a.declared]
    counts = Counter(a.id for a in declared)
    out: List[Finding] = []
    reported = set()
    for a in declared:
        if counts[a.id] > 1 and a.id not in reported:
            reported.add(a.id)
            lines = [x.line for x in declared if x.id == a.id]
            out.append(
                make_finding(
                    ANCHOR_DUPLICATE,
                    path=doc.path,
                    line=lines[1],
                    message=f"anchor `#{a.id}` is declared {counts[a.id]} times",
                    anchor=a.id,
                    lines=lines,
                )
            )
    return out


@dataclass
class AuditLinksStep(Step):
    """Resolução de links internos e âncoras."""

    id: str = "audit.links"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["parse.front_matter", "contract.load"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            documents: List[Document] = require_artifact(ctx, ARTIFACT_DOCUMENTS, step_id=self.id)
            root = ctx.get_artifact(ARTIFACT_ROOT) if ctx.has_artifact(ARTIFACT_ROOT) else None
            index = SiteIndex.build(documents, effective_contract(ctx), root=root)

            findings: List[Finding] = []
            kinds: Dict[str, int] = defaultdict(int)
            total = 0

            for doc in documents:
                findings.extend(_duplicate_anchor_findings(doc))

                for link in extract_links(doc):
                    total += 1
                    res = index.resolve(doc.path, link.target)
                    kinds[res.kind] += 1

                    if res.kind == site_kinds.UNRESOLVED:
                        findings.append(
                            make_finding(
                                LINK_BROKEN_PAGE,
                                path=doc.path,
                                line=link.line,
                                message=f"link target `{link.target}` does not match any page or file",
                                target=link.target,
                                route=res.route,
                                link_kind=link.kind,
                            )
                        )
                        continue

                    if res.kind in (site_kinds.PAGE, site_kinds.ANCHOR_ONLY) and res.anchor:
                        target_doc = res.document or doc.path
                        if res.anchor not in index.anchors_for(target_doc):
                            findings.append(
                                make_finding(
                                    LINK_BROKEN_ANCHOR,
                                    path=doc.path,
                                    line=link.line,
                                    message=f"anchor `#{res.anchor}` not found in {target_doc}",
                                    target=link.target,
                                    anchor=res.anchor,
                                    target_document=target_doc,
                                )
                            )

            external = kinds.get(site_kinds.EXTERNAL, 0)
            ignored = kinds.get(site_kinds.IGNORED, 0)
            return findings_result(
                ctx,
                step_id=self.id,
                kind=self.kind,
                findings=findings,
                summary=f"{total} links checked",
                metrics={
                    "links": total,
                    "external_links": external,
                    "internal_links": total - external - ignored,
                    "ignored_links": ignored,
                    "routes": len(index.routes),
                },
                payload={"resolution": dict(sorted(kinds.items()))},
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)
