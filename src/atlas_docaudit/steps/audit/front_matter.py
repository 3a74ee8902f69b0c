"""Step canônico: audit.front_matter (v1).

Regras dirigidas pelo contrato do site:
- chaves obrigatórias presentes (FRONT_MATTER_REQUIRED_KEY)
- chaves fora de required ∪ optional (FRONT_MATTER_UNKNOWN_KEY, warning)
- tipos e formatos (FRONT_MATTER_INVALID_VALUE):
    title         → string não vazia
    permalink     → string iniciada por `/` (e aderente a permalink_pattern)
    layout        → string (e em `layouts`, quando declarado)
    redirect_from → string ou lista de strings
- permalink publicado por mais de um documento (PERMALINK_DUPLICATE)
- alias de redirect colidindo com outra rota (REDIRECT_COLLISION)

Documentos sem front-matter utilizável já foram reportados por
`parse.front_matter` e não são reavaliados aqui.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from atlas_docaudit.core.findings import (
    FRONT_MATTER_INVALID_VALUE,
    FRONT_MATTER_REQUIRED_KEY,
    FRONT_MATTER_UNKNOWN_KEY,
    PERMALINK_DUPLICATE,
    REDIRECT_COLLISION,
    Finding,
    make_finding,
)
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult
from atlas_docaudit.docs.markdown import Document
from atlas_docaudit.docs.site import normalize_route, redirect_aliases
from atlas_docaudit.steps.common import (
    ARTIFACT_DOCUMENTS,
    effective_contract,
    exception_result,
    findings_result,
    require_artifact,
)


def _value_error(doc: Document, key: str, message: str, value: Any) -> Finding:
    return make_finding(
        FRONT_MATTER_INVALID_VALUE,
        path=doc.path,
        line=2,
        message=f"`{key}`: {message}",
        key=key,
        value=repr(value)[:80],
    )


def _check_values(doc: Document, fm: Dict[str, Any], rules: Dict[str, Any]) -> List[Finding]:
    out: List[Finding] = []

    if "title" in fm:
        title = fm["title"]
        if not isinstance(title, str) or not title.strip():
            out.append(_value_error(doc, "title", "must be a non-empty string", title))

    if "permalink" in fm:
        permalink = fm["permalink"]
        if not isinstance(permalink, str) or not permalink.startswith("/"):
            out.append(_value_error(doc, "permalink", "must be a string starting with `/`", permalink))
        elif rules.get("permalink_pattern") and not re.search(rules["permalink_pattern"], permalink):
            out.append(
                _value_error(doc, "permalink", f"does not match pattern {rules['permalink_pattern']!r}", permalink)
            )

    if "layout" in fm:
        layout = fm["layout"]
        layouts = rules.get("layouts") or []
        if not isinstance(layout, str) or not layout.strip():
            out.append(_value_error(doc, "layout", "must be a non-empty string", layout))
        elif layouts and layout not in layouts:
            out.append(_value_error(doc, "layout", f"must be one of {layouts}", layout))

    if "redirect_from" in fm:
        value = fm["redirect_from"]
        ok = isinstance(value, str) or (isinstance(value, list) and all(isinstance(v, str) for v in value))
        if not ok:
            out.append(_value_error(doc, "redirect_from", "must be a string or a list of strings", value))

    return out


@dataclass
class AuditFrontMatterStep(Step):
    """Conformidade do front-matter com o contrato do site."""

    id: str = "audit.front_matter"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["parse.front_matter", "contract.load"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            documents: List[Document] = require_artifact(ctx, ARTIFACT_DOCUMENTS, step_id=self.id)
            rules = effective_contract(ctx)["front_matter"]
            required = list(rules.get("required") or [])
            known = set(required) | set(rules.get("optional") or [])

            findings: List[Finding] = []
            permalinks: Dict[str, List[str]] = defaultdict(list)
            aliases: List[Tuple[str, str, str]] = []  # (route, alias, path)
            audited = 0

            for doc in documents:
                if not doc.front_matter_usable:
                    continue
                fm = doc.front_matter or {}
                audited += 1

                for key in required:
                    if key not in fm:
                        findings.append(
                            make_finding(
                                FRONT_MATTER_REQUIRED_KEY,
                                path=doc.path,
                                line=1,
                                message=f"required key `{key}` is missing",
                                key=key,
                            )
                        )
                for key in sorted(str(k) for k in fm):
                    if key not in known:
                        findings.append(
                            make_finding(
                                FRONT_MATTER_UNKNOWN_KEY,
                                path=doc.path,
                                line=2,
                                message=f"key `{key}` is not declared by the site contract",
                                key=key,
                            )
                        )

                findings.extend(_check_values(doc, fm, rules))

                permalink = fm.get("permalink")
                if isinstance(permalink, str) and permalink.startswith("/"):
                    permalinks[normalize_route(permalink)].append(doc.path)
                for alias in redirect_aliases(fm):
                    aliases.append((normalize_route(alias), alias, doc.path))

            for route in sorted(permalinks):
                paths = sorted(permalinks[route])
                if len(paths) < 2:
                    continue
                for path in paths:
                    others = [p for p in paths if p != path]
                    findings.append(
                        make_finding(
                            PERMALINK_DUPLICATE,
                            path=path,
                            line=2,
                            message=f"permalink {route} is also published by {', '.join(others)}",
                            route=route,
                            documents=paths,
                        )
                    )

            seen_alias: Dict[str, str] = {}
            for route, alias, path in sorted(aliases):
                owner: Optional[str] = None
                if route in permalinks and path not in permalinks[route]:
                    owner = permalinks[route][0]
                    reason = "permalink"
                elif route in seen_alias and seen_alias[route] != path:
                    owner = seen_alias[route]
                    reason = "redirect alias"
                if owner is not None:
                    findings.append(
                        make_finding(
                            REDIRECT_COLLISION,
                            path=path,
                            line=2,
                            message=f"redirect alias {alias} collides with the {reason} of {owner}",
                            alias=alias,
                            collides_with=owner,
                        )
                    )
                seen_alias.setdefault(route, path)

            return findings_result(
                ctx,
                step_id=self.id,
                kind=self.kind,
                findings=findings,
                summary=f"front-matter audited on {audited} documents",
                metrics={"documents": audited, "permalinks": len(permalinks)},
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)
