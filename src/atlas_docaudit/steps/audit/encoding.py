"""Step canônico: audit.encoding (v1).

Responsabilidades:
- validar cada arquivo fonte como UTF-8 estrito
- sinalizar BOM, caracteres U+FFFD e mojibake (UTF-8 lido como cp1252/latin-1)

Princípios:
- OBSERVAR sem mutar: nenhum arquivo é reescrito
- o texto recuperado de mojibake é apenas sugestão no payload

Config (`steps.audit.encoding`):
    max_samples: int (default 5)   linhas de exemplo por arquivo
    max_invalid: int (default 20)  sequências inválidas listadas por arquivo
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from atlas_docaudit.core.findings import (
    ENCODING_BOM,
    ENCODING_INVALID_UTF8,
    ENCODING_MOJIBAKE,
    ENCODING_REPLACEMENT_CHAR,
    Finding,
    make_finding,
)
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult
from atlas_docaudit.docs.encoding import (
    detect_mojibake,
    find_invalid_utf8,
    has_bom,
    replacement_char_lines,
)
from atlas_docaudit.steps.common import (
    ARTIFACT_SOURCES,
    exception_result,
    findings_result,
    get_step_cfg,
    require_artifact,
)


@dataclass
class AuditEncodingStep(Step):
    """Diagnóstico de encoding por arquivo."""

    id: str = "audit.encoding"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ingest.scan"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            sources = require_artifact(ctx, ARTIFACT_SOURCES, step_id=self.id)
            cfg = get_step_cfg(ctx, self.id)
            max_samples = int(cfg.get("max_samples", 5))
            max_invalid = int(cfg.get("max_invalid", 20))

            findings: List[Finding] = []
            invalid_files = 0
            mojibake_files = 0

            for src in sources:
                if has_bom(src.raw):
                    findings.append(
                        make_finding(ENCODING_BOM, path=src.path, line=1, message="file starts with a UTF-8 BOM")
                    )

                invalid = find_invalid_utf8(src.raw, limit=max_invalid)
                if invalid:
                    invalid_files += 1
                    first = invalid[0]
                    findings.append(
                        make_finding(
                            ENCODING_INVALID_UTF8,
                            path=src.path,
                            line=first.line,
                            message=f"invalid UTF-8 byte sequence at offset {first.offset}",
                            sequences=[
                                {"offset": s.offset, "line": s.line, "bytes": s.bytes_hex} for s in invalid
                            ],
                            truncated=len(invalid) >= max_invalid,
                        )
                    )

                # bytes inválidos viram surrogates (não U+FFFD) para que só
                # U+FFFD presentes no arquivo sejam reportados
                fffd = replacement_char_lines(src.raw.decode("utf-8", errors="surrogateescape"))
                if fffd:
                    findings.append(
                        make_finding(
                            ENCODING_REPLACEMENT_CHAR,
                            path=src.path,
                            line=fffd[0],
                            message=f"U+FFFD replacement character on {len(fffd)} line(s)",
                            lines=fffd[:max_samples],
                        )
                    )

                report = detect_mojibake(src.raw.decode("utf-8", errors="replace"), max_samples=max_samples)
                if report.detected:
                    mojibake_files += 1
                    findings.append(
                        make_finding(
                            ENCODING_MOJIBAKE,
                            path=src.path,
                            line=report.samples[0].line,
                            message=(
                                f"{report.sequences} mojibake sequence(s) on {report.lines} line(s); "
                                "text looks like UTF-8 decoded as cp1252/latin-1"
                            ),
                            affected_lines=report.lines,
                            samples=[
                                {"line": s.line, "text": s.text, "recovered": s.recovered}
                                for s in report.samples
                            ],
                        )
                    )

            return findings_result(
                ctx,
                step_id=self.id,
                kind=self.kind,
                findings=findings,
                summary=f"encoding checked on {len(sources)} files",
                metrics={
                    "files": len(sources),
                    "invalid_utf8_files": invalid_files,
                    "mojibake_files": mojibake_files,
                },
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)
