"""
Atlas DocAudit — Findings canônicos (v1)

Um Finding é o resultado observacional de uma regra de auditoria sobre um
documento do site. Findings são dados (serializáveis, ordenáveis e
rastreáveis), nunca exceções: um Step que encontra defeitos no conteúdo
termina com SUCCESS e publica seus findings no RunContext.

Regras:
- `rule` é um código estável do catálogo abaixo (não é texto livre)
- `path` é sempre relativo à raiz da documentação, em formato POSIX
- `line` é 1-based, ou None quando o defeito é do arquivo como um todo
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# ---------------------------------------------------------------------------
# Catálogo canônico de regras (v1)
# ---------------------------------------------------------------------------

# Front-matter
FRONT_MATTER_MISSING = "FRONT_MATTER_MISSING"
FRONT_MATTER_UNTERMINATED = "FRONT_MATTER_UNTERMINATED"
FRONT_MATTER_INVALID_YAML = "FRONT_MATTER_INVALID_YAML"
FRONT_MATTER_NOT_MAPPING = "FRONT_MATTER_NOT_MAPPING"
FRONT_MATTER_REQUIRED_KEY = "FRONT_MATTER_REQUIRED_KEY"
FRONT_MATTER_UNKNOWN_KEY = "FRONT_MATTER_UNKNOWN_KEY"
FRONT_MATTER_INVALID_VALUE = "FRONT_MATTER_INVALID_VALUE"
PERMALINK_DUPLICATE = "PERMALINK_DUPLICATE"
REDIRECT_COLLISION = "REDIRECT_COLLISION"

# Links / âncoras
LINK_BROKEN_PAGE = "LINK_BROKEN_PAGE"
LINK_BROKEN_ANCHOR = "LINK_BROKEN_ANCHOR"
ANCHOR_DUPLICATE = "ANCHOR_DUPLICATE"

# Encoding
ENCODING_INVALID_UTF8 = "ENCODING_INVALID_UTF8"
ENCODING_BOM = "ENCODING_BOM"
ENCODING_REPLACEMENT_CHAR = "ENCODING_REPLACEMENT_CHAR"
ENCODING_MOJIBAKE = "ENCODING_MOJIBAKE"

# Diff markup publicado
DIFF_MARKERS = "DIFF_MARKERS"
DIFF_HUNK_HEADER = "DIFF_HUNK_HEADER"

# Diretivas de template
TEMPLATE_UNBALANCED = "TEMPLATE_UNBALANCED"
TEMPLATE_INCLUDE_MISSING = "TEMPLATE_INCLUDE_MISSING"
TEMPLATE_UNKNOWN_LANGUAGE = "TEMPLATE_UNKNOWN_LANGUAGE"

# Traduções
TRANSLATION_SOURCE_MISSING = "TRANSLATION_SOURCE_MISSING"
TRANSLATION_MISSING = "TRANSLATION_MISSING"
TRANSLATION_STRUCTURE_MISMATCH = "TRANSLATION_STRUCTURE_MISMATCH"


RULES: Dict[str, Dict[str, str]] = {
    FRONT_MATTER_MISSING: {"severity": "error", "description": "document has no front-matter block"},
    FRONT_MATTER_UNTERMINATED: {"severity": "error", "description": "front-matter block is never closed"},
    FRONT_MATTER_INVALID_YAML: {"severity": "error", "description": "front-matter is not valid YAML"},
    FRONT_MATTER_NOT_MAPPING: {"severity": "error", "description": "front-matter root is not a key/value mapping"},
    FRONT_MATTER_REQUIRED_KEY: {"severity": "error", "description": "required front-matter key is absent"},
    FRONT_MATTER_UNKNOWN_KEY: {"severity": "warning", "description": "front-matter key not declared by the site contract"},
    FRONT_MATTER_INVALID_VALUE: {"severity": "error", "description": "front-matter value has an invalid type or format"},
    PERMALINK_DUPLICATE: {"severity": "error", "description": "two documents publish the same permalink"},
    REDIRECT_COLLISION: {"severity": "error", "description": "redirect alias collides with another route"},
    LINK_BROKEN_PAGE: {"severity": "error", "description": "internal link target does not exist"},
    LINK_BROKEN_ANCHOR: {"severity": "error", "description": "link anchor does not exist in the target page"},
    ANCHOR_DUPLICATE: {"severity": "warning", "description": "explicit anchor id declared more than once"},
    ENCODING_INVALID_UTF8: {"severity": "error", "description": "file is not valid UTF-8"},
    ENCODING_BOM: {"severity": "warning", "description": "file starts with a UTF-8 byte order mark"},
    ENCODING_REPLACEMENT_CHAR: {"severity": "error", "description": "file contains U+FFFD replacement characters"},
    ENCODING_MOJIBAKE: {"severity": "error", "description": "text looks like UTF-8 decoded with a legacy code page"},
    DIFF_MARKERS: {"severity": "error", "description": "published content carries leading diff markers"},
    DIFF_HUNK_HEADER: {"severity": "error", "description": "published content carries diff hunk or file headers"},
    TEMPLATE_UNBALANCED: {"severity": "error", "description": "template block tags are not balanced"},
    TEMPLATE_INCLUDE_MISSING: {"severity": "error", "description": "included template file does not exist"},
    TEMPLATE_UNKNOWN_LANGUAGE: {"severity": "warning", "description": "per-language block names an undeclared language"},
    TRANSLATION_SOURCE_MISSING: {"severity": "error", "description": "source document of a translation pair is missing"},
    TRANSLATION_MISSING: {"severity": "error", "description": "translated document of a translation pair is missing"},
    TRANSLATION_STRUCTURE_MISMATCH: {"severity": "error", "description": "translation structure diverges from its source"},
}


def default_severity(rule: str) -> Severity:
    spec = RULES.get(rule)
    if spec is None:
        raise KeyError(f"unknown rule: {rule}")
    return Severity(spec["severity"])


@dataclass(frozen=True)
class Finding:
    """Defeito observado em um documento por uma regra de auditoria."""

    rule: str
    severity: Severity
    path: str
    message: str
    line: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "path": self.path,
            "line": self.line,
            "message": self.message,
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Finding":
        line = data.get("line")
        return cls(
            rule=str(data["rule"]),
            severity=Severity(data.get("severity", "error")),
            path=str(data.get("path", "")),
            message=str(data.get("message", "")),
            line=int(line) if line is not None else None,
            details=dict(data.get("details") or {}),
        )


def make_finding(
    rule: str,
    *,
    path: str,
    message: str,
    line: Optional[int] = None,
    severity: Optional[Severity] = None,
    **details: Any,
) -> Finding:
    """Cria um Finding com a severidade padrão do catálogo (quando não informada)."""
    return Finding(
        rule=rule,
        severity=severity or default_severity(rule),
        path=path,
        message=message,
        line=line,
        details=details,
    )


def sort_findings(findings: Iterable[Finding]) -> List[Finding]:
    """Ordenação determinística: (path, line, rule, message)."""
    return sorted(findings, key=lambda f: (f.path, f.line or 0, f.rule, f.message))


def count_by_severity(findings: Iterable[Finding]) -> Dict[str, int]:
    out = {s.value: 0 for s in Severity}
    for f in findings:
        out[f.severity.value] += 1
    return out
