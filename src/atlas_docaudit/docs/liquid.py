"""
Diretivas de template (Liquid) embutidas nos documentos.

Liquid é processado antes do markdown, então as tags valem também dentro
de blocos de código; apenas regiões `raw` e `comment` são literais.

Extrai:
    - problemas de balanceamento de tags de bloco (`if` ... `endif`)
    - includes (`{% include x %}`, `{% include_relative x %}`)
    - marcadores de linguagem (`{:.language-java}`, `class="language-py"`)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .markdown import iter_lines_outside_code, strip_code_spans

TAG_RE = re.compile(r"\{%-?\s*(\w+)(.*?)-?%\}", re.S)
BLOCK_TAGS = ("if", "unless", "case", "for", "capture", "highlight", "raw", "comment", "tablerow")
LITERAL_TAGS = ("raw", "comment")
INCLUDE_TAGS = ("include", "include_relative")

_IAL_LANG_RE = re.compile(r"\{:\s*\.language-([\w+#-]+)[^}]*\}")
_CLASS_LANG_RE = re.compile(r"""class\s*=\s*["'][^"']*?\blanguage-([\w+#-]+)""")


@dataclass(frozen=True)
class TagIssue:
    kind: str  # unclosed | unexpected_end | mismatched
    tag: str
    line: int
    expected: Optional[str] = None


@dataclass(frozen=True)
class Include:
    tag: str
    file: str
    line: int


@dataclass(frozen=True)
class LanguageMarker:
    language: str
    line: int


def _line_at(text: str, pos: int, start_line: int) -> int:
    return start_line + text.count("\n", 0, pos)


def iter_tags(text: str, start_line: int = 1):
    """Gera `(name, args, line)` ignorando o conteúdo de `raw` e `comment`."""
    literal: Optional[str] = None
    for m in TAG_RE.finditer(text):
        name = m.group(1)
        if literal is not None:
            if name == "end" + literal:
                literal = None
                yield name, m.group(2).strip(), _line_at(text, m.start(), start_line)
            continue
        if name in LITERAL_TAGS:
            literal = name
        yield name, m.group(2).strip(), _line_at(text, m.start(), start_line)


def check_tag_balance(text: str, start_line: int = 1) -> List[TagIssue]:
    issues: List[TagIssue] = []
    stack: List[Tuple[str, int]] = []

    for name, _args, line in iter_tags(text, start_line):
        if name in BLOCK_TAGS:
            stack.append((name, line))
            continue
        if not (name.startswith("end") and name[3:] in BLOCK_TAGS):
            continue

        opened = name[3:]
        if stack and stack[-1][0] == opened:
            stack.pop()
        elif any(tag == opened for tag, _ in stack):
            # fecha o bloco mais próximo; os intermediários ficaram abertos
            while stack and stack[-1][0] != opened:
                tag, open_line = stack.pop()
                issues.append(TagIssue(kind="mismatched", tag=tag, line=open_line, expected="end" + tag))
            stack.pop()
        else:
            issues.append(TagIssue(kind="unexpected_end", tag=name, line=line))

    for tag, open_line in stack:
        issues.append(TagIssue(kind="unclosed", tag=tag, line=open_line, expected="end" + tag))

    return sorted(issues, key=lambda i: (i.line, i.tag))


def extract_includes(text: str, start_line: int = 1) -> List[Include]:
    """Includes com nome de arquivo literal (argumentos Liquid são ignorados)."""
    out: List[Include] = []
    for name, args, line in iter_tags(text, start_line):
        if name not in INCLUDE_TAGS or not args:
            continue
        file = args.split()[0].strip("\"'")
        if not file or "{{" in file:
            continue
        out.append(Include(tag=name, file=file, line=line))
    return out


def extract_language_markers(body: str, start_line: int = 1) -> List[LanguageMarker]:
    out: List[LanguageMarker] = []
    for no, line in iter_lines_outside_code(body, start_line):
        clean = strip_code_spans(line)
        for rx in (_IAL_LANG_RE, _CLASS_LANG_RE):
            for m in rx.finditer(clean):
                out.append(LanguageMarker(language=m.group(1), line=no))
    return sorted(out, key=lambda mk: (mk.line, mk.language))
