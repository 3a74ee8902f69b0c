"""
Detecção de markup de diff publicado como conteúdo.

Dois sinais independentes:
    - marcadores `+` no início de linha em proporção alta (arquivo colado a
      partir de um patch)
    - cabeçalhos de hunk (`@@ -a,b +c,d @@`) e de arquivo (`+++ b/...`,
      `--- a/...`, `diff --git`)

Linhas dentro de blocos de código são ignoradas nos dois sinais: um
exemplo ```` ```diff ```` é conteúdo legítimo. Uma fence escrita como
`+```` ` não é fence, então um arquivo inteiramente prefixado é contado
por completo.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from .markdown import iter_lines_outside_code

HUNK_HEADER_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+\d+(?:,\d+)? @@")
FILE_HEADER_RE = re.compile(r"^(?:\+\+\+|---) (?:[ab]/|/dev/null)")
GIT_HEADER_RE = re.compile(r"^diff --git ")


@dataclass(frozen=True)
class PlusMarkerStats:
    lines: int
    plus_lines: int
    first_line: Optional[int]

    @property
    def ratio(self) -> float:
        if self.lines <= 0:
            return 0.0
        return self.plus_lines / self.lines


@dataclass(frozen=True)
class DiffHeader:
    line: int
    kind: str  # hunk | file | git
    text: str


def plus_marker_stats(text: str) -> PlusMarkerStats:
    lines = 0
    plus = 0
    first: Optional[int] = None
    for no, line in iter_lines_outside_code(text, 1):
        if not line.strip():
            continue
        lines += 1
        if line.startswith("+"):
            plus += 1
            if first is None:
                first = no
    return PlusMarkerStats(lines=lines, plus_lines=plus, first_line=first)


def find_diff_headers(text: str) -> List[DiffHeader]:
    out: List[DiffHeader] = []
    for no, line in iter_lines_outside_code(text, 1):
        if HUNK_HEADER_RE.match(line):
            out.append(DiffHeader(line=no, kind="hunk", text=line))
        elif GIT_HEADER_RE.match(line):
            out.append(DiffHeader(line=no, kind="git", text=line))
        elif FILE_HEADER_RE.match(line):
            out.append(DiffHeader(line=no, kind="file", text=line))
    return out
