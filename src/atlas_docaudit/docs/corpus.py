"""
Corpus de documentos — descoberta e leitura determinística.

O corpus é o conjunto de arquivos fonte do site selecionados por padrões
glob (`docs.include` / `docs.exclude`) a partir de `docs.root`. Cada arquivo
é lido como bytes brutos: a decodificação é responsabilidade das auditorias
(um arquivo corrompido precisa chegar intacto a `audit.encoding`).
"""

from __future__ import annotations

import fnmatch
import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence

DEFAULT_INCLUDE = ["**/*.md"]
DEFAULT_EXCLUDE = ["_site/**", "node_modules/**", ".git/**"]


@dataclass(frozen=True)
class SourceDocument:
    """Arquivo fonte do corpus (bytes brutos + fingerprint)."""

    path: str
    raw: bytes
    sha256: str

    @property
    def size(self) -> int:
        return len(self.raw)


def _excluded(rel: str, patterns: Sequence[str]) -> bool:
    for pat in patterns:
        if fnmatch.fnmatch(rel, pat):
            return True
        # `**/x` também deve casar arquivos na raiz
        if pat.startswith("**/") and fnmatch.fnmatch(rel, pat[3:]):
            return True
    return False


def discover_paths(root: Path, include: Iterable[str], exclude: Iterable[str]) -> List[Path]:
    """Lista arquivos do corpus em ordem lexicográfica do caminho relativo."""
    exclude = list(exclude)
    found = {}
    for pat in include:
        for p in root.glob(pat):
            if not p.is_file():
                continue
            rel = p.relative_to(root).as_posix()
            if _excluded(rel, exclude):
                continue
            found[rel] = p
    return [found[k] for k in sorted(found)]


def read_source(root: Path, path: Path) -> SourceDocument:
    raw = path.read_bytes()
    return SourceDocument(
        path=path.relative_to(root).as_posix(),
        raw=raw,
        sha256=hashlib.sha256(raw).hexdigest(),
    )


def compute_corpus_hash(sources: Iterable[SourceDocument]) -> str:
    """SHA-256 sobre linhas `path:sha256` ordenadas por path."""
    lines = sorted(f"{s.path}:{s.sha256}" for s in sources)
    return hashlib.sha256("\n".join(lines).encode("utf-8")).hexdigest()
