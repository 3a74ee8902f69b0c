"""
Índice do site — rotas públicas e resolução de links internos.

Cada documento publica um conjunto de rotas:
    - o próprio caminho relativo (com e sem `.md`)
    - o `permalink` do front-matter
    - cada alias de `redirect_from` (string ou lista)

Rotas são normalizadas (`/` inicial, sem `/` final, `index.html` /
`index.md` colapsados) para que `/a/b/`, `/a/b`, `/a/b/index.html` e
`a/b.md` sejam equivalentes.

Limites explícitos:
    - Não acessa rede (links externos são apenas classificados)
    - Não avalia Liquid: alvos que continuam com `{{`/`{%` após remover os
      tokens de baseurl são `ignored`
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set
from urllib.parse import unquote, urljoin

from .markdown import Document, extract_anchors

DEFAULT_BASEURL_TOKENS = ["{{ site.baseurl }}", "{{site.baseurl}}"]

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_INDEX_NAMES = ("index.html", "index.md", "index")
_PAGE_EXTS = (".html", ".md")

EXTERNAL = "external"
PAGE = "page"
ANCHOR_ONLY = "anchor_only"
ASSET = "asset"
UNRESOLVED = "unresolved"
IGNORED = "ignored"


def normalize_route(path: str) -> str:
    """Forma canônica de uma rota pública (sem query/fragmento)."""
    p = path.split("#", 1)[0].split("?", 1)[0].strip()
    if not p.startswith("/"):
        p = "/" + p
    p = re.sub(r"/+", "/", p)
    for name in _INDEX_NAMES:
        if p.endswith("/" + name):
            p = p[: -len(name)]
            break
    for ext in _PAGE_EXTS:
        if p.endswith(ext):
            p = p[: -len(ext)]
            break
    return p.rstrip("/") or "/"


def redirect_aliases(front_matter: Dict) -> List[str]:
    value = (front_matter or {}).get("redirect_from")
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


@dataclass(frozen=True)
class Resolution:
    kind: str
    document: Optional[str] = None
    anchor: Optional[str] = None
    route: Optional[str] = None


class SiteIndex:
    """Mapa rota → documento e documento → âncoras."""

    def __init__(
        self,
        *,
        documents: Sequence[Document],
        baseurl_tokens: Optional[Iterable[str]] = None,
        root: Optional[Path] = None,
    ):
        self.root = Path(root) if root is not None else None
        self.baseurl_tokens = list(baseurl_tokens if baseurl_tokens is not None else DEFAULT_BASEURL_TOKENS)
        self.documents: Dict[str, Document] = {d.path: d for d in documents}
        self.routes: Dict[str, str] = {}
        self.page_urls: Dict[str, str] = {}
        self._anchors: Dict[str, Set[str]] = {}

        # primeiro documento (ordem lexicográfica) vence colisões de rota
        for path in sorted(self.documents):
            doc = self.documents[path]
            for route in self.routes_for(doc):
                self.routes.setdefault(route, path)
            permalink = (doc.front_matter or {}).get("permalink")
            self.page_urls[path] = permalink if isinstance(permalink, str) and permalink else "/" + path

    @classmethod
    def build(cls, documents: Sequence[Document], contract: Optional[Dict] = None, *, root: Optional[Path] = None) -> "SiteIndex":
        site = (contract or {}).get("site") or {}
        return cls(documents=documents, baseurl_tokens=site.get("baseurl_tokens"), root=root)

    @staticmethod
    def routes_for(doc: Document) -> List[str]:
        routes = [normalize_route(doc.path)]
        permalink = (doc.front_matter or {}).get("permalink")
        if isinstance(permalink, str) and permalink:
            routes.append(normalize_route(permalink))
        routes.extend(normalize_route(a) for a in redirect_aliases(doc.front_matter))
        out: List[str] = []
        for r in routes:
            if r not in out:
                out.append(r)
        return out

    def anchors_for(self, path: str) -> Set[str]:
        if path not in self._anchors:
            doc = self.documents.get(path)
            self._anchors[path] = {a.id for a in extract_anchors(doc)} if doc is not None else set()
        return self._anchors[path]

    def strip_baseurl(self, target: str) -> str:
        for token in self.baseurl_tokens:
            target = target.replace(token, "")
        return target

    def _asset_exists(self, url_path: str) -> bool:
        if self.root is None:
            return False
        rel = posixpath.normpath(url_path.lstrip("/"))
        if rel in ("", ".") or rel.startswith(".."):
            return False
        return (self.root / rel).is_file()

    def resolve(self, source_path: str, target: str) -> Resolution:
        """Classifica e resolve um alvo de link a partir de `source_path`."""
        t = self.strip_baseurl(target.strip())
        if "{{" in t or "{%" in t:
            return Resolution(kind=IGNORED)
        if t.startswith("//") or _SCHEME_RE.match(t):
            return Resolution(kind=EXTERNAL)

        path, _, anchor = t.partition("#")
        path = unquote(path.split("?", 1)[0])
        anchor_value = unquote(anchor) or None

        if not path:
            return Resolution(kind=ANCHOR_ONLY, document=source_path, anchor=anchor_value)

        if path.startswith("/"):
            candidates = [path]
        else:
            candidates = [urljoin("/" + source_path, path)]
            page_url = self.page_urls.get(source_path)
            if page_url:
                via_url = urljoin(page_url if page_url.startswith("/") else "/" + page_url, path)
                if via_url not in candidates:
                    candidates.append(via_url)

        for c in candidates:
            route = normalize_route(c)
            if route in self.routes:
                return Resolution(kind=PAGE, document=self.routes[route], anchor=anchor_value, route=route)
        for c in candidates:
            if self._asset_exists(c):
                return Resolution(kind=ASSET, route=c)

        return Resolution(kind=UNRESOLVED, anchor=anchor_value, route=normalize_route(candidates[0]))
