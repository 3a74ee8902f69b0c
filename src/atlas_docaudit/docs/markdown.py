"""
Modelo de documento e parsing de markdown (subset kramdown/Jekyll).

Este módulo NÃO renderiza markdown. Ele extrai apenas o necessário para
as auditorias:
    - bloco de front-matter (`---` ... `---` / `...`)
    - linhas fora de blocos de código (fences e regiões Liquid literais)
    - headings e ids gerados (compatíveis com kramdown)
    - âncoras explícitas (`{#id}`, `{: #id}`, `id=` / `name=` em HTML)
    - links (inline, imagem, definição de referência, `href=` em HTML)

Decisões:
    - Números de linha são sempre 1-based e relativos ao arquivo completo
    - Erros de front-matter são exceções tipadas; quem as converte em
      findings é o Step `parse.front_matter`
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml

FRONT_MATTER_PRESENT = "present"
FRONT_MATTER_MISSING = "missing"
FRONT_MATTER_UNTERMINATED = "unterminated"

_FM_OPEN = "---"
_FM_CLOSE = ("---", "...")

_FENCE_OPEN_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
_LIQUID_CODE_OPEN_RE = re.compile(r"\{%-?\s*(highlight|raw|comment)\b[^%]*-?%\}")
_ATX_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_ATX_CLOSING_RE = re.compile(r"[ \t]+#+$")
_SETEXT_RE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_EXPLICIT_ID_RE = re.compile(r"\s*\{#([A-Za-z][\w:.-]*)\}\s*$")
_IAL_ID_RE = re.compile(r"\{:[^}]*?#([A-Za-z][\w:.-]*)[^}]*\}")
_HTML_TAG_OPEN_RE = re.compile(r"<([A-Za-z][\w-]*)(\s[^<>]*)>")
_HTML_ID_ATTR_RE = re.compile(r"""(?<![\w:-])(id|name)\s*=\s*["']([^"'{}]+)["']""")
_CODE_SPAN_RE = re.compile(r"(`+)(.+?)\1")

_LINK_TARGET = r"(?:\{\{[^}]*\}\}|[^)\s<>])+"
_INLINE_LINK_RE = re.compile(
    r"(!?)\[(?:[^\[\]]|\[[^\]]*\])*\]\(\s*<?(" + _LINK_TARGET + r")>?(?:\s+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?\s*\)"
)
_REF_DEF_RE = re.compile(r"^ {0,3}\[([^\]^][^\]]*)\]:\s*<?(\S+?)>?(?:\s+.*)?$")
_HREF_RE = re.compile(r"""\bhref\s*=\s*["']([^"']+)["']""")

_LIQUID_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}")
_HTML_TAG_RE = re.compile(r"<[^>]+>")
_MD_LINK_TEXT_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")


class FrontMatterError(ValueError):
    """Front-matter presente mas inutilizável."""

    def __init__(self, message: str, *, line: Optional[int] = None):
        super().__init__(message)
        self.line = line


class FrontMatterParseError(FrontMatterError):
    """YAML inválido dentro do bloco de front-matter."""


class FrontMatterNotMappingError(FrontMatterError):
    """Raiz do front-matter não é um mapeamento chave/valor."""


@dataclass(frozen=True)
class FrontMatterBlock:
    status: str
    raw: str
    body: str
    body_line: int


@dataclass(frozen=True)
class Document:
    """Documento decodificado com front-matter já separado do corpo."""

    path: str
    text: str
    front_matter: Dict[str, Any] = field(default_factory=dict)
    front_matter_status: str = FRONT_MATTER_PRESENT
    body: str = ""
    body_line: int = 1
    front_matter_error: Optional[str] = None

    @property
    def front_matter_usable(self) -> bool:
        return self.front_matter_status == FRONT_MATTER_PRESENT and self.front_matter_error is None


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    id: str
    line: int
    explicit: bool = False


@dataclass(frozen=True)
class Anchor:
    id: str
    line: int
    source: str  # heading | explicit | ial | html

    @property
    def declared(self) -> bool:
        return self.source != "heading"


@dataclass(frozen=True)
class Link:
    target: str
    line: int
    kind: str  # inline | image | reference | html


# ---------------------------------------------------------------------------
# Front-matter
# ---------------------------------------------------------------------------

def split_front_matter(text: str) -> FrontMatterBlock:
    """Separa o bloco de front-matter do corpo.

    O bloco só é reconhecido quando a primeira linha (após BOM opcional) é
    exatamente `---`. Sem linha de fechamento, o status é `unterminated` e o
    corpo é o texto inteiro.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.split("\n")

    if not lines or lines[0].rstrip() != _FM_OPEN:
        return FrontMatterBlock(status=FRONT_MATTER_MISSING, raw="", body=text, body_line=1)

    for i in range(1, len(lines)):
        if lines[i].rstrip() in _FM_CLOSE:
            return FrontMatterBlock(
                status=FRONT_MATTER_PRESENT,
                raw="\n".join(lines[1:i]),
                body="\n".join(lines[i + 1:]),
                body_line=i + 2,
            )

    return FrontMatterBlock(status=FRONT_MATTER_UNTERMINATED, raw="", body=text, body_line=1)


def parse_front_matter(block: FrontMatterBlock) -> Dict[str, Any]:
    """Interpreta o YAML do bloco (`yaml.safe_load`); bloco vazio → `{}`."""
    if block.status != FRONT_MATTER_PRESENT or not block.raw.strip():
        return {}

    try:
        data = yaml.safe_load(block.raw)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        # o YAML começa na linha 2 do arquivo
        line = mark.line + 2 if mark is not None else 2
        problem = getattr(e, "problem", None) or str(e)
        raise FrontMatterParseError(f"invalid YAML: {problem}", line=line) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontMatterNotMappingError(
            f"front-matter root must be a mapping, got {type(data).__name__}", line=2
        )
    return data


# ---------------------------------------------------------------------------
# Varredura de linhas
# ---------------------------------------------------------------------------

def split_lines(text: str) -> List[str]:
    """Quebra apenas em `\\n` (U+0085 e afins não são fim de linha aqui)."""
    lines = [ln[:-1] if ln.endswith("\r") else ln for ln in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _classify_lines(text: str, start_line: int = 1) -> Iterator[Tuple[int, str, str]]:
    """Gera `(line_no, line, state)` com state em text | open | close | code."""
    fence: Optional[Tuple[str, int]] = None
    liquid: Optional[str] = None

    for offset, line in enumerate(split_lines(text)):
        no = start_line + offset

        if fence is not None:
            stripped = line.strip()
            char, size = fence
            if stripped and set(stripped) == {char} and len(stripped) >= size and not line.startswith("    "):
                fence = None
                yield no, line, "close"
            else:
                yield no, line, "code"
            continue

        if liquid is not None:
            if re.search(r"\{%-?\s*end" + liquid + r"\s*-?%\}", line):
                liquid = None
                yield no, line, "close"
            else:
                yield no, line, "code"
            continue

        m = _FENCE_OPEN_RE.match(line)
        if m and not (m.group(1)[0] == "`" and "`" in m.group(2)):
            fence = (m.group(1)[0], len(m.group(1)))
            yield no, line, "open"
            continue

        m = _LIQUID_CODE_OPEN_RE.search(line)
        if m:
            name = m.group(1)
            rest = line[m.end():]
            if not re.search(r"\{%-?\s*end" + name + r"\s*-?%\}", rest):
                liquid = name
                yield no, line, "open"
                continue

        yield no, line, "text"


def iter_lines_outside_code(body: str, start_line: int = 1) -> Iterator[Tuple[int, str]]:
    """Linhas fora de fences (``` / ~~~) e de regiões highlight/raw/comment."""
    for no, line, state in _classify_lines(body, start_line):
        if state == "text":
            yield no, line


def count_code_blocks(body: str) -> int:
    return sum(1 for _, _, state in _classify_lines(body) if state == "open")


def strip_code_spans(line: str) -> str:
    return _CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), line)


# ---------------------------------------------------------------------------
# Headings e âncoras
# ---------------------------------------------------------------------------

def _plain_heading_text(text: str) -> str:
    text = _LIQUID_RE.sub("", text)
    text = _HTML_TAG_RE.sub("", text)
    text = _MD_LINK_TEXT_RE.sub(r"\1", text)
    return text.replace("`", "").replace("*", "").replace("~", "").strip()


def slugify_heading(text: str) -> str:
    """Id automático no estilo kramdown.

    >>> slugify_heading("4.2. Creating a PCollection")
    'creating-a-pcollection'
    """
    slug = _plain_heading_text(text)
    slug = re.sub(r"^[^a-zA-Z]+", "", slug)
    slug = re.sub(r"[^a-zA-Z0-9 -]", "", slug)
    slug = slug.replace(" ", "-").lower()
    return slug or "section"


def _unique(slug: str, seen: Dict[str, int]) -> str:
    if slug not in seen:
        seen[slug] = 0
        return slug
    seen[slug] += 1
    return f"{slug}-{seen[slug]}"


def _setext_candidate(line: str) -> bool:
    s = line.strip()
    if not s:
        return False
    if s[0] in "#|<>" or re.match(r"^([-*+]|\d+[.)])\s", s):
        return False
    return not _SETEXT_RE.match(line)


def extract_headings(doc: Document) -> List[Heading]:
    """Headings ATX e setext do corpo, com ids únicos por documento."""
    out: List[Heading] = []
    seen: Dict[str, int] = {}
    prev: Optional[Tuple[int, str]] = None

    def _add(level: int, raw_text: str, no: int) -> None:
        m = _EXPLICIT_ID_RE.search(raw_text)
        if m:
            text = raw_text[: m.start()].strip()
            out.append(Heading(level=level, text=text, id=m.group(1), line=no, explicit=True))
        else:
            out.append(Heading(level=level, text=raw_text, id=_unique(slugify_heading(raw_text), seen), line=no))

    for no, line in iter_lines_outside_code(doc.body, doc.body_line):
        m = _ATX_RE.match(line)
        if m:
            content = _ATX_CLOSING_RE.sub("", m.group(2) or "").strip()
            _add(len(m.group(1)), content, no)
            prev = None
            continue

        sm = _SETEXT_RE.match(line)
        if sm and prev is not None and prev[0] == no - 1 and _setext_candidate(prev[1]):
            level = 1 if sm.group(1)[0] == "=" else 2
            _add(level, prev[1].strip(), prev[0])
            prev = None
            continue

        prev = (no, line)

    out.sort(key=lambda h: h.line)
    return out


def html_anchor_ids(line: str) -> List[str]:
    """Ids declarados por tags HTML da linha, um por valor distinto em cada tag.

    `id` vale em qualquer elemento; `name` apenas em `<a>`
    (`<a name="x" id="x">` declara `x` uma única vez).
    """
    out: List[str] = []
    for tag in _HTML_TAG_OPEN_RE.finditer(line):
        is_anchor = tag.group(1).lower() == "a"
        values: List[str] = []
        for attr in _HTML_ID_ATTR_RE.finditer(tag.group(2)):
            if attr.group(1) == "name" and not is_anchor:
                continue
            if attr.group(2) not in values:
                values.append(attr.group(2))
        out.extend(values)
    return out


def extract_anchors(doc: Document) -> List[Anchor]:
    """Ids de headings + IAL `{: #id}` + atributos HTML `id` / `name`."""
    anchors = [
        Anchor(id=h.id, line=h.line, source="explicit" if h.explicit else "heading")
        for h in extract_headings(doc)
    ]
    for no, line in iter_lines_outside_code(doc.body, doc.body_line):
        clean = strip_code_spans(line)
        for m in _IAL_ID_RE.finditer(clean):
            anchors.append(Anchor(id=m.group(1), line=no, source="ial"))
        for anchor_id in html_anchor_ids(clean):
            anchors.append(Anchor(id=anchor_id, line=no, source="html"))
    anchors.sort(key=lambda a: (a.line, a.id))
    return anchors


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

def extract_links(doc: Document) -> List[Link]:
    links: List[Link] = []
    for no, line in iter_lines_outside_code(doc.body, doc.body_line):
        clean = strip_code_spans(line)

        ref = _REF_DEF_RE.match(clean)
        if ref:
            links.append(Link(target=ref.group(2), line=no, kind="reference"))
            continue

        for m in _INLINE_LINK_RE.finditer(clean):
            links.append(Link(target=m.group(2), line=no, kind="image" if m.group(1) else "inline"))
        for m in _HREF_RE.finditer(clean):
            links.append(Link(target=m.group(1), line=no, kind="html"))
    return links


# ---------------------------------------------------------------------------
# Estrutura (comparação de traduções)
# ---------------------------------------------------------------------------

def structure_fingerprint(doc: Document) -> Dict[str, Any]:
    """Impressão estrutural: headings por nível, blocos de código, chaves de front-matter."""
    headings = {f"h{i}": 0 for i in range(1, 7)}
    for h in extract_headings(doc):
        headings[f"h{h.level}"] += 1
    return {
        "headings": headings,
        "code_blocks": count_code_blocks(doc.body),
        "front_matter_keys": sorted(str(k) for k in (doc.front_matter or {})),
    }
