"""
Modelo e parsing dos documentos do site.

Submódulos:
    - corpus     → descoberta e leitura dos arquivos fonte
    - markdown   → front-matter, headings, âncoras e links
    - site       → índice de rotas e resolução de links internos
    - encoding   → UTF-8, BOM, U+FFFD e mojibake
    - diffmarkup → marcadores e cabeçalhos de diff publicados
    - liquid     → tags de bloco, includes e marcadores de linguagem
"""

from .corpus import SourceDocument, compute_corpus_hash, discover_paths, read_source
from .markdown import (
    Anchor,
    Document,
    FrontMatterBlock,
    FrontMatterError,
    FrontMatterNotMappingError,
    FrontMatterParseError,
    Heading,
    Link,
    extract_anchors,
    extract_headings,
    extract_links,
    iter_lines_outside_code,
    parse_front_matter,
    slugify_heading,
    split_front_matter,
    structure_fingerprint,
)
from .site import Resolution, SiteIndex, normalize_route

__all__ = [
    "SourceDocument",
    "compute_corpus_hash",
    "discover_paths",
    "read_source",
    "Anchor",
    "Document",
    "FrontMatterBlock",
    "FrontMatterError",
    "FrontMatterNotMappingError",
    "FrontMatterParseError",
    "Heading",
    "Link",
    "extract_anchors",
    "extract_headings",
    "extract_links",
    "iter_lines_outside_code",
    "parse_front_matter",
    "slugify_heading",
    "split_front_matter",
    "structure_fingerprint",
    "Resolution",
    "SiteIndex",
    "normalize_route",
]
