"""
Diagnóstico de encoding de arquivos fonte.

Detecta, sem corrigir:
    - sequências UTF-8 inválidas (offset em bytes + linha)
    - BOM UTF-8
    - caracteres de substituição U+FFFD
    - mojibake: texto UTF-8 que foi decodificado como cp1252/latin-1 e
      regravado (ex.: `Ã©` no lugar de `é`, `ä¸­` no lugar de `中`)

Heurística de mojibake: um trecho suspeito é um caractere na faixa de
bytes líderes UTF-8 (U+00C2..U+00F4) seguido de 1 a 3 caracteres
(conforme o byte líder) que correspondem a bytes de continuação
(0x80..0xBF) em cp1252 ou latin-1. O trecho só conta quando, re-encodado
em cp1252 (fallback latin-1), decodifica como UTF-8 válido e o texto
recuperado cai em blocos Unicode plausíveis (latim, CJK, pontuação geral,
entre outros). `„Fuß“` não é mojibake.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from .markdown import split_lines

UTF8_BOM = b"\xef\xbb\xbf"
REPLACEMENT_CHAR = "\ufffd"


def _continuation_chars() -> str:
    chars = set()
    for b in range(0x80, 0xC0):
        chars.add(bytes([b]).decode("latin-1"))
        # 0x81, 0x8D, 0x8F, 0x90, 0x9D não existem em cp1252
        chars.update(bytes([b]).decode("cp1252", errors="ignore"))
    return "".join(sorted(chars))


_CONT = "[" + re.escape(_continuation_chars()) + "]"
_MOJIBAKE_RE = re.compile(
    "[\u00c2-\u00df]" + _CONT
    + "|[\u00e0-\u00ef]" + _CONT + "{2}"
    + "|[\u00f0-\u00f4]" + _CONT + "{3}"
)


@dataclass(frozen=True)
class InvalidSequence:
    offset: int
    line: int
    bytes_hex: str


@dataclass(frozen=True)
class MojibakeSample:
    line: int
    text: str
    recovered: str


@dataclass(frozen=True)
class MojibakeReport:
    lines: int = 0
    sequences: int = 0
    samples: List[MojibakeSample] = field(default_factory=list)

    @property
    def detected(self) -> bool:
        return self.lines > 0


def has_bom(raw: bytes) -> bool:
    return raw.startswith(UTF8_BOM)


def find_invalid_utf8(raw: bytes, *, limit: int = 20) -> List[InvalidSequence]:
    """Sequências inválidas em ordem de ocorrência (no máximo `limit`)."""
    out: List[InvalidSequence] = []
    pos = 0
    while pos < len(raw) and len(out) < limit:
        try:
            raw[pos:].decode("utf-8")
            break
        except UnicodeDecodeError as e:
            start, end = pos + e.start, pos + e.end
            out.append(
                InvalidSequence(
                    offset=start,
                    line=raw.count(b"\n", 0, start) + 1,
                    bytes_hex=raw[start:end].hex(),
                )
            )
            pos = end
    return out


def replacement_char_lines(text: str) -> List[int]:
    return [no for no, line in enumerate(split_lines(text), start=1) if REPLACEMENT_CHAR in line]


# Blocos aceitos no texto recuperado (`ß“` -> U+07D3 NKo não é aceito).
_PLAUSIBLE_RANGES = (
    (0x00A0, 0x024F),  # Latin-1 Supplement, Latin Extended-A/B
    (0x0370, 0x052F),  # grego, cirílico
    (0x0590, 0x06FF),  # hebraico, árabe
    (0x0900, 0x0DFF),  # índicos
    (0x0E00, 0x0EFF),  # tailandês, laosiano
    (0x1E00, 0x1FFF),  # Latin Extended Additional, grego estendido
    (0x2000, 0x206F),  # General Punctuation
    (0x20A0, 0x20CF),  # símbolos de moeda
    (0x2100, 0x22FF),  # letterlike, setas, operadores matemáticos
    (0x2460, 0x27BF),  # enclosed, box drawing, símbolos diversos
    (0x2E80, 0x9FFF),  # CJK (radicais, pontuação, kana, hangul jamo, ideogramas)
    (0xAC00, 0xD7AF),  # hangul
    (0xF900, 0xFAFF),  # CJK compatibility
    (0xFE30, 0xFE4F),  # CJK compatibility forms
    (0xFF00, 0xFFEF),  # halfwidth / fullwidth
    (0x1F300, 0x1FAFF),  # emoji
    (0x20000, 0x2FA1F),  # CJK extensões
)


def _plausible(text: str) -> bool:
    for ch in text:
        cp = ord(ch)
        if cp < 0x80:
            continue
        if not any(lo <= cp <= hi for lo, hi in _PLAUSIBLE_RANGES):
            return False
    return True


def _repair(chunk: str) -> Optional[str]:
    buf = bytearray()
    for ch in chunk:
        try:
            buf += ch.encode("cp1252")
        except UnicodeEncodeError:
            buf += ch.encode("latin-1")
    try:
        fixed = bytes(buf).decode("utf-8")
    except UnicodeDecodeError:
        return None
    return fixed if _plausible(fixed) else None


def recover_line(line: str) -> str:
    """Substitui cada trecho reparável pelo texto UTF-8 original."""

    def _sub(m: "re.Match[str]") -> str:
        fixed = _repair(m.group(0))
        return fixed if fixed is not None else m.group(0)

    return _MOJIBAKE_RE.sub(_sub, line)


def detect_mojibake(text: str, *, max_samples: int = 5, preview_chars: int = 120) -> MojibakeReport:
    lines = 0
    sequences = 0
    samples: List[MojibakeSample] = []

    for no, line in enumerate(split_lines(text), start=1):
        hits = sum(1 for m in _MOJIBAKE_RE.finditer(line) if _repair(m.group(0)) is not None)
        if not hits:
            continue
        lines += 1
        sequences += hits
        if len(samples) < max_samples:
            samples.append(
                MojibakeSample(
                    line=no,
                    text=line[:preview_chars],
                    recovered=recover_line(line)[:preview_chars],
                )
            )

    return MojibakeReport(lines=lines, sequences=sequences, samples=samples)
