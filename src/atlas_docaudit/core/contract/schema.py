"""
Schema canônico — Site Contract v1.

O contrato do site declara, de forma explícita, o que as regras de
auditoria devem aceitar:

    contract_version: "1.0"
    front_matter:
      required: [layout, title, permalink]
      optional: [redirect_from]
      layouts: [section]          # vazio = qualquer layout
      permalink_pattern: "^/.*/$" # opcional
    templates:
      languages: [java, py, go]
      includes_dir: _includes
    translations:
      - source: documentation/sdks/python.md
        translation: zh/documentation/sdks/python.md
    site:
      baseurl_tokens: ["{{ site.baseurl }}"]

Seções ausentes recebem defaults explícitos (documentados abaixo); nenhuma
outra inferência é feita.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List

from .errors import ContractValidationError


DEFAULT_REQUIRED_KEYS = ["layout", "title", "permalink"]
DEFAULT_OPTIONAL_KEYS = ["redirect_from"]
DEFAULT_INCLUDES_DIR = "_includes"
DEFAULT_BASEURL_TOKENS = ["{{ site.baseurl }}", "{{site.baseurl}}"]


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def _expect(cond: bool, msg: str) -> None:
    if not cond:
        raise ContractValidationError(msg)


def _str_list(value: Any, where: str, *, unique: bool = True) -> List[str]:
    _expect(isinstance(value, list), f"{where} must be a list")
    out: List[str] = []
    for i, item in enumerate(value):
        _expect(_is_non_empty_str(item), f"{where}[{i}] must be a non-empty string")
        if unique:
            _expect(item not in out, f"duplicate entry in {where}: {item}")
        out.append(item)
    return out


@dataclass(frozen=True)
class SiteContractV1:
    """Representação interna explícita do Site Contract v1."""

    contract_version: str
    front_matter: Dict[str, Any]
    templates: Dict[str, Any]
    translations: List[Dict[str, str]]
    site: Dict[str, Any]

    @property
    def required_keys(self) -> List[str]:
        return list(self.front_matter["required"])

    @property
    def known_keys(self) -> List[str]:
        return list(self.front_matter["required"]) + list(self.front_matter["optional"])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract_version": self.contract_version,
            "front_matter": {
                "required": list(self.front_matter["required"]),
                "optional": list(self.front_matter["optional"]),
                "layouts": list(self.front_matter["layouts"]),
                "permalink_pattern": self.front_matter["permalink_pattern"],
            },
            "templates": {
                "languages": list(self.templates["languages"]),
                "includes_dir": self.templates["includes_dir"],
            },
            "translations": [dict(t) for t in self.translations],
            "site": {"baseurl_tokens": list(self.site["baseurl_tokens"])},
        }


def validate_site_contract_v1(data: Any) -> SiteContractV1:
    """Valida e materializa um Site Contract v1."""
    _expect(isinstance(data, dict), "Site Contract must be a mapping/dict")

    cv = data.get("contract_version")
    _expect(_is_non_empty_str(cv), "contract_version is required")
    _expect(str(cv) == "1.0", "contract_version must be '1.0' in v1")

    fm = data.get("front_matter") or {}
    _expect(isinstance(fm, dict), "front_matter must be a mapping")

    required = _str_list(fm.get("required", DEFAULT_REQUIRED_KEYS), "front_matter.required")
    _expect(bool(required), "front_matter.required must not be empty")
    optional = _str_list(fm.get("optional", DEFAULT_OPTIONAL_KEYS), "front_matter.optional")
    overlap = sorted(set(required) & set(optional))
    _expect(not overlap, f"front_matter.optional overlaps required keys: {overlap}")
    layouts = _str_list(fm.get("layouts") or [], "front_matter.layouts")

    pattern = fm.get("permalink_pattern")
    if pattern is not None:
        _expect(_is_non_empty_str(pattern), "front_matter.permalink_pattern must be a non-empty string")
        try:
            re.compile(pattern)
        except re.error as e:
            raise ContractValidationError(f"front_matter.permalink_pattern is not a valid regex: {e}") from e

    templates = data.get("templates") or {}
    _expect(isinstance(templates, dict), "templates must be a mapping")
    languages = _str_list(templates.get("languages") or [], "templates.languages")
    includes_dir = templates.get("includes_dir", DEFAULT_INCLUDES_DIR)
    _expect(_is_non_empty_str(includes_dir), "templates.includes_dir must be a non-empty string")

    translations_raw = data.get("translations") or []
    _expect(isinstance(translations_raw, list), "translations must be a list")
    translations: List[Dict[str, str]] = []
    seen_pairs = set()
    for i, t in enumerate(translations_raw):
        _expect(isinstance(t, dict), f"translations[{i}] must be a mapping")
        src, dst = t.get("source"), t.get("translation")
        _expect(_is_non_empty_str(src), f"translations[{i}].source is required")
        _expect(_is_non_empty_str(dst), f"translations[{i}].translation is required")
        _expect(src != dst, f"translations[{i}] source and translation must differ")
        _expect((src, dst) not in seen_pairs, f"duplicate translation pair: {src} -> {dst}")
        seen_pairs.add((src, dst))
        translations.append({"source": src, "translation": dst})

    site = data.get("site") or {}
    _expect(isinstance(site, dict), "site must be a mapping")
    tokens = _str_list(site.get("baseurl_tokens", DEFAULT_BASEURL_TOKENS), "site.baseurl_tokens")

    return SiteContractV1(
        contract_version=str(cv),
        front_matter={
            "required": required,
            "optional": optional,
            "layouts": layouts,
            "permalink_pattern": pattern,
        },
        templates={"languages": languages, "includes_dir": includes_dir},
        translations=translations,
        site={"baseurl_tokens": tokens},
    )
