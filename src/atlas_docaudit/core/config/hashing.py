# src/atlas_docaudit/core/config/hashing.py
"""
Hashing canônico do Atlas DocAudit.

Identidades estruturais registradas no Manifest:
    - config_hash   → configuração efetiva
    - contract_hash → contrato do site (ver core.contract.hashing)
    - corpus_hash   → conjunto de documentos auditados (ver steps.ingest.scan)

Política (v1): JSON canônico (sort_keys, separadores compactos, UTF-8)
seguido de SHA-256 em hexadecimal (64 caracteres).
"""

import hashlib
import json
from typing import Any, Dict


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera o hash determinístico da configuração efetiva.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )
    return sha256_hex(canonical_json(config).encode("utf-8"))
