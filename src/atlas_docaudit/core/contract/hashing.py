"""Hashing canônico do contrato do site.

O hash do contrato é registrado em `inputs.contract_hash` do Manifest e
permite detectar divergência de regras entre duas auditorias.
"""

from __future__ import annotations

from typing import Any, Dict

from atlas_docaudit.core.config.hashing import canonical_json, sha256_hex


def compute_contract_hash(contract: Dict[str, Any]) -> str:
    """Computa SHA-256 do contrato em formato canônico."""
    return sha256_hex(canonical_json(contract or {}).encode("utf-8"))
