"""Loader canônico do contrato do site (YAML/JSON).

Notas:
- YAML é preferencial, JSON é alternativo.
- O formato é inferido pela extensão do arquivo.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import (
    ContractFileNotFoundError,
    ContractParseError,
    ContractPathMissingError,
    UnsupportedContractFormatError,
)


def load_contract(*, path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    """Carrega o contrato do site a partir de YAML/JSON.

    Raises:
        ContractPathMissingError: se path estiver ausente.
        ContractFileNotFoundError: se arquivo não existir.
        UnsupportedContractFormatError: se extensão não suportada.
        ContractParseError: se parsing falhar ou a raiz não for um mapa.
    """
    if not path or not str(path).strip():
        raise ContractPathMissingError("config must define contract.path")

    p = Path(path)
    if not p.exists():
        raise ContractFileNotFoundError(f"contract file not found: {p}")

    suffix = p.suffix.lower()
    if suffix not in {".yml", ".yaml", ".json"}:
        raise UnsupportedContractFormatError(f"unsupported contract format: {suffix}")

    raw = p.read_text(encoding="utf-8")
    try:
        data = json.loads(raw) if suffix == ".json" else yaml.safe_load(raw)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ContractParseError(str(e) or "failed to parse contract") from e

    if data is None:
        raise ContractParseError("contract file is empty")

    if not isinstance(data, dict):
        raise ContractParseError("contract root must be a mapping/dict")

    return data
