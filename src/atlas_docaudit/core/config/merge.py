# src/atlas_docaudit/core/config/merge.py
"""
Deep-merge de configuração (defaults + overrides locais).

Política de merge (v1):
    - dict + dict       → merge recursivo por chave
    - list              → sobrescrita total (ex.: `docs.include` local substitui o default)
    - escalar           → sobrescrita direta
    - conflito de tipos → ConfigTypeConflictError

Exceção explícita à regra de tipos: `None` no override sempre sobrescreve,
e int/float são considerados compatíveis (ex.: `threshold: 1` sobre `0.8`).

Invariantes:
    - Nenhum input é mutado
    - Chaves ausentes no override são preservadas da base
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


_NUMERIC = (int, float)


def _compatible(base_value: Any, override_value: Any) -> bool:
    if override_value is None or base_value is None:
        return True
    if type(base_value) is type(override_value):
        return True
    # bool é subclasse de int: não tratar como numérico
    if isinstance(base_value, bool) or isinstance(override_value, bool):
        return False
    return isinstance(base_value, _NUMERIC) and isinstance(override_value, _NUMERIC)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any], _path: str = "") -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois dicionários de configuração.

    Args:
        base: Configuração base (defaults).
        override: Overrides explícitos.

    Returns:
        Nova configuração resultante.

    Raises:
        ConfigTypeConflictError: conflito de tipo entre base e override.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        key_path = f"{_path}.{key}" if _path else str(key)

        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value, key_path)
            continue

        if isinstance(override_value, list) and (base_value is None or isinstance(base_value, list)):
            result[key] = deepcopy(override_value)
            continue

        if not _compatible(base_value, override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key_path}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
