"""
Camada de configuração do Atlas DocAudit.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução da configuração final via deep-merge determinístico
    - Geração de hash canônico para rastreabilidade

Chaves reconhecidas (v1):
    - engine.fail_fast
    - docs.root, docs.include, docs.exclude
    - contract.path
    - steps.<step_id>.enabled e opções específicas de cada Step
"""

from .errors import (  # noqa: F401
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash  # noqa: F401
from .loader import get_path, load_config, resolve_config_path, step_config  # noqa: F401
from .merge import deep_merge  # noqa: F401
