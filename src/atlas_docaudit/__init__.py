"""
Atlas DocAudit — auditoria determinística e rastreável de sites de documentação.

Este pacote raiz define o namespace público do Atlas DocAudit, que verifica
a integridade de um diretório fonte de documentação em markdown (front-matter,
links internos, encoding, markup de diff colado, diretivas de template e
paridade de traduções).

Princípios centrais:
    - A auditoria é um DAG explícito de Steps canônicos
    - A execução é determinística e reprodutível
    - Defeitos de conteúdo são findings (dados), nunca exceções
    - Rastreabilidade forense (Manifest v1) é um requisito de primeira classe

Arquitetura em alto nível:
    - core      → config, contrato do site, pipeline, engine, findings, Manifest
    - docs      → parsing de markdown, índice de rotas, encoding, Liquid
    - steps     → regras de auditoria concretas
    - report    → geração de report.md a partir do Manifest
    - runner    → montagem da run (registry + Engine + Manifest + exports)
    - cli       → interface de linha de comando `atlas-docaudit`

Limites explícitos:
    - Não renderiza o site nem avalia Liquid
    - Não corrige arquivos (apenas detecta e reporta)
    - Não acessa rede
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
