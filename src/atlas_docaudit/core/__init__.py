"""
Core do Atlas DocAudit.

Este pacote reúne a implementação canônica, independente de CLI, do
planejamento, execução e rastreabilidade de auditorias de documentação.

Componentes principais:
    - config       → resolução de configuração (merge, validação estrutural, hashing)
    - contract     → contrato do site (front-matter, templates, traduções)
    - pipeline     → protocolos de Step, contexto de execução e registry
    - engine       → planejamento (DAG) e execução controlada do pipeline
    - findings     → catálogo de regras e estrutura canônica de Finding
    - traceability → Manifest e Event Log

Limites explícitos:
    - Não contém regras de auditoria concretas (ver `atlas_docaudit.steps`)
    - Não depende de CLI ou serviços externos
"""
