"""
# Pipeline Core — Atlas DocAudit

Este pacote define os **contratos canônicos** e as **estruturas fundamentais**
que compõem um pipeline de auditoria no Atlas DocAudit.

Um pipeline é modelado como um **DAG explícito de Steps**, onde:
- cada Step declara identidade, tipo semântico e dependências
- a execução é coordenada exclusivamente pelo Engine
- o estado compartilhado é mediado pelo `RunContext`

## Componentes

- **types**: `StepStatus`, `StepKind`, `StepResult`
- **step**: `Step` (Protocol)
- **context**: `RunContext` (artefatos, logs, warnings, findings)
- **registry**: `StepRegistry` (unicidade de `step.id`)

## Limites Explícitos

- Não planeja execução (não é DAG planner)
- Não contém regras de auditoria de documentos
"""
