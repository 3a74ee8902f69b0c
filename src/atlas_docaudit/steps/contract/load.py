"""Step canônico: contract.load (v1).

Responsabilidades:
- carregar o contrato do site (YAML/JSON) via `contract.path`
- validar contra Site Contract v1
- injetar no RunContext (ctx.contract)
- produzir payload rastreável (path + hash + versão)

Guardrails:
- Erros implícitos viram DocAuditErrorPayload (serializável e acionável)
- decision_required=True quando o operador precisa corrigir contrato/config
- details estruturado para diagnóstico
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from atlas_docaudit.core.contract.errors import ContractError
from atlas_docaudit.core.contract.hashing import compute_contract_hash
from atlas_docaudit.core.contract.loader import load_contract
from atlas_docaudit.core.contract.schema import validate_site_contract_v1
from atlas_docaudit.core.errors import DocAuditErrorPayload
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_docaudit.steps.common import failed_result, resolve_path


@dataclass
class ContractLoadStep(Step):
    """Carrega e valida o Site Contract v1."""

    id: str = "contract.load"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def _mk_error(
        self,
        *,
        error_type: str,
        message: str,
        details: Dict[str, Any],
        hint: Optional[str],
        decision_required: bool,
    ) -> Dict[str, Any]:
        return DocAuditErrorPayload(
            type=error_type,
            message=message,
            details=details,
            hint=hint,
            decision_required=decision_required,
        ).to_dict()

    def run(self, ctx: RunContext) -> StepResult:
        cfg = ctx.config or {}
        contract_cfg = (cfg.get("contract") or {}) if isinstance(cfg, dict) else {}
        path = contract_cfg.get("path") if isinstance(contract_cfg, dict) else None

        # Guardrail explícito: path ausente (decisão requerida)
        if not path:
            err = self._mk_error(
                error_type="CONTRACT_PATH_MISSING",
                message="Caminho do contrato ausente na configuração",
                details={
                    "expected_config_key": "contract.path",
                    "received": path,
                },
                hint="Declare `contract.path` na config (ex.: site.contract.yaml)",
                decision_required=True,
            )
            return failed_result(step_id=self.id, kind=self.kind, error=err)

        resolved = resolve_path(ctx, path)
        try:
            data = load_contract(path=resolved)
            validated = validate_site_contract_v1(data)
            effective = validated.to_dict()

            ctx.contract = effective
            chash = compute_contract_hash(effective)
            ctx.log(step_id=self.id, level="info", message="contract loaded", contract_hash=chash)

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="contract loaded and validated",
                metrics={
                    "required_keys": len(validated.required_keys),
                    "languages": len(validated.templates["languages"]),
                    "translations": len(validated.translations),
                },
                warnings=[],
                artifacts={},
                payload={
                    "contract": {
                        "path": str(resolved),
                        "hash": chash,
                        "contract_version": effective.get("contract_version"),
                    }
                },
            )
        except ContractError as e:
            # contrato inválido exige correção pelo operador, nunca autocorreção
            err = self._mk_error(
                error_type=e.__class__.__name__,
                message=str(e) or "Contrato inválido",
                details={
                    "contract_path": str(resolved),
                    "exception_class": e.__class__.__name__,
                },
                hint="Corrija o contrato para aderir ao Site Contract v1",
                decision_required=True,
            )
            ctx.log(step_id=self.id, level="error", message="contract rejected", error_type=e.__class__.__name__)
            return failed_result(step_id=self.id, kind=self.kind, error=err)
        except Exception as e:
            # fallback controlado (não vazar stack trace cru para o operador)
            err = self._mk_error(
                error_type=e.__class__.__name__,
                message="Falha inesperada ao carregar/validar contrato",
                details={
                    "contract_path": str(resolved),
                    "exception_class": e.__class__.__name__,
                    "exception_message": str(e),
                },
                hint="Verifique o path do contrato e o formato do arquivo (JSON/YAML)",
                decision_required=False,
            )
            ctx.log(step_id=self.id, level="error", message="contract load failed", error_type=e.__class__.__name__)
            return failed_result(step_id=self.id, kind=self.kind, error=err)
