"""
Schema contract registry.

Maps every structured intent to the pydantic model its payload must satisfy
and validates raw model output against it.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError

from novacoach.core.errors import ParseError, RequestValidationError
from novacoach.core.logger import log_fallback
from novacoach.models.biometrics import BiometricReport
from novacoach.models.exercise import DiscoveredExercise
from novacoach.models.generation import Intent
from novacoach.models.nutrition import NutritionPlan
from novacoach.models.workout import DayPlan, TrainingPlan


# Allow-listed cosmetic fields the model sometimes omits from the body report.
# These are the placeholder values the scanner screen has always displayed.
BIOMETRIC_FALLBACKS: dict[str, Any] = {
    "skeletalMuscleMass": "34.2kg",
    "visceralFat": "4",
}

# Fields the client fills in itself; never part of the remote schema.
_CLIENT_FIELDS = {"id"}


@dataclass(frozen=True)
class Contract:
    """Expected shape of one structured result type."""

    name: str
    model: type[BaseModel]
    fallbacks: Mapping[str, Any] = field(default_factory=dict)

    def json_schema(self) -> dict:
        """JSON schema sent to the remote in structured-output mode."""
        schema = self.model.model_json_schema()
        for name in _CLIENT_FIELDS:
            schema.get("properties", {}).pop(name, None)
        return schema

    @property
    def required_fields(self) -> list[str]:
        return [name for name, info in self.model.model_fields.items() if info.is_required()]


_REGISTRY: dict[Intent, Contract] = {
    Intent.PLAN_GENERATION: Contract("training_plan", TrainingPlan),
    Intent.DAY_REGENERATION: Contract("day_plan", DayPlan),
    Intent.NUTRITION_PLAN: Contract("nutrition_plan", NutritionPlan),
    Intent.BIOMETRIC_ANALYSIS: Contract("biometric_report", BiometricReport, BIOMETRIC_FALLBACKS),
    Intent.EXERCISE_DISCOVERY: Contract("discovered_exercise", DiscoveredExercise),
}


def contract_for(intent: Intent) -> Contract:
    """
    Look up the contract for a structured intent.

    Raises:
        RequestValidationError: If the intent has no structured output
    """
    try:
        return _REGISTRY[Intent(intent)]
    except KeyError:
        raise RequestValidationError(f"Intent '{intent}' has no structured contract")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _apply_fallbacks(contract: Contract, payload: dict) -> dict:
    if not contract.fallbacks:
        return payload
    patched = dict(payload)
    for name, default in contract.fallbacks.items():
        if _is_blank(patched.get(name)):
            log_fallback(contract.name, name, default)
            patched[name] = default
    return patched


def validate(contract: Contract, raw_payload: str | bytes | Mapping) -> BaseModel:
    """
    Parse and validate a raw payload against a contract.

    Args:
        contract: Target contract
        raw_payload: JSON text or an already-decoded mapping

    Returns:
        Instance of the contract's model

    Raises:
        ParseError: If the payload is not JSON, not an object, or breaks the contract
    """
    if isinstance(raw_payload, (str, bytes)):
        try:
            payload = json.loads(raw_payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            detail = e.msg if isinstance(e, json.JSONDecodeError) else e.reason
            raise ParseError(f"{contract.name}: AI did not return valid JSON ({detail})", contract=contract.name)
    else:
        payload = raw_payload

    if not isinstance(payload, Mapping):
        raise ParseError(f"{contract.name}: expected a JSON object, got {type(payload).__name__}", contract=contract.name)

    payload = _apply_fallbacks(contract, dict(payload))

    try:
        return contract.model.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()[:5]
        )
        raise ParseError(f"{contract.name}: {problems}", contract=contract.name)
