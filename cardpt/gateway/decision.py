"""
Decision schema: the structured proposal returned by a model.

Raw provider text goes through three steps before the gate sees it:

1. ``parse_single_json_object`` - strict parsing, exactly one JSON object,
   no repair of any kind.
2. ``normalize_decision_payload`` - the only leniency allowed: a bare
   action string ("CALL") becomes ``{"type": "CALL"}`` and a null amount on
   FOLD/CALL is dropped.
3. ``parse_decision`` - schema validation into a ``Decision`` model.

``find_decision_issues`` / ``validate_decision`` are the semantic sanity
check. The live pipeline only logs the issues; ``validate_decision`` is the
strict standalone validator and raises on the first one.
"""

from __future__ import annotations
import json
import math
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


ACTION_TYPES = ("FOLD", "CALL", "RAISE")

PLANS = ("see_turn", "control_pot", "apply_pressure")
DEFAULT_PLAN = "see_turn"
DEFAULT_CONFIDENCE = 0.5

DRIVER_KEYS = (
    "hand_strength",
    "pot_odds",
    "implied_odds",
    "position",
    "risk",
    "variance",
    "bluff_value",
    "entertainment",
    "table_image",
    "opponent_model",
)

# Expected range for the sum of driver weights
WEIGHT_SUM_MIN = 0.8
WEIGHT_SUM_MAX = 1.2


class InvalidJSONError(ValueError):
    """Raw output is not exactly one JSON object."""


class DecisionSchemaError(ValueError):
    """Parsed object does not match the decision schema."""


class DecisionValidationError(ValueError):
    """Decision fails the strict semantic check."""


class DecisionAction(BaseModel):
    type: Literal["FOLD", "CALL", "RAISE"]
    amount: Optional[Union[int, float]] = None


class Driver(BaseModel):
    key: str
    weight: float


class Reason(BaseModel):
    drivers: List[Driver] = Field(default_factory=list)
    plan: Literal["see_turn", "control_pot", "apply_pressure"] = DEFAULT_PLAN
    assumptions: Optional[Dict[str, Any]] = None
    line: str = ""


class Decision(BaseModel):
    """A schema-valid decision. Not yet checked against authority or legality."""
    action: DecisionAction
    reason: Reason = Field(default_factory=Reason)
    confidence: float = DEFAULT_CONFIDENCE

    def to_dict(self) -> Dict[str, Any]:
        action: Dict[str, Any] = {"type": self.action.type}
        if self.action.amount is not None:
            action["amount"] = _plain_number(self.action.amount)
        reason: Dict[str, Any] = {
            "drivers": [{"key": d.key, "weight": d.weight} for d in self.reason.drivers],
            "plan": self.reason.plan,
            "line": self.reason.line,
        }
        if self.reason.assumptions is not None:
            reason["assumptions"] = dict(self.reason.assumptions)
        return {"action": action, "reason": reason, "confidence": self.confidence}


def _plain_number(value: float):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite_number(value: Any) -> bool:
    if not _is_number(value):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints too large for a float
        return False


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_single_json_object(raw_text: str) -> Dict[str, Any]:
    """
    Parse raw model output as exactly one JSON object.

    Raises:
        InvalidJSONError: If the text is not one well-formed JSON object
    """
    trimmed = (raw_text or "").strip()
    if not trimmed.startswith("{") or not trimmed.endswith("}"):
        raise InvalidJSONError(
            "LLM response is not JSON format. Response must start with { and end with }."
        )

    decoder = json.JSONDecoder(parse_constant=_reject_constant)
    try:
        parsed, end = decoder.raw_decode(trimmed)
    except (ValueError, RecursionError) as e:
        raise InvalidJSONError(f"JSON parse failure: {e}") from e

    rest = trimmed[end:].strip()
    if rest:
        if rest.startswith("{"):
            raise InvalidJSONError(
                "LLM response contains multiple JSON objects. Only a single JSON object is allowed."
            )
        raise InvalidJSONError(f"JSON parse failure: unexpected data after position {end}")

    if not isinstance(parsed, dict):
        raise InvalidJSONError(
            "Parsed JSON is not an object. Expected a JSON object, not an array or primitive."
        )
    return parsed


def _upper(value: Any) -> str:
    return str(value).upper() if value else ""


def normalize_decision_payload(payload: Any) -> Any:
    """
    Apply the permitted normalizations to a parsed payload.

    Returns a normalized copy; the input is not modified. Anything the
    normalizer does not recognise is passed through for validation to reject.
    """
    if not isinstance(payload, dict) or "action" not in payload:
        return payload

    result = dict(payload)
    action = result["action"]

    if isinstance(action, str):
        action_type = action.upper()
        if action_type not in ACTION_TYPES:
            return result
        action = {"type": action_type}

    if not isinstance(action, dict):
        return result

    action = dict(action)
    if "type" in action and _upper(action["type"]) in ("FOLD", "CALL"):
        if "amount" in action and action["amount"] is None:
            del action["amount"]
    result["action"] = action
    return result


def parse_decision(payload: Any) -> Decision:
    """
    Validate a normalized payload against the decision schema.

    Driver keys may be any non-empty string here; weights must be finite.
    An unknown or missing plan becomes ``see_turn`` and a missing confidence
    becomes 0.5.

    Raises:
        DecisionSchemaError: On the first schema violation
    """
    if not isinstance(payload, dict):
        raise DecisionSchemaError("Decision must be a JSON object.")

    if "action" not in payload:
        raise DecisionSchemaError("Decision schema mismatch: missing required field 'action'.")
    action = payload["action"]
    if not isinstance(action, dict):
        raise DecisionSchemaError("Decision schema mismatch: 'action' must be an object.")
    if "type" not in action:
        raise DecisionSchemaError("Decision schema mismatch: missing required field 'action.type'.")

    action_type = _upper(action["type"])
    if action_type not in ACTION_TYPES:
        raise DecisionSchemaError(
            f"Invalid action type: {action_type}. Must be FOLD, CALL, or RAISE."
        )

    amount = action.get("amount")
    if amount is None:
        if action_type == "RAISE":
            raise DecisionSchemaError(
                "Decision schema mismatch: 'action.amount' is required for RAISE actions."
            )
    elif not _is_number(amount):
        raise DecisionSchemaError(
            "Decision schema mismatch: 'action.amount' must be a number or null."
        )
    elif not _is_finite_number(amount):
        raise DecisionSchemaError(
            "Decision schema mismatch: 'action.amount' must be a finite number."
        )

    reason = _parse_reason(payload)

    confidence = DEFAULT_CONFIDENCE
    if "confidence" in payload:
        if not _is_finite_number(payload["confidence"]):
            raise DecisionSchemaError(
                "Decision schema mismatch: 'confidence' must be a finite number if provided."
            )
        confidence = payload["confidence"]

    return Decision(
        action=DecisionAction(type=action_type, amount=amount),
        reason=reason,
        confidence=confidence,
    )


def _parse_reason(payload: Dict[str, Any]) -> Reason:
    if "reason" not in payload:
        return Reason()

    reason = payload["reason"]
    if not isinstance(reason, dict):
        raise DecisionSchemaError(
            "Decision schema mismatch: 'reason' must be an object if provided."
        )

    drivers: List[Driver] = []
    if "drivers" in reason:
        if not isinstance(reason["drivers"], list):
            raise DecisionSchemaError(
                "Decision schema mismatch: 'reason.drivers' must be an array if provided."
            )
        for i, driver in enumerate(reason["drivers"]):
            if (
                not isinstance(driver, dict)
                or not isinstance(driver.get("key"), str)
                or not driver["key"].strip()
                or not _is_finite_number(driver.get("weight"))
            ):
                raise DecisionSchemaError(
                    f"Decision schema mismatch: 'reason.drivers[{i}]' must have 'key' "
                    "(non-empty string) and 'weight' (finite number)."
                )
            drivers.append(Driver(key=driver["key"], weight=driver["weight"]))

    plan = str(reason.get("plan") or "")
    if plan not in PLANS:
        plan = DEFAULT_PLAN

    assumptions = reason.get("assumptions")
    if not isinstance(assumptions, dict):
        assumptions = None

    line = str(reason.get("line") or "")

    return Reason(drivers=drivers, plan=plan, assumptions=assumptions, line=line)


def find_decision_issues(decision: Decision, check_driver_keys: bool = False) -> List[str]:
    """
    Semantic sanity check.

    Args:
        decision: A schema-valid decision
        check_driver_keys: Also require driver keys from ``DRIVER_KEYS``

    Returns:
        Human-readable issues, empty if the decision is sound
    """
    issues: List[str] = []
    drivers = decision.reason.drivers

    if len(drivers) < 2:
        issues.append("Decision must include at least 2 drivers.")

    for driver in drivers:
        if check_driver_keys and driver.key not in DRIVER_KEYS:
            issues.append(f"Unknown driver key: {driver.key}.")
        if not math.isfinite(driver.weight):
            issues.append(f"Driver weight must be a finite number: {driver.key}.")
        elif driver.weight < 0:
            issues.append(f"Driver weight must be non-negative: {driver.key}.")
        elif driver.weight > 1:
            issues.append(f"Driver weight exceeds 1.0: {driver.key}.")

    if drivers:
        total = sum(d.weight for d in drivers)
        if total < WEIGHT_SUM_MIN or total > WEIGHT_SUM_MAX:
            issues.append(
                f"Driver weight sum outside expected range "
                f"[{WEIGHT_SUM_MIN}, {WEIGHT_SUM_MAX}]: {total:.3f}."
            )

    if not 0 <= decision.confidence <= 1:
        issues.append("Confidence must be between 0 and 1.")

    if not decision.reason.line.strip():
        issues.append("Reason line must be non-empty.")

    if drivers:
        top = max(d.weight for d in drivers)
        top_keys = {d.key for d in drivers if d.weight == top}
        if decision.action.type == "FOLD" and "hand_strength" in top_keys:
            issues.append("FOLD cannot have hand_strength as highest-weight driver.")
        if decision.action.type == "RAISE" and "risk" in top_keys:
            issues.append("RAISE cannot have risk as highest-weight driver.")

    return issues


def validate_decision(decision: Decision) -> None:
    """
    Strict semantic validation for tests and offline checks.

    Raises:
        DecisionValidationError: On the first issue found
    """
    issues = find_decision_issues(decision, check_driver_keys=True)
    if issues:
        raise DecisionValidationError(issues[0])
