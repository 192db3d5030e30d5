"""
Authority / capability gate.

Two checks, in order, the first failure wins:

1. Authority: L1_BASIC may only FOLD or CALL. A RAISE intent under L1 is a
   capability violation even when raising is legal.
2. Legality: the FOLD/CALL/RAISE intent is mapped back onto the engine's
   vocabulary (CALL -> check or call, RAISE -> bet or raise) and must be in
   the supplied legal actions; a RAISE amount must lie inside
   ``[min_amount, max_amount]``.

L2_STANDARD and L3_EXPERIMENTAL have identical authority.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cardpt.core.rules import ActionType
from cardpt.core.state import LegalAction
from cardpt.gateway.capability import CapabilityLevel, can_raise
from cardpt.gateway.decision import DecisionAction


class GateViolation(str, Enum):
    CAPABILITY_LIMIT = "capability_limit"
    ILLEGAL_ACTION = "illegal_action"


class LegalActionInput(BaseModel):
    """A legal action as supplied by the caller (engine vocabulary)."""
    model_config = ConfigDict(populate_by_name=True)

    type: ActionType
    min_amount: Optional[int] = Field(default=None, alias="minAmount")
    max_amount: Optional[int] = Field(default=None, alias="maxAmount")

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "min_amount": self.min_amount,
            "max_amount": self.max_amount,
        }


def coerce_legal_actions(items: Iterable[Any]) -> List[LegalActionInput]:
    """Accept engine LegalAction records, dicts or LegalActionInput models."""
    result = []
    for item in items:
        if isinstance(item, LegalActionInput):
            result.append(item)
        elif isinstance(item, LegalAction):
            result.append(LegalActionInput(
                type=item.type, min_amount=item.min_amount, max_amount=item.max_amount,
            ))
        else:
            data = dict(item)
            if isinstance(data.get("type"), str):
                data["type"] = data["type"].strip().lower()
            result.append(LegalActionInput.model_validate(data))
    return result


@dataclass(frozen=True)
class GateResult:
    """
    Outcome of the gate.

    When ``valid`` is True, ``engine_action`` is the concrete engine action
    the intent maps to and ``amount`` the bet/raise total (None otherwise).
    """
    valid: bool
    violation: Optional[GateViolation] = None
    message: Optional[str] = None
    engine_action: Optional[ActionType] = None
    amount: Optional[int] = None

    @classmethod
    def reject(cls, violation: GateViolation, message: str) -> GateResult:
        return cls(valid=False, violation=violation, message=message)


def _find(legal_actions: List[LegalActionInput], action_type: ActionType) -> Optional[LegalActionInput]:
    for legal in legal_actions:
        if legal.type == action_type:
            return legal
    return None


def enforce_capability_gate(
    action: DecisionAction,
    legal_actions: Iterable[Any],
    capability: CapabilityLevel,
) -> GateResult:
    """
    Check a proposed action against authority and game legality.

    Args:
        action: The schema-valid proposed action (FOLD/CALL/RAISE)
        legal_actions: The engine's legal actions for the acting seat
        capability: Capability level of the preset that proposed it

    Returns:
        GateResult
    """
    legal = coerce_legal_actions(legal_actions)
    intent = action.type

    if intent == "RAISE" and not can_raise(capability):
        return GateResult.reject(
            GateViolation.CAPABILITY_LIMIT,
            "L1_BASIC capability does not allow RAISE actions. Only FOLD or CALL are permitted.",
        )

    if intent == "FOLD":
        if _find(legal, ActionType.FOLD) is None:
            return GateResult.reject(
                GateViolation.ILLEGAL_ACTION,
                "FOLD is not a legal action in the current game state.",
            )
        return GateResult(valid=True, engine_action=ActionType.FOLD)

    if intent == "CALL":
        for candidate in (ActionType.CHECK, ActionType.CALL):
            if _find(legal, candidate) is not None:
                return GateResult(valid=True, engine_action=candidate)
        return GateResult.reject(
            GateViolation.ILLEGAL_ACTION,
            "CALL/CHECK is not a legal action in the current game state.",
        )

    if intent == "RAISE":
        target = _find(legal, ActionType.BET) or _find(legal, ActionType.RAISE)
        if target is None:
            return GateResult.reject(
                GateViolation.ILLEGAL_ACTION,
                "RAISE/BET is not a legal action in the current game state.",
            )

        amount = action.amount
        if amount is None:
            return GateResult.reject(
                GateViolation.ILLEGAL_ACTION,
                "RAISE action requires an amount.",
            )
        if isinstance(amount, float):
            if not amount.is_integer():
                return GateResult.reject(
                    GateViolation.ILLEGAL_ACTION,
                    f"RAISE amount {amount} must be a whole number of chips.",
                )
            amount = int(amount)

        if target.min_amount is not None and amount < target.min_amount:
            return GateResult.reject(
                GateViolation.ILLEGAL_ACTION,
                f"RAISE amount {amount} is below minimum {target.min_amount}.",
            )
        if target.max_amount is not None and amount > target.max_amount:
            return GateResult.reject(
                GateViolation.ILLEGAL_ACTION,
                f"RAISE amount {amount} exceeds maximum {target.max_amount}.",
            )
        return GateResult(valid=True, engine_action=target.type, amount=amount)

    return GateResult.reject(GateViolation.ILLEGAL_ACTION, f"Unknown action type: {intent}")
