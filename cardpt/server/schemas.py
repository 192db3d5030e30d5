"""
Pydantic schemas for API request/response validation.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field

from cardpt.core.rules import DEFAULT_BIG_BLIND, DEFAULT_BUY_IN, DEFAULT_SMALL_BLIND, SEAT_COUNT
from cardpt.gateway.capability import ActionMode


# ============= Request Schemas =============

class CreateEngineRequest(BaseModel):
    """Request to create the session engine."""
    seed: str = Field(..., description="Seed string; with the hand id it fixes every deck")
    starting_stacks: List[int] = Field(
        default_factory=lambda: [DEFAULT_BUY_IN] * SEAT_COUNT,
        min_length=SEAT_COUNT,
        max_length=SEAT_COUNT,
    )
    small_blind: int = Field(gt=0, default=DEFAULT_SMALL_BLIND)
    big_blind: int = Field(gt=0, default=DEFAULT_BIG_BLIND)


class ActionRequest(BaseModel):
    """Request to apply an engine action."""
    actor: int = Field(..., ge=0, lt=SEAT_COUNT)
    type: str = Field(..., description="Action type: fold, check, call, bet, raise")
    amount: Optional[int] = Field(default=None, ge=0, description="Street total for bet/raise")


class CredentialSchema(BaseModel):
    """Provider API key supplied with a decision request."""
    provider: str
    api_key: str = Field(..., repr=False)


class DecisionRequest(BaseModel):
    """
    Request for a model-proposed decision.

    When ``input`` is omitted the decision input is built from the session
    engine's acting seat, with ``profile`` attached.
    """
    input: Optional[Dict[str, Any]] = None
    profile: Optional[Dict[str, Any]] = None
    action_mode: ActionMode
    preset_id: str
    credential: Optional[CredentialSchema] = None


# ============= Response Schemas =============

class LegalActionSchema(BaseModel):
    """Legal action for the acting seat."""
    type: str
    min_amount: Optional[int] = None
    max_amount: Optional[int] = None


class LegalActionsResponse(BaseModel):
    action_seat: Optional[int] = None
    actions: List[LegalActionSchema]
