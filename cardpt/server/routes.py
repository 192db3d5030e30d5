"""
HTTP API Routes for cardpt.

Engine routes drive a single session engine. The decision route runs the
gateway pipeline; it never applies the proposed action itself.
"""

from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from cardpt.core.errors import EngineError
from cardpt.core.game import HoldemEngine, create_engine
from cardpt.core.state import Action, GameConfig
from cardpt.gateway.credentials import ProviderCredential
from cardpt.gateway.pipeline import DecisionGateway, ProposalRequest, RejectedProposal
from cardpt.gateway.prompt import decision_input_from_engine
from cardpt.server.schemas import (
    ActionRequest, CreateEngineRequest, DecisionRequest, LegalActionsResponse,
)

router = APIRouter()

# Single session engine
_engine: Optional[HoldemEngine] = None
_gateway: Optional[DecisionGateway] = None


def get_engine() -> HoldemEngine:
    """Get the session engine."""
    if _engine is None:
        raise HTTPException(status_code=400, detail="Engine not initialized")
    return _engine


def get_gateway() -> DecisionGateway:
    global _gateway
    if _gateway is None:
        _gateway = DecisionGateway()
    return _gateway


@router.post("/engine")
async def create_session_engine(req: CreateEngineRequest) -> Dict[str, Any]:
    """
    Create the session engine and start hand 1.
    """
    global _engine

    config = GameConfig(
        seed=req.seed,
        starting_stacks=list(req.starting_stacks),
        small_blind=req.small_blind,
        big_blind=req.big_blind,
    )
    try:
        _engine = create_engine(config)
    except EngineError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _engine.get_snapshot().to_dict()


@router.get("/engine/snapshot")
async def get_snapshot() -> Dict[str, Any]:
    """Full snapshot: config, state, events and action history."""
    return get_engine().get_snapshot().to_dict()


@router.get("/engine/legal_actions", response_model=LegalActionsResponse)
async def get_legal_actions() -> Dict[str, Any]:
    engine = get_engine()
    return {
        "action_seat": engine.state.action_seat,
        "actions": [a.to_dict() for a in engine.get_legal_actions()],
    }


@router.post("/engine/actions")
async def apply_action(req: ActionRequest) -> Dict[str, Any]:
    """
    Apply an action for the acting seat.

    Illegal actions are rejected with 400 and leave the engine untouched.
    """
    engine = get_engine()
    try:
        action = Action.from_dict(req.model_dump())
        engine.apply_action(action)
    except (EngineError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "state": engine.get_snapshot().state.to_dict()}


@router.post("/engine/next_hand")
async def next_hand() -> Dict[str, Any]:
    engine = get_engine()
    try:
        engine.start_next_hand()
    except EngineError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "hand_id": engine.state.hand_id, "state": engine.state.to_dict()}


@router.post("/api/decision")
async def propose(req: DecisionRequest, gateway: DecisionGateway = Depends(get_gateway)):
    """
    Ask a model for a decision.

    ACCEPTED and FALLBACK answer 200; REJECTED answers 400 with the
    outcome as the body so the caller can fall back to manual play.
    """
    decision_input = req.input
    if decision_input is None:
        engine = get_engine()
        try:
            decision_input = decision_input_from_engine(engine, req.profile)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    credential = None
    if req.credential is not None:
        credential = ProviderCredential(
            provider=req.credential.provider,
            api_key=req.credential.api_key,
        )

    result = await gateway.propose(ProposalRequest(
        input=decision_input,
        action_mode=req.action_mode,
        preset_id=req.preset_id,
        credential=credential,
    ))
    status_code = 400 if isinstance(result, RejectedProposal) else 200
    return JSONResponse(status_code=status_code, content=result.to_dict())
