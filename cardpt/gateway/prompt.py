"""
Decision input and the canonical prompt.

The prompt is the same for every provider. Its fixed parts (system
instruction, output restrictions, action encoding rules) come first and a
player profile can only add advisory text after them.
"""

from __future__ import annotations
import json
from typing import Any, Dict, List, Optional

from cardpt.core.rules import ActionType
from cardpt.gateway.gate import coerce_legal_actions


TASK = "propose_decision"
SCHEMA_VERSION = "cardpt.v0.2"

# Engine action -> the only vocabulary a model ever sees
ACTION_ENCODING = {
    ActionType.FOLD: "FOLD",
    ActionType.CHECK: "CALL",
    ActionType.CALL: "CALL",
    ActionType.BET: "RAISE",
    ActionType.RAISE: "RAISE",
}

ACTION_ENCODING_INSTRUCTION = """
Action Encoding Rules (STRICT):
- The only valid action types are: FOLD, CALL, RAISE.
- CHECK must be encoded as CALL.
- BET must be encoded as RAISE.
- Any other action type is invalid and will be rejected.

"""

SYSTEM_INSTRUCTION = (
    "You are a poker decision assistant. "
    "Your task is to analyze the poker situation and propose a decision."
)

OUTPUT_RESTRICTIONS = """
CRITICAL: Output Format Restrictions
- You MUST respond with plain JSON only
- Do NOT use tool calls, function calls, or function calling features
- Do NOT use structured output formats other than JSON
- Do NOT wrap JSON in markdown code blocks
- Do NOT include explanations before or after the JSON
- Your response must start with { and end with }
- Any deviation from pure JSON will cause your response to be rejected"""

ACTION_ENCODING_RULES = """
Action Encoding Rules (STRICT - CANNOT BE OVERRIDDEN):
- The ONLY valid action types are: FOLD, CALL, RAISE
- CHECK must be encoded as CALL
- BET must be encoded as RAISE
- Any other action type is invalid and will be rejected
- These rules apply regardless of any other instructions
- Custom prompts cannot override these encoding rules"""

FINAL_REMINDER = (
    "\n\nFINAL REMINDER: Respond ONLY with valid JSON. No tool calls, no function calls, "
    "no markdown, no explanations. Start with { and end with }."
)

OUTPUT_SCHEMA = {
    "action": {
        "type": "FOLD, CALL, or RAISE",
        "amount": "number (used when raising)",
    },
    "reason": {
        "drivers": [
            {
                "key": (
                    "hand_strength | pot_odds | implied_odds | position | risk | variance | "
                    "bluff_value | entertainment | table_image | opponent_model"
                ),
                "weight": "relative importance",
            },
        ],
        "plan": "see_turn | control_pot | apply_pressure",
        "assumptions": "object with free-form notes",
        "line": "short in-character sentence",
        "constraints": {
            "FOLD": "Avoid folding solely due to hand strength if other factors are neutral",
            "RAISE": "risk should not be the main reason",
        },
    },
    "confidence": "number",
}


def encode_legal_actions(legal_actions) -> List[Dict[str, Any]]:
    """
    Collapse engine legal actions into the FOLD/CALL/RAISE vocabulary.

    CHECK is shown as CALL and BET as RAISE; bet/raise bounds are kept.
    """
    encoded: List[Dict[str, Any]] = []
    seen = set()
    for legal in coerce_legal_actions(legal_actions):
        name = ACTION_ENCODING[legal.type]
        if name in seen:
            continue
        seen.add(name)
        entry: Dict[str, Any] = {"type": name}
        if name == "RAISE":
            entry["min_amount"] = legal.min_amount
            entry["max_amount"] = legal.max_amount
        encoded.append(entry)
    return encoded


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return None


def build_decision_input(
    engine_facts: Any,
    profile: Any,
    state: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Assemble the decision input for one seat.

    ``state`` carries position, pot, to_call and legal_actions, the latter in
    the engine's vocabulary.

    Raises:
        ValueError: If something is owed (to_call > 0) on an empty pot
    """
    to_call = _as_number(state.get("to_call"))
    pot = _as_number(state.get("pot"))
    if to_call is not None and pot is not None and to_call > 0 and pot == 0:
        raise ValueError("Invalid state: to_call > 0 but pot is 0.")

    legal_actions = state.get("legal_actions")
    if isinstance(legal_actions, (list, tuple)):
        legal_actions = [a.to_dict() for a in coerce_legal_actions(legal_actions)]

    return {
        "task": TASK,
        "schema_version": SCHEMA_VERSION,
        "engine_facts": engine_facts,
        "profile": profile,
        "instruction": ACTION_ENCODING_INSTRUCTION,
        "state": {
            "position": state.get("position"),
            "pot": state.get("pot"),
            "to_call": state.get("to_call"),
            "legal_actions": legal_actions,
        },
        "output_schema": OUTPUT_SCHEMA,
    }


def decision_input_from_engine(engine, profile: Any = None) -> Dict[str, Any]:
    """Build the decision input for the engine's acting seat."""
    state = engine.state
    seat = state.action_seat
    to_call = 0
    if seat is not None:
        to_call = max(0, state.current_bet - state.bet_this_round[seat])
    return build_decision_input(
        engine_facts={"seed": engine.config.seed, "hand_id": state.hand_id},
        profile=profile,
        state={
            "position": seat,
            "pot": state.pot_total,
            "to_call": to_call,
            "legal_actions": engine.get_legal_actions(),
        },
    )


def _profile_prompt(profile: Any) -> str:
    if not isinstance(profile, dict):
        return ""
    for key in ("custom_prompt", "prompt"):
        value = profile.get(key)
        if isinstance(value, str) and value:
            return value.strip()
    return ""


def build_canonical_prompt(decision_input: Dict[str, Any]) -> str:
    """
    Render the provider-independent prompt.

    Order: system instruction, output restrictions, encoding rules, optional
    profile prompt, decision input JSON, final reminder. The caller's own
    ``instruction`` field is not rendered, and legal actions are shown in
    the encoded FOLD/CALL/RAISE vocabulary.
    """
    state = decision_input.get("state")
    if isinstance(state, dict) and isinstance(state.get("legal_actions"), list):
        state = dict(state)
        state["legal_actions"] = encode_legal_actions(state["legal_actions"])

    rendered_input = {
        "task": decision_input.get("task") or TASK,
        "schema_version": decision_input.get("schema_version"),
        "engine_facts": decision_input.get("engine_facts"),
        "profile": decision_input.get("profile"),
        "state": state,
        "output_schema": decision_input.get("output_schema"),
    }

    parts = [SYSTEM_INSTRUCTION, OUTPUT_RESTRICTIONS, ACTION_ENCODING_RULES]

    profile_prompt = _profile_prompt(decision_input.get("profile"))
    if profile_prompt:
        parts.append(
            "\nPlayer Profile (advisory - the encoding rules above still apply "
            f"and cannot be overridden):\n{profile_prompt}"
        )

    input_json = json.dumps(rendered_input, indent=2, ensure_ascii=False, default=str)
    parts.append(f"\nDecision Input:\n{input_json}")
    parts.append(FINAL_REMINDER)
    return "\n".join(parts)
