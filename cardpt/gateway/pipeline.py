"""
Decision pipeline: the single entry point for model-proposed decisions.

Every request runs the same ordered steps and ends in exactly one outcome:

    ACCEPTED  - the decision passed every check
    REJECTED  - a step failed; carries a reason code and allows manual play
    FALLBACK  - policy says not to ask a model at all (manual mode)

Steps:
    1. resolve preset            -> invalid_ai_config
    2. manual mode               -> FALLBACK(manual_mode)
    3. mode x capability         -> invalid_ai_config
    4. credential                -> missing_credential
    5. canonical prompt          -> illegal_action (legal actions unreadable)
    6. adapter call              -> missing_credential (401/403/429) | provider_error
    7. strict JSON parse         -> invalid_json
    8. schema validation         -> schema_mismatch
    9. authority + legality gate -> capability_limit | illegal_action

Step 5 encodes the legal actions into the prompt, so legal actions that
cannot be read end the request there, before any provider call. Nothing is
retried and no other provider is tried. Failures are returned,
never raised. Logs carry request id, hand id, preset, provider and reason
only; API keys and prompts are never logged.
"""

from __future__ import annotations
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

import httpx

from cardpt.core.rules import ActionType
from cardpt.gateway.adapters import (
    AdapterRegistry, ProviderError, ProviderHTTPError, create_adapter_registry,
)
from cardpt.gateway.capability import ActionMode, validate_seat_ai_config
from cardpt.gateway.credentials import (
    ProviderCredential, check_credential, create_provider_error_failure,
    credential_summary, map_provider_error_to_failure,
)
from cardpt.gateway.decision import (
    Decision, DecisionSchemaError, InvalidJSONError, find_decision_issues,
    normalize_decision_payload, parse_decision, parse_single_json_object,
)
from cardpt.gateway.gate import coerce_legal_actions, enforce_capability_gate
from cardpt.gateway.presets import DEFAULT_REGISTRY, PresetRegistry
from cardpt.gateway.prompt import build_canonical_prompt
from cardpt.gateway.settings import GatewaySettings


logger = logging.getLogger(__name__)

# HTTP statuses reported as credential failures rather than provider errors
CREDENTIAL_STATUSES = (401, 403, 429)


class ProposalType(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    FALLBACK = "FALLBACK"


class RejectReason(str, Enum):
    INVALID_AI_CONFIG = "invalid_ai_config"
    MISSING_CREDENTIAL = "missing_credential"
    PROVIDER_ERROR = "provider_error"
    INVALID_JSON = "invalid_json"
    SCHEMA_MISMATCH = "schema_mismatch"
    ILLEGAL_ACTION = "illegal_action"
    CAPABILITY_LIMIT = "capability_limit"


class MessageCode(str, Enum):
    """Stable keys for caller-side display."""
    AI_CONFIG_INVALID = "AI_CONFIG_INVALID"
    CREDENTIAL_MISSING = "CREDENTIAL_MISSING"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    INVALID_RESPONSE_FORMAT = "INVALID_RESPONSE_FORMAT"
    RESPONSE_SCHEMA_MISMATCH = "RESPONSE_SCHEMA_MISMATCH"
    ACTION_NOT_LEGAL = "ACTION_NOT_LEGAL"
    CAPABILITY_RESTRICTED = "CAPABILITY_RESTRICTED"


MESSAGE_CODES = {
    RejectReason.INVALID_AI_CONFIG: MessageCode.AI_CONFIG_INVALID,
    RejectReason.MISSING_CREDENTIAL: MessageCode.CREDENTIAL_MISSING,
    RejectReason.PROVIDER_ERROR: MessageCode.PROVIDER_ERROR,
    RejectReason.INVALID_JSON: MessageCode.INVALID_RESPONSE_FORMAT,
    RejectReason.SCHEMA_MISMATCH: MessageCode.RESPONSE_SCHEMA_MISMATCH,
    RejectReason.ILLEGAL_ACTION: MessageCode.ACTION_NOT_LEGAL,
    RejectReason.CAPABILITY_LIMIT: MessageCode.CAPABILITY_RESTRICTED,
}


class FallbackReason(str, Enum):
    MANUAL_MODE = "manual_mode"


@dataclass(frozen=True)
class AcceptedProposal:
    """
    A decision that passed every check.

    ``engine_action`` and ``amount`` are what the intent maps to in the
    engine's vocabulary; applying them is still up to the caller.
    """
    decision: Decision
    engine_action: ActionType
    amount: Optional[int] = None
    type: ProposalType = field(default=ProposalType.ACCEPTED, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "decision": self.decision.to_dict(),
            "engine_action": {"type": self.engine_action.value, "amount": self.amount},
        }


@dataclass(frozen=True)
class RejectedProposal:
    """A failed step. The seat always falls back to manual control."""
    reason: RejectReason
    message: str
    type: ProposalType = field(default=ProposalType.REJECTED, init=False)
    allow_manual_fallback: bool = field(default=True, init=False)
    fallback: bool = field(default=True, init=False)

    @property
    def message_code(self) -> MessageCode:
        return MESSAGE_CODES[self.reason]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "reason": self.reason.value,
            "message": self.message,
            "message_code": self.message_code.value,
            "allow_manual_fallback": self.allow_manual_fallback,
            "fallback": self.fallback,
        }


@dataclass(frozen=True)
class FallbackProposal:
    """Model invocation was not attempted by policy."""
    reason: FallbackReason
    message: str
    type: ProposalType = field(default=ProposalType.FALLBACK, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "reason": self.reason.value, "message": self.message}


ProposalResult = Union[AcceptedProposal, RejectedProposal, FallbackProposal]


@dataclass
class ProposalRequest:
    """
    One decision request.

    Attributes:
        input: Decision input (see prompt.build_decision_input); its
            ``state.legal_actions`` are in the engine's vocabulary
        action_mode: The seat's action mode
        preset_id: Model preset to ask
        credential: API key for the preset's provider, if any
        request_id: Correlation id for logs; derived from the hand id if omitted
    """
    input: Dict[str, Any]
    action_mode: ActionMode
    preset_id: str
    credential: Optional[ProviderCredential] = None
    request_id: Optional[str] = None

    @property
    def hand_id(self) -> Optional[int]:
        facts = self.input.get("engine_facts") if isinstance(self.input, dict) else None
        if not isinstance(facts, dict):
            return None
        for key in ("hand_id", "handId"):
            value = facts.get(key)
            if isinstance(value, int) and not isinstance(value, bool):
                return value
        return None

    @property
    def legal_actions(self):
        state = self.input.get("state") if isinstance(self.input, dict) else None
        if not isinstance(state, dict):
            return []
        return state.get("legal_actions") or []


class DecisionGateway:
    """
    Runs the decision pipeline.

    Holds only read-only collaborators (preset registry, adapter registry,
    settings); each call to ``propose`` is independent.
    """

    def __init__(
        self,
        presets: PresetRegistry = DEFAULT_REGISTRY,
        adapters: Optional[AdapterRegistry] = None,
        settings: Optional[GatewaySettings] = None,
    ):
        self.presets = presets
        self.adapters = adapters if adapters is not None else create_adapter_registry()
        self.settings = settings if settings is not None else GatewaySettings.from_env()

    async def propose(self, request: ProposalRequest) -> ProposalResult:
        hand_id = request.hand_id
        request_id = request.request_id or (
            f"hand-{hand_id}" if hand_id is not None else f"req-{uuid.uuid4().hex[:12]}"
        )
        context = f"request_id={request_id} hand_id={hand_id} preset_id={request.preset_id}"
        logger.info(
            f"Decision proposal started: {context} "
            f"credential={credential_summary(request.credential)}"
        )

        def reject(reason: RejectReason, message: str, level: int = logging.WARNING) -> RejectedProposal:
            result = RejectedProposal(reason=reason, message=message)
            logger.log(
                level,
                f"Decision proposal rejected: {context} reason={reason.value} "
                f"message_code={result.message_code.value}",
            )
            return result

        # 1. Preset
        preset = self.presets.get(request.preset_id)
        if preset is None:
            return reject(
                RejectReason.INVALID_AI_CONFIG,
                f"Model preset '{request.preset_id}' not found.",
            )
        provider = preset.provider
        context = f"{context} provider={provider}"

        # 2. Manual mode
        try:
            mode = ActionMode(request.action_mode)
        except ValueError:
            return reject(
                RejectReason.INVALID_AI_CONFIG,
                f"Unknown action mode: {request.action_mode}",
            )
        if mode == ActionMode.MANUAL:
            logger.info(f"Decision proposal fallback to manual: {context}")
            return FallbackProposal(
                reason=FallbackReason.MANUAL_MODE,
                message="Manual mode is enabled. LLM invocation is not permitted.",
            )

        # 3. Mode x capability
        config_failure = validate_seat_ai_config(mode, preset)
        if config_failure is not None:
            return reject(RejectReason.INVALID_AI_CONFIG, config_failure.message)

        # 4. Credential
        credential_failure = check_credential(request.credential, provider)
        if credential_failure is not None:
            return reject(RejectReason.MISSING_CREDENTIAL, credential_failure.message)

        # 5. Prompt
        try:
            legal_actions = coerce_legal_actions(request.legal_actions)
        except (TypeError, ValueError) as e:
            return reject(RejectReason.ILLEGAL_ACTION, f"Legal actions are malformed: {e}")
        prompt = build_canonical_prompt(request.input)

        # 6. Transport
        adapter = self.adapters.get(provider)
        if adapter is None:
            return reject(
                RejectReason.PROVIDER_ERROR,
                f"No adapter available for provider: {provider}",
                logging.ERROR,
            )

        logger.info(f"Adapter invocation started: {context} model={preset.model_name}")
        timeout = self.settings.provider_timeout
        try:
            raw_text = await asyncio.wait_for(
                adapter.invoke(preset.model_name, prompt, request.credential.api_key),
                timeout=timeout,
            )
        except ProviderHTTPError as e:
            if e.status_code in CREDENTIAL_STATUSES:
                failure = map_provider_error_to_failure(
                    provider, e.status_code,
                    {"message": e.details or None, "retry_after": e.retry_after},
                )
                return reject(RejectReason.MISSING_CREDENTIAL, failure.message, logging.ERROR)
            if 500 <= e.status_code <= 599:
                failure = create_provider_error_failure(provider)
                return reject(RejectReason.PROVIDER_ERROR, failure.message, logging.ERROR)
            return reject(
                RejectReason.PROVIDER_ERROR,
                f"Provider request failed for {provider}: {e}",
                logging.ERROR,
            )
        except asyncio.TimeoutError:
            return reject(
                RejectReason.PROVIDER_ERROR,
                f"Provider request failed for {provider}: timed out after {timeout:g} seconds",
                logging.ERROR,
            )
        except (ProviderError, httpx.HTTPError, OSError) as e:
            return reject(
                RejectReason.PROVIDER_ERROR,
                f"Provider request failed for {provider}: {e}",
                logging.ERROR,
            )

        if self.settings.log_raw_output:
            logger.debug(f"Raw model output: {context} output={raw_text!r}")
        else:
            logger.info(f"Adapter invocation succeeded: {context} length={len(raw_text)}")

        # 7. Strict JSON
        try:
            parsed = parse_single_json_object(raw_text)
        except InvalidJSONError as e:
            return reject(RejectReason.INVALID_JSON, str(e))

        # 8. Schema
        try:
            decision = parse_decision(normalize_decision_payload(parsed))
        except DecisionSchemaError as e:
            return reject(RejectReason.SCHEMA_MISMATCH, str(e))

        for issue in find_decision_issues(decision):
            logger.warning(f"Decision sanity check: {context} action={decision.action.type} {issue}")

        # 9. Gate
        gate = enforce_capability_gate(decision.action, legal_actions, preset.capability)
        if not gate.valid:
            return reject(RejectReason(gate.violation.value), gate.message)

        logger.info(
            f"Decision proposal accepted: {context} action={decision.action.type} "
            f"engine_action={gate.engine_action.value} confidence={decision.confidence}"
        )
        return AcceptedProposal(
            decision=decision,
            engine_action=gate.engine_action,
            amount=gate.amount,
        )


async def propose_decision(
    input: Dict[str, Any],
    action_mode: ActionMode,
    preset_id: str,
    credential: Optional[ProviderCredential] = None,
    gateway: Optional[DecisionGateway] = None,
) -> ProposalResult:
    """Run one request through a (default) DecisionGateway."""
    gateway = gateway or DecisionGateway()
    return await gateway.propose(ProposalRequest(
        input=input,
        action_mode=action_mode,
        preset_id=preset_id,
        credential=credential,
    ))
