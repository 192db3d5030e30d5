"""
cardpt Gateway - validation pipeline for model-proposed decisions

Models only ever propose. A proposal is parsed strictly, checked against
the decision schema, then gated by the preset's authority and by the
engine's legal actions before a caller may apply it.
"""

from cardpt.gateway.capability import ActionMode, CapabilityLevel, validate_seat_ai_config
from cardpt.gateway.credentials import ProviderCredential, create_credential_store
from cardpt.gateway.decision import (
    Decision, DecisionValidationError, parse_decision, validate_decision,
)
from cardpt.gateway.gate import enforce_capability_gate
from cardpt.gateway.pipeline import (
    AcceptedProposal, DecisionGateway, FallbackProposal, MessageCode,
    ProposalRequest, RejectedProposal, RejectReason, propose_decision,
)
from cardpt.gateway.presets import DEFAULT_REGISTRY, ModelPreset, PresetRegistry
from cardpt.gateway.prompt import build_canonical_prompt, build_decision_input
from cardpt.gateway.settings import GatewaySettings

__all__ = [
    "ActionMode",
    "CapabilityLevel",
    "validate_seat_ai_config",
    "ProviderCredential",
    "create_credential_store",
    "Decision",
    "DecisionValidationError",
    "parse_decision",
    "validate_decision",
    "enforce_capability_gate",
    "AcceptedProposal",
    "DecisionGateway",
    "FallbackProposal",
    "MessageCode",
    "ProposalRequest",
    "RejectedProposal",
    "RejectReason",
    "propose_decision",
    "DEFAULT_REGISTRY",
    "ModelPreset",
    "PresetRegistry",
    "build_canonical_prompt",
    "build_decision_input",
    "GatewaySettings",
]
