"""
Action modes, capability levels and seat AI configuration checks.

An action mode is the policy a seat runs under (manual or one of the AI
modes). A capability level is the authority tier of a model preset. Each
mode permits a fixed set of capability levels:

    manual           -> none
    ai_basic         -> L1_BASIC
    ai_standard      -> L1_BASIC, L2_STANDARD
    ai_experimental  -> L1_BASIC, L2_STANDARD, L3_EXPERIMENTAL

L1_BASIC may only fold or call. L2_STANDARD and L3_EXPERIMENTAL carry the
same authority; "experimental" is a presentation label only.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional


class ActionMode(str, Enum):
    """Policy a seat runs under."""
    MANUAL = "manual"
    AI_BASIC = "ai_basic"
    AI_STANDARD = "ai_standard"
    AI_EXPERIMENTAL = "ai_experimental"


class CapabilityLevel(str, Enum):
    """Authority tier of a model preset, most restricted first."""
    L1_BASIC = "L1_BASIC"
    L2_STANDARD = "L2_STANDARD"
    L3_EXPERIMENTAL = "L3_EXPERIMENTAL"


ALLOWED_CAPABILITIES: Mapping[ActionMode, FrozenSet[CapabilityLevel]] = MappingProxyType({
    ActionMode.MANUAL: frozenset(),
    ActionMode.AI_BASIC: frozenset({CapabilityLevel.L1_BASIC}),
    ActionMode.AI_STANDARD: frozenset({
        CapabilityLevel.L1_BASIC,
        CapabilityLevel.L2_STANDARD,
    }),
    ActionMode.AI_EXPERIMENTAL: frozenset({
        CapabilityLevel.L1_BASIC,
        CapabilityLevel.L2_STANDARD,
        CapabilityLevel.L3_EXPERIMENTAL,
    }),
})

# Capability levels whose decisions may contain RAISE
RAISE_CAPABLE: FrozenSet[CapabilityLevel] = frozenset({
    CapabilityLevel.L2_STANDARD,
    CapabilityLevel.L3_EXPERIMENTAL,
})


def is_capability_allowed(mode: ActionMode, capability: CapabilityLevel) -> bool:
    return CapabilityLevel(capability) in ALLOWED_CAPABILITIES[ActionMode(mode)]


def can_raise(capability: CapabilityLevel) -> bool:
    return CapabilityLevel(capability) in RAISE_CAPABLE


class AiConfigFailureReason(str, Enum):
    MANUAL_MODE_NO_PRESET_ALLOWED = "MANUAL_MODE_NO_PRESET_ALLOWED"
    AI_MODE_PRESET_REQUIRED = "AI_MODE_PRESET_REQUIRED"
    PRESET_CAPABILITY_NOT_ALLOWED = "PRESET_CAPABILITY_NOT_ALLOWED"


AI_CONFIG_FAILURE_MESSAGES = MappingProxyType({
    AiConfigFailureReason.MANUAL_MODE_NO_PRESET_ALLOWED:
        "AI is disabled for this seat. Manual mode does not allow model selection.",
    AiConfigFailureReason.AI_MODE_PRESET_REQUIRED:
        "A model must be selected for AI mode. Please configure a model preset.",
    AiConfigFailureReason.PRESET_CAPABILITY_NOT_ALLOWED:
        "Selected model exceeds the authority allowed by this seat's AI mode.",
})


@dataclass(frozen=True)
class AiConfigFailure:
    """Why a seat's mode and preset cannot be used together."""
    reason: AiConfigFailureReason
    message: str
    allow_manual_fallback: bool = True

    @classmethod
    def of(cls, reason: AiConfigFailureReason) -> AiConfigFailure:
        return cls(reason=reason, message=AI_CONFIG_FAILURE_MESSAGES[reason])


def validate_seat_ai_config(mode: ActionMode, preset) -> Optional[AiConfigFailure]:
    """
    Check a seat's action mode against its selected preset.

    Args:
        mode: The seat's action mode
        preset: Selected ModelPreset, or None

    Returns:
        None if the combination is valid, otherwise the failure
    """
    mode = ActionMode(mode)
    if mode == ActionMode.MANUAL:
        if preset is not None:
            return AiConfigFailure.of(AiConfigFailureReason.MANUAL_MODE_NO_PRESET_ALLOWED)
        return None

    if preset is None:
        return AiConfigFailure.of(AiConfigFailureReason.AI_MODE_PRESET_REQUIRED)

    if not is_capability_allowed(mode, preset.capability):
        return AiConfigFailure.of(AiConfigFailureReason.PRESET_CAPABILITY_NOT_ALLOWED)

    return None
