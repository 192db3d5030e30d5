"""
Model presets.

A preset names a provider, a provider-side model identifier and the
capability level decisions from it are trusted with. Presets are looked up
through a read-only PresetRegistry that is built once and injected into
the gateway.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from cardpt.gateway.capability import CapabilityLevel


@dataclass(frozen=True)
class ModelPreset:
    """
    A selectable model.

    Attributes:
        id: Stable preset identifier
        display_name: Label for UIs
        provider: Provider key (qwen, doubao, deepseek, gemini)
        model_name: Identifier sent to the provider
        capability: Authority tier of decisions from this preset
        ui_flags: Presentation hints; never consulted for authority
    """
    id: str
    display_name: str
    provider: str
    model_name: str
    capability: CapabilityLevel
    ui_flags: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "provider": self.provider,
            "model_name": self.model_name,
            "capability": self.capability.value,
            "ui_flags": dict(self.ui_flags),
        }


class PresetRegistry:
    """Read-only preset lookup."""

    def __init__(self, presets: Iterable[ModelPreset]):
        table: Dict[str, ModelPreset] = {}
        for preset in presets:
            if preset.id in table:
                raise ValueError(f"Duplicate preset id: {preset.id}")
            table[preset.id] = preset
        self._presets = MappingProxyType(table)

    def get(self, preset_id: str) -> Optional[ModelPreset]:
        return self._presets.get(preset_id)

    def __contains__(self, preset_id: object) -> bool:
        return preset_id in self._presets

    def __iter__(self):
        return iter(self._presets.values())

    def __len__(self) -> int:
        return len(self._presets)

    def for_provider(self, provider: str) -> List[ModelPreset]:
        return [p for p in self._presets.values() if p.provider == provider]


DEFAULT_PRESETS = (
    ModelPreset(
        id="qwen-flash",
        display_name="Qwen Flash",
        provider="qwen",
        model_name="qwen-turbo",
        capability=CapabilityLevel.L1_BASIC,
    ),
    ModelPreset(
        id="qwen-plus",
        display_name="Qwen Plus",
        provider="qwen",
        model_name="qwen-plus",
        capability=CapabilityLevel.L2_STANDARD,
    ),
    ModelPreset(
        id="qwen-max",
        display_name="Qwen Max",
        provider="qwen",
        model_name="qwen-max",
        capability=CapabilityLevel.L3_EXPERIMENTAL,
    ),
    ModelPreset(
        id="doubao-seed-1.6-lite",
        display_name="Doubao Seed 1.6 Lite",
        provider="doubao",
        model_name="ep-20251226202334-45f5l",
        capability=CapabilityLevel.L1_BASIC,
    ),
    ModelPreset(
        id="doubao-seed-1.8",
        display_name="Doubao Seed 1.8",
        provider="doubao",
        model_name="ep-20251226202046-b6svb",
        capability=CapabilityLevel.L3_EXPERIMENTAL,
        ui_flags=MappingProxyType({"experimental": True, "agent_style": True}),
    ),
    ModelPreset(
        id="deepseek-v3.2",
        display_name="DeepSeek V3",
        provider="deepseek",
        model_name="ep-20251226201345-bb46w",
        capability=CapabilityLevel.L2_STANDARD,
    ),
    ModelPreset(
        id="gemini-flash",
        display_name="Gemini 2.5 Flash",
        provider="gemini",
        model_name="2.5-flash",
        capability=CapabilityLevel.L1_BASIC,
    ),
    ModelPreset(
        id="gemini-pro",
        display_name="Gemini 3 Flash Preview",
        provider="gemini",
        model_name="3-flash-preview",
        capability=CapabilityLevel.L2_STANDARD,
    ),
)

DEFAULT_REGISTRY = PresetRegistry(DEFAULT_PRESETS)
