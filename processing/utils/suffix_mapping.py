import logging
from enum import Enum
from typing import Dict, List, Mapping, Optional

log = logging.getLogger(__name__)


class MaterialSlot(Enum):
    """Texture slots a material exposes, independent of the shader's property names."""
    ALBEDO = "Albedo"
    METAL_ROUGHNESS = "MetalRoughness"
    NORMAL = "Normal"
    HEIGHT = "Height"
    OCCLUSION = "Occlusion"
    EMISSIVE = "Emissive"


# Suffix token (after the separator) -> slot name
DEFAULT_SUFFIX_SLOT_MAPPING: Dict[str, str] = {
    "a": "ALBEDO",
    "c": "ALBEDO",
    "d": "ALBEDO",
    "m": "METAL_ROUGHNESS",
    "s": "METAL_ROUGHNESS",
    "n": "NORMAL",
    "h": "HEIGHT",
    "b": "HEIGHT",
    "ao": "OCCLUSION",
    "e": "EMISSIVE",
}

STANDARD_SHADER_NAME = "Standard"

STANDARD_SHADER_PROPERTIES: Dict[MaterialSlot, str] = {
    MaterialSlot.ALBEDO: "_MainTex",
    MaterialSlot.METAL_ROUGHNESS: "_MetallicGlossMap",
    MaterialSlot.NORMAL: "_BumpMap",
    MaterialSlot.HEIGHT: "_ParallaxMap",
    MaterialSlot.OCCLUSION: "_OcclusionMap",
    MaterialSlot.EMISSIVE: "_EmissionMap",
}

SHADER_PROPERTY_TABLES: Dict[str, Dict[MaterialSlot, str]] = {
    STANDARD_SHADER_NAME: STANDARD_SHADER_PROPERTIES,
}


def parse_slot(slot_name: str) -> MaterialSlot:
    """
    Resolves a slot from its enum name ('METAL_ROUGHNESS') or its value ('MetalRoughness').
    Matching is case-insensitive.

    Raises:
        ValueError: If the name matches no slot.
    """
    if isinstance(slot_name, MaterialSlot):
        return slot_name
    if not isinstance(slot_name, str):
        raise ValueError(f"Slot name must be a string, got {type(slot_name).__name__}")
    wanted = slot_name.strip().upper()
    for slot in MaterialSlot:
        if wanted == slot.name or wanted == slot.value.upper():
            return slot
    raise ValueError(f"Unknown material slot '{slot_name}'. Must be one of {[s.name for s in MaterialSlot]}.")


class SuffixMapper:
    """
    Maps filename suffix tokens to material slots.
    Lookups ignore case; a suffix with no entry maps to None.
    """

    def __init__(self, mapping: Optional[Mapping[str, str]] = None):
        raw_mapping = DEFAULT_SUFFIX_SLOT_MAPPING if mapping is None else mapping
        self._table: Dict[str, MaterialSlot] = {}
        for suffix, slot_name in raw_mapping.items():
            key = str(suffix).strip().lower()
            if not key:
                raise ValueError("Suffix mapping contains an empty suffix.")
            self._table[key] = parse_slot(slot_name)
        log.debug(f"SuffixMapper initialized with {len(self._table)} suffixes: {self.known_suffixes}")

    def slot_for(self, suffix: str) -> Optional[MaterialSlot]:
        if suffix is None:
            return None
        return self._table.get(suffix.lower())

    @property
    def known_suffixes(self) -> List[str]:
        return sorted(self._table)

    def as_dict(self) -> Dict[str, str]:
        return {suffix: slot.name for suffix, slot in self._table.items()}
