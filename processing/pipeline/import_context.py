from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from asset_repository import AssetRepository, MaterialAsset, TextureHandle
from configuration import ImportSettings
from processing.utils.suffix_mapping import MaterialSlot, SuffixMapper
from rule_structure import MaterialGroup, SourceFile


@dataclass
class TextureImportItem:
    """One source file on its way into a material slot."""
    source_file: SourceFile
    copied_asset_path: Optional[str] = None # Set by TextureCopyStage
    texture: Optional[TextureHandle] = None # Set by TextureResolveStage
    slot: Optional[MaterialSlot] = None # Set by SlotAssignmentStage
    status: str = "Pending" # Pending, Copied, Resolved, Assigned, Unassigned, Failed
    error_message: Optional[str] = None


@dataclass
class MaterialImportContext:
    group: MaterialGroup
    settings: ImportSettings
    repository: AssetRepository
    suffix_mapper: SuffixMapper
    export_path: str
    shader_properties: Dict[MaterialSlot, str]
    items: List[TextureImportItem] = field(default_factory=list)
    material: Optional[MaterialAsset] = None # The single material open for mutation
    is_new_material: bool = False
    status_flags: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_group(cls, group: MaterialGroup, **kwargs) -> 'MaterialImportContext':
        return cls(group=group, items=[TextureImportItem(source_file=f) for f in group.files], **kwargs)

    @property
    def material_name(self) -> str:
        return self.group.material_name

    def active_items(self) -> List[TextureImportItem]:
        return [item for item in self.items if item.status != "Failed"]
