import dataclasses
from typing import List


@dataclasses.dataclass
class SourceFile:
    file_path: str = None
    material_name: str = None # Everything before the last separator token
    suffix: str = None # Token between the last separator and the extension (e.g., 'a', 'ao')
    extension: str = None # Without the dot, original case

    @property
    def file_name(self) -> str:
        cut = max(self.file_path.rfind('/'), self.file_path.rfind('\\'))
        return self.file_path[cut + 1:]


@dataclasses.dataclass
class MaterialGroup:
    material_name: str = None
    files: List[SourceFile] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class ImportReport:
    """
    Outcome of a single import run. Lists hold material names or file paths.
    """
    source_folder: str = None
    textures_taken: int = 0
    materials_created: List[str] = dataclasses.field(default_factory=list)
    materials_reused: List[str] = dataclasses.field(default_factory=list)
    materials_skipped: List[str] = dataclasses.field(default_factory=list) # Conflict policy 'abort'
    materials_failed: List[str] = dataclasses.field(default_factory=list)
    skipped_files: List[str] = dataclasses.field(default_factory=list) # Unmatched name or extension
    failed_files: List[str] = dataclasses.field(default_factory=list) # Copy or resolve failures
    unknown_suffix_files: List[str] = dataclasses.field(default_factory=list)
    aborted: bool = False

    def summary(self) -> str:
        return f"{self.textures_taken} Textures taken, {len(self.materials_created)} Materials created."
