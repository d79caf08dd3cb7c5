import logging
from pathlib import Path
from typing import List, Union

from configuration import ImportSettings
from processing.utils.filename_parsing import FilenameParseError, is_supported_image, parse_texture_filename
from rule_structure import ImportReport, MaterialGroup, SourceFile

log = logging.getLogger(__name__)


def list_folder_files(folder: Union[str, Path]) -> List[Path]:
    """Regular, non-hidden files directly inside folder, sorted by name."""
    folder = Path(folder)
    files = [p for p in folder.iterdir() if p.is_file() and not p.name.startswith('.')]
    return sorted(files, key=lambda p: p.name)


def collect_source_files(folder: Union[str, Path], settings: ImportSettings, report: ImportReport) -> List[SourceFile]:
    """
    Parses the texture files of folder into SourceFiles sorted by material name.

    Files that do not match the naming convention are recorded in
    report.skipped_files. With the 'abort' unmatched-file policy the first
    such file stops collection; files listed before it are still returned.
    """
    source_files: List[SourceFile] = []

    for path in list_folder_files(folder):
        try:
            source_files.append(parse_texture_filename(path, settings.separator_token, settings.image_extensions))
        except FilenameParseError as e:
            report.skipped_files.append(str(path))
            if settings.unmatched_file_policy == "abort":
                log.error(f"Aborting import at '{path.name}': {e}")
                report.aborted = True
                break
            if not is_supported_image(path, settings.image_extensions):
                log.info(f"Ignoring non-texture file '{path.name}'.")
            else:
                log.warning(f"Skipping '{path.name}': {e}")

    # Sorting by material name first keeps every group contiguous even when one
    # material name is a prefix of another ('wood' vs 'wood_c').
    source_files.sort(key=lambda sf: (sf.material_name, sf.file_name))
    log.debug(f"Collected {len(source_files)} texture file(s) from '{folder}'.")
    return source_files


def build_material_groups(source_files: List[SourceFile]) -> List[MaterialGroup]:
    """
    Groups consecutive files sharing a material name. Input must already be
    sorted; a name that reappears later starts a second group.
    """
    groups: List[MaterialGroup] = []
    current: MaterialGroup = None

    for source_file in source_files:
        if current is None or source_file.material_name != current.material_name:
            current = MaterialGroup(material_name=source_file.material_name)
            groups.append(current)
        current.files.append(source_file)

    log.debug(f"Built {len(groups)} material group(s): {[g.material_name for g in groups]}")
    return groups


def build_folder_group(folder_name: str, source_files: List[SourceFile]) -> List[MaterialGroup]:
    """All files in a single group named after the source folder."""
    if not source_files:
        return []
    return [MaterialGroup(material_name=folder_name, files=list(source_files))]
