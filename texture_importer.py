# texture_importer.py

import logging
from pathlib import Path
from typing import Optional, Union

from asset_repository import AssetRepository, AssetRepositoryError, FileSystemAssetRepository
from configuration import ConfigurationError, ImportSettings
from processing.pipeline.group_builder import build_folder_group, build_material_groups, collect_source_files
from processing.pipeline.orchestrator import ImportOrchestrator
from processing.utils.suffix_mapping import SuffixMapper
from rule_structure import ImportReport
from utils.path_utils import folder_name_from_path

log = logging.getLogger(__name__)


class TextureImportError(Exception):
    """Custom exception for errors that stop an import run before any file is processed."""
    pass


class TextureImporter:
    """
    Imports a folder of texture files into the project and assembles materials
    from them. All host access goes through the injected AssetRepository.
    """

    def __init__(self, settings: ImportSettings, repository: Optional[AssetRepository] = None,
                 orchestrator: Optional[ImportOrchestrator] = None):
        """
        Args:
            settings: The import settings for runs made with this importer.
            repository: Asset repository to import into. Defaults to a
                        FileSystemAssetRepository rooted at settings.project_root.
            orchestrator: Stage runner, mainly for tests.
        """
        if not isinstance(settings, ImportSettings):
            raise TextureImportError("settings must be an ImportSettings object.")
        try:
            settings.validate()
        except ConfigurationError as e:
            raise TextureImportError(f"Invalid import settings: {e}")

        self.settings: ImportSettings = settings
        self.repository: AssetRepository = repository if repository is not None else FileSystemAssetRepository(
            settings.project_root, material_extension=settings.material_file_extension
        )
        self.suffix_mapper = SuffixMapper(settings.suffix_slot_mapping)
        self.orchestrator = orchestrator if orchestrator is not None else ImportOrchestrator()
        log.debug("TextureImporter initialized.")

    def import_folder(self, source_folder: Union[str, Path]) -> ImportReport:
        """
        Imports all matching texture files of source_folder.

        Args:
            source_folder: Directory holding the texture files.

        Returns:
            ImportReport summarising textures taken and materials created.

        Raises:
            TextureImportError: If the folder is missing, the shader is unknown,
                                the export folder cannot be created, or folder
                                naming is on and the folder has no name (a root).
        """
        source_folder = Path(source_folder)
        if not source_folder.is_dir():
            raise TextureImportError(f"Source folder does not exist or is not a directory: {source_folder}")

        log.info(f"TextureImporter starting import from '{source_folder}' "
                 f"(separator='{self.settings.separator_token}', overwrite={self.settings.overwrite})")
        report = ImportReport(source_folder=str(source_folder))

        try:
            shader_properties = self.repository.find_shader(self.settings.shader_name)
            export_path = self.repository.ensure_folder(self.settings.asset_root_dir, self.settings.export_dir_name)
        except AssetRepositoryError as e:
            raise TextureImportError(str(e))

        source_files = collect_source_files(source_folder, self.settings, report)
        if not source_files:
            log.info(f"No texture files to import in '{source_folder}'.")
            log.info(report.summary())
            return report

        if self.settings.material_naming == "folder":
            # Relative inputs like '.' or '..' only carry a usable name once resolved
            folder_name = folder_name_from_path(source_folder.resolve())
            if not folder_name:
                raise TextureImportError(f"Cannot name a material after folder '{source_folder}'.")
            groups = build_folder_group(folder_name, source_files)
        else:
            groups = build_material_groups(source_files)

        self.orchestrator.process_groups(
            groups,
            settings=self.settings,
            repository=self.repository,
            suffix_mapper=self.suffix_mapper,
            export_path=export_path,
            shader_properties=shader_properties,
            report=report,
        )

        if report.materials_reused:
            log.info(f"Reused {len(report.materials_reused)} existing material(s): {report.materials_reused}")
        if report.failed_files or report.skipped_files:
            log.info(f"{len(report.failed_files)} file(s) failed, {len(report.skipped_files)} skipped.")
        if report.aborted:
            log.warning("Import was aborted early because of an unmatched file name.")
        log.info(report.summary())
        return report
