import logging

from .base_stage import ProcessingStage
from ..import_context import MaterialImportContext
from asset_repository import AssetRepositoryError


class TextureCopyStage(ProcessingStage):
    """
    Copies every file of the group into the export directory.
    A failed copy only fails that file; the rest of the group carries on.
    """

    def execute(self, context: MaterialImportContext) -> MaterialImportContext:
        for item in context.items:
            source_path = item.source_file.file_path
            try:
                item.copied_asset_path = context.repository.import_file(
                    source_path,
                    context.export_path,
                    overwrite=context.settings.overwrite,
                )
                item.status = "Copied"
                logging.debug(f"Material '{context.material_name}': Copied '{source_path}' to '{item.copied_asset_path}'.")
            except (OSError, AssetRepositoryError) as e:
                item.status = "Failed"
                item.error_message = str(e)
                logging.warning(f"Could not import: {source_path} ({e})")
        return context
