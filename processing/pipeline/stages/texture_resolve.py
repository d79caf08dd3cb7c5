import logging

from .base_stage import ProcessingStage
from ..import_context import MaterialImportContext


class TextureResolveStage(ProcessingStage):
    """
    Refreshes the repository so the copies become importable, then resolves
    each copy to a texture handle.
    """

    def execute(self, context: MaterialImportContext) -> MaterialImportContext:
        copied_items = [item for item in context.items if item.status == "Copied"]
        if not copied_items:
            logging.debug(f"Material '{context.material_name}': Nothing copied, skipping texture resolution.")
            return context

        context.repository.refresh_imports()

        for item in copied_items:
            texture = context.repository.resolve_texture(item.copied_asset_path)
            if texture is None:
                item.status = "Failed"
                item.error_message = "Texture could not be resolved"
                logging.warning(f"Could not resolve texture: {item.copied_asset_path} (from {item.source_file.file_path})")
                continue
            item.texture = texture
            item.status = "Resolved"
        return context
