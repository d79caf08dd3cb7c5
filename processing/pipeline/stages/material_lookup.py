import logging

from .base_stage import ProcessingStage
from ..import_context import MaterialImportContext
from asset_repository import MaterialAsset


class MaterialLookupStage(ProcessingStage):
    """
    Finds the material named after the group in the export directory, or prepares
    a new one. A new material is only written by MaterialFinalizeStage.
    """

    def execute(self, context: MaterialImportContext) -> MaterialImportContext:
        material_name = context.material_name
        existing_path = context.repository.find_material(material_name, context.export_path)

        if existing_path is None:
            context.material = MaterialAsset(
                name=material_name,
                directory=context.export_path,
                shader_name=context.settings.shader_name,
            )
            context.is_new_material = True
            logging.info(f"Material '{material_name}': Not found in '{context.export_path}', a new material will be created.")
            return context

        if context.settings.material_conflict_policy == "abort":
            logging.warning(f"{material_name}{context.settings.material_file_extension} Already Exists. Import cancelled.")
            context.status_flags['skip_material'] = True
            context.status_flags['skip_reason'] = "Material already exists"
            return context

        context.material = context.repository.load_material(existing_path)
        context.is_new_material = False
        logging.info(f"Material '{material_name}': Reusing existing material at '{existing_path}'.")
        if context.material.shader_name != context.settings.shader_name:
            logging.warning(
                f"Material '{material_name}': Existing material uses shader '{context.material.shader_name}', "
                f"keeping it instead of '{context.settings.shader_name}'."
            )
        return context
