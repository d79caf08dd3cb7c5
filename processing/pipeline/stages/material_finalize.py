import logging

from .base_stage import ProcessingStage
from ..import_context import MaterialImportContext


class MaterialFinalizeStage(ProcessingStage):
    """
    Persists the group's material: new materials are created, reused ones saved.
    """

    def execute(self, context: MaterialImportContext) -> MaterialImportContext:
        if context.material is None:
            raise ValueError(f"Material '{context.material_name}': No material to finalize.")

        if context.is_new_material:
            context.repository.create_material(context.material)
            context.status_flags['material_created'] = True
        else:
            context.repository.save_material(context.material)
            context.status_flags['material_reused'] = True

        assigned = sum(1 for item in context.items if item.status == "Assigned")
        logging.info(f"Material '{context.material_name}': Finalized with {assigned} of {len(context.items)} texture(s) assigned.")
        return context
