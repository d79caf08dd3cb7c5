import logging
from typing import Dict

from .base_stage import ProcessingStage
from ..import_context import MaterialImportContext
from processing.utils.suffix_mapping import MaterialSlot


class SlotAssignmentStage(ProcessingStage):
    """
    Assigns resolved textures to material slots according to their filename suffix.
    Existing slot contents are overwritten in place.
    """

    def execute(self, context: MaterialImportContext) -> MaterialImportContext:
        material_name = context.material_name
        assigned_from: Dict[MaterialSlot, str] = {}

        for item in context.items:
            if item.status != "Resolved":
                continue
            source_path = item.source_file.file_path
            suffix = item.source_file.suffix

            slot = context.suffix_mapper.slot_for(suffix)
            if slot is None:
                item.status = "Unassigned"
                context.status_flags.setdefault('unknown_suffix_files', []).append(source_path)
                logging.warning(f"Material '{material_name}': Unknown suffix '{suffix}' in file '{source_path}'. No slot assigned.")
                continue

            property_name = context.shader_properties.get(slot)
            if property_name is None:
                item.status = "Unassigned"
                logging.warning(
                    f"Material '{material_name}': Shader '{context.material.shader_name}' has no property "
                    f"for slot {slot.value}, '{source_path}' left unassigned."
                )
                continue

            if slot in assigned_from:
                logging.warning(
                    f"Material '{material_name}': Slot {slot.value} already filled from '{assigned_from[slot]}', "
                    f"replacing with '{source_path}'."
                )

            context.material.set_texture(property_name, item.texture)
            item.slot = slot
            item.status = "Assigned"
            assigned_from[slot] = source_path
            logging.debug(f"Material '{material_name}': Assigned '{item.texture.asset_path}' to {slot.value} ({property_name}).")

        return context
