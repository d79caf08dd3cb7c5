import logging
from typing import Dict, Iterable, List, Optional

from asset_repository import AssetRepository
from configuration import ImportSettings
from rule_structure import ImportReport, MaterialGroup
from processing.utils.suffix_mapping import MaterialSlot, SuffixMapper

from .import_context import MaterialImportContext
from .stages.base_stage import ProcessingStage
from .stages.material_lookup import MaterialLookupStage
from .stages.texture_copy import TextureCopyStage
from .stages.texture_resolve import TextureResolveStage
from .stages.slot_assignment import SlotAssignmentStage
from .stages.material_finalize import MaterialFinalizeStage

log = logging.getLogger(__name__)


def default_stages() -> List[ProcessingStage]:
    return [
        MaterialLookupStage(),
        TextureCopyStage(),
        TextureResolveStage(),
        SlotAssignmentStage(),
        MaterialFinalizeStage(), # Must run last, persists the material
    ]


class ImportOrchestrator:
    """
    Runs the import stages over one material group at a time. Only one material
    is open for mutation at any point: a group is finalized before the next starts.
    """

    def __init__(self, stages: Optional[List[ProcessingStage]] = None):
        self.stages: List[ProcessingStage] = list(stages) if stages is not None else default_stages()

    def _execute_stages(self, context: MaterialImportContext, stop_on_skip: bool = True) -> MaterialImportContext:
        """Executes the configured stages in order, stopping on error or skip."""
        material_name = context.material_name
        for stage in self.stages:
            stage_name = stage.__class__.__name__
            log.debug(f"Material '{material_name}': Executing stage: {stage_name}")
            try:
                context = stage.execute(context)
            except Exception as e:
                log.error(f"Material '{material_name}': Error during stage '{stage_name}': {e}", exc_info=True)
                context.status_flags["material_failed"] = True
                context.status_flags["material_failed_stage"] = stage_name
                context.status_flags["material_failed_reason"] = str(e)
                break

            if stop_on_skip and context.status_flags.get("skip_material"):
                log.info(f"Material '{material_name}': Skipped by stage '{stage_name}'. Reason: {context.status_flags.get('skip_reason', 'N/A')}")
                break
        return context

    def process_groups(
        self,
        groups: Iterable[MaterialGroup],
        settings: ImportSettings,
        repository: AssetRepository,
        suffix_mapper: SuffixMapper,
        export_path: str,
        shader_properties: Dict[MaterialSlot, str],
        report: Optional[ImportReport] = None
    ) -> ImportReport:
        """
        Imports every group and accumulates the outcome into report.

        Args:
            groups: Material groups, in the order they should be processed.
            settings: The run's import settings.
            repository: Where files are copied and materials persisted.
            suffix_mapper: Suffix -> slot lookup.
            export_path: Asset path of the destination directory.
            shader_properties: Slot -> property table of the configured shader.
            report: Report to extend; a new one is created if None.

        Returns:
            The updated ImportReport.
        """
        report = report if report is not None else ImportReport()

        for group in groups:
            log.info(f"Orchestrator: Processing material '{group.material_name}' ({len(group.files)} file(s))")
            context = MaterialImportContext.for_group(
                group,
                settings=settings,
                repository=repository,
                suffix_mapper=suffix_mapper,
                export_path=export_path,
                shader_properties=shader_properties,
            )
            context = self._execute_stages(context)
            self._update_report(context, report)

        return report

    def _update_report(self, context: MaterialImportContext, report: ImportReport):
        material_name = context.material_name
        flags = context.status_flags

        if flags.get("skip_material"):
            report.materials_skipped.append(material_name)
            return

        report.textures_taken += sum(1 for item in context.items if item.texture is not None)
        report.failed_files.extend(item.source_file.file_path for item in context.items if item.status == "Failed")
        report.unknown_suffix_files.extend(flags.get("unknown_suffix_files", []))

        if flags.get("material_failed"):
            report.materials_failed.append(material_name)
        elif flags.get("material_created"):
            report.materials_created.append(material_name)
        elif flags.get("material_reused"):
            report.materials_reused.append(material_name)
