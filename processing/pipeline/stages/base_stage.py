from abc import ABC, abstractmethod

from ..import_context import MaterialImportContext


class ProcessingStage(ABC):
    """
    Abstract base class for a stage in the material import pipeline.
    """

    @abstractmethod
    def execute(self, context: MaterialImportContext) -> MaterialImportContext:
        """
        Executes the processing logic of this stage.

        Args:
            context: The import context of the material group being processed.

        Returns:
            The updated import context.
        """
        pass
