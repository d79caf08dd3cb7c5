import pytest
from unittest import mock

from processing.pipeline.stages.texture_copy import TextureCopyStage
from processing.pipeline.import_context import MaterialImportContext
from processing.utils.suffix_mapping import STANDARD_SHADER_PROPERTIES, SuffixMapper
from asset_repository import AssetRepository, AssetRepositoryError
from configuration import ImportSettings
from rule_structure import MaterialGroup, SourceFile


def create_copy_mock_context(suffixes=("a", "n"), overwrite: bool = False) -> MaterialImportContext:
    mock_repository = mock.MagicMock(spec=AssetRepository)
    mock_repository.import_file.side_effect = lambda source, directory, overwrite=False: \
        f"{directory}/{source.rsplit('/', 1)[-1]}"

    files = [SourceFile(file_path=f"/src/wood_{s}.png", material_name="wood", suffix=s, extension="png")
             for s in suffixes]
    return MaterialImportContext.for_group(
        MaterialGroup(material_name="wood", files=files),
        settings=ImportSettings(overwrite=overwrite),
        repository=mock_repository,
        suffix_mapper=SuffixMapper(),
        export_path="Assets/Materials",
        shader_properties=STANDARD_SHADER_PROPERTIES,
    )


def test_copies_every_file():
    stage = TextureCopyStage()
    context = create_copy_mock_context()

    updated_context = stage.execute(context)

    assert [item.status for item in updated_context.items] == ["Copied", "Copied"]
    assert [item.copied_asset_path for item in updated_context.items] == [
        "Assets/Materials/wood_a.png", "Assets/Materials/wood_n.png"
    ]
    context.repository.import_file.assert_any_call("/src/wood_a.png", "Assets/Materials", overwrite=False)


def test_passes_overwrite_setting():
    stage = TextureCopyStage()
    context = create_copy_mock_context(suffixes=("a",), overwrite=True)

    stage.execute(context)

    context.repository.import_file.assert_called_once_with("/src/wood_a.png", "Assets/Materials", overwrite=True)


@mock.patch('logging.warning')
def test_failed_copy_only_fails_that_file(mock_log_warning):
    stage = TextureCopyStage()
    context = create_copy_mock_context(suffixes=("a", "n", "h"))
    context.repository.import_file.side_effect = [
        "Assets/Materials/wood_a.png",
        FileExistsError("Destination already exists and overwrite is disabled"),
        "Assets/Materials/wood_h.png",
    ]

    updated_context = stage.execute(context)

    assert [item.status for item in updated_context.items] == ["Copied", "Failed", "Copied"]
    failed = updated_context.items[1]
    assert failed.copied_asset_path is None
    assert "overwrite is disabled" in failed.error_message
    mock_log_warning.assert_called_once()
    assert mock_log_warning.call_args[0][0].startswith("Could not import: /src/wood_n.png")


@mock.patch('logging.warning')
def test_repository_error_marks_file_failed(mock_log_warning):
    stage = TextureCopyStage()
    context = create_copy_mock_context(suffixes=("a",))
    context.repository.import_file.side_effect = AssetRepositoryError("disk full")

    updated_context = stage.execute(context)

    assert updated_context.items[0].status == "Failed"
    assert updated_context.active_items() == []
