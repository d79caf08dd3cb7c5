import json
import logging
import pytest
from pathlib import Path
from unittest import mock

import cv2
import numpy as np

from texture_importer import TextureImporter, TextureImportError
from asset_repository import AssetRepository, AssetRepositoryError, FileSystemAssetRepository
from configuration import ImportSettings


def write_png(path: Path, value: int = 127, size: int = 4) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    assert cv2.imwrite(str(path), np.full((size, size, 3), value, dtype=np.uint8))
    return path


def read_material(project_root: Path, name: str) -> dict:
    return json.loads((project_root / "Assets" / "Materials" / f"{name}.mat").read_text(encoding='utf-8'))


@pytest.fixture
def project_root(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def source_folder(tmp_path):
    folder = tmp_path / "Downloads" / "Textures"
    folder.mkdir(parents=True)
    return folder


def create_importer(project_root: Path, **overrides) -> TextureImporter:
    return TextureImporter(ImportSettings(project_root=project_root).replace(**overrides))


def test_single_material_with_three_textures(project_root, source_folder):
    for suffix in ("a", "n", "h"):
        write_png(source_folder / f"wood_{suffix}.png")

    report = create_importer(project_root).import_folder(source_folder)

    assert report.summary() == "3 Textures taken, 1 Materials created."
    assert read_material(project_root, "wood") == {
        "name": "wood",
        "shader": "Standard",
        "textures": {
            "_BumpMap": "Assets/Materials/wood_n.png",
            "_MainTex": "Assets/Materials/wood_a.png",
            "_ParallaxMap": "Assets/Materials/wood_h.png",
        },
    }
    for suffix in ("a", "n", "h"):
        assert (project_root / "Assets" / "Materials" / f"wood_{suffix}.png").is_file()


def test_several_materials_are_built(project_root, source_folder):
    for name in ("wood_a.png", "wood_n.png", "metal_m.png", "metal_ao.png", "stone_e.png"):
        write_png(source_folder / name)

    report = create_importer(project_root).import_folder(source_folder)

    assert report.textures_taken == 5
    assert report.materials_created == ["metal", "stone", "wood"]
    assert read_material(project_root, "metal")["textures"] == {
        "_MetallicGlossMap": "Assets/Materials/metal_m.png",
        "_OcclusionMap": "Assets/Materials/metal_ao.png",
    }


def test_unknown_suffix_is_warned_and_material_still_created(project_root, source_folder, caplog):
    write_png(source_folder / "metal_x.png")

    with caplog.at_level(logging.WARNING):
        report = create_importer(project_root).import_folder(source_folder)

    assert report.summary() == "1 Textures taken, 1 Materials created."
    assert read_material(project_root, "metal")["textures"] == {}
    assert report.unknown_suffix_files == [str(source_folder / "metal_x.png")]
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert any("'x'" in w and "metal_x.png" in w for w in warnings)


def test_non_texture_files_are_skipped(project_root, source_folder):
    write_png(source_folder / "wood_a.png")
    (source_folder / "notes.txt").write_text("hello")
    write_png(source_folder / "nosuffix.png")

    report = create_importer(project_root).import_folder(source_folder)

    assert report.summary() == "1 Textures taken, 1 Materials created."
    assert len(report.skipped_files) == 2
    assert not (project_root / "Assets" / "Materials" / "notes.txt").exists()


def test_rerun_reuses_material(project_root, source_folder):
    for suffix in ("a", "n"):
        write_png(source_folder / f"wood_{suffix}.png")
    create_importer(project_root).import_folder(source_folder)

    report = create_importer(project_root).import_folder(source_folder)

    assert report.summary() == "2 Textures taken, 0 Materials created."
    assert report.materials_reused == ["wood"]
    materials = sorted(p.name for p in (project_root / "Assets" / "Materials").glob("*.mat"))
    assert materials == ["wood.mat"]


def test_rerun_keeps_slots_not_in_batch(project_root, tmp_path, source_folder):
    write_png(source_folder / "wood_a.png")
    create_importer(project_root).import_folder(source_folder)

    second_batch = tmp_path / "Second"
    write_png(second_batch / "wood_n.png")
    create_importer(project_root).import_folder(second_batch)

    assert read_material(project_root, "wood")["textures"] == {
        "_BumpMap": "Assets/Materials/wood_n.png",
        "_MainTex": "Assets/Materials/wood_a.png",
    }


def test_changed_file_without_overwrite_is_not_taken(project_root, tmp_path, source_folder, caplog):
    write_png(source_folder / "wood_a.png", value=10)
    create_importer(project_root).import_folder(source_folder)

    changed = tmp_path / "Changed"
    write_png(changed / "wood_a.png", value=200, size=8)
    with caplog.at_level(logging.WARNING):
        report = create_importer(project_root).import_folder(changed)

    assert report.textures_taken == 0
    assert report.failed_files == [str(changed / "wood_a.png")]
    assert any(r.getMessage().startswith("Could not import:") for r in caplog.records)


def test_changed_file_with_overwrite_replaces_copy(project_root, tmp_path, source_folder):
    write_png(source_folder / "wood_a.png", value=10)
    create_importer(project_root).import_folder(source_folder)

    changed = tmp_path / "Changed"
    newer = write_png(changed / "wood_a.png", value=200, size=8)
    report = create_importer(project_root, overwrite=True).import_folder(changed)

    assert report.textures_taken == 1
    assert (project_root / "Assets" / "Materials" / "wood_a.png").read_bytes() == newer.read_bytes()


def test_custom_separator(project_root, source_folder):
    write_png(source_folder / "wood_old-a.png")
    write_png(source_folder / "wood_old-ao.png")

    report = create_importer(project_root, separator_token="-").import_folder(source_folder)

    assert report.materials_created == ["wood_old"]
    assert report.textures_taken == 2


def test_abort_policy_stops_at_unmatched_file(project_root, source_folder):
    write_png(source_folder / "a_a.png")
    write_png(source_folder / "b.png")
    write_png(source_folder / "c_a.png")

    report = create_importer(project_root, unmatched_file_policy="abort").import_folder(source_folder)

    assert report.aborted is True
    assert report.materials_created == ["a"]
    assert not (project_root / "Assets" / "Materials" / "c.mat").exists()


def test_folder_naming_builds_one_material(project_root, source_folder):
    write_png(source_folder / "bark_a.png")
    write_png(source_folder / "bark_n.png")
    write_png(source_folder / "leaf_ao.png")

    report = create_importer(project_root, material_naming="folder").import_folder(source_folder)

    assert report.materials_created == ["Textures"]
    assert set(read_material(project_root, "Textures")["textures"]) == {"_MainTex", "_BumpMap", "_OcclusionMap"}


def test_conflict_abort_leaves_existing_material(project_root, tmp_path, source_folder, caplog):
    write_png(source_folder / "wood_a.png")
    create_importer(project_root).import_folder(source_folder)
    before = read_material(project_root, "wood")

    second_batch = tmp_path / "Second"
    write_png(second_batch / "wood_n.png")
    with caplog.at_level(logging.WARNING):
        report = create_importer(project_root, material_conflict_policy="abort").import_folder(second_batch)

    assert report.materials_skipped == ["wood"]
    assert report.summary() == "0 Textures taken, 0 Materials created."
    assert read_material(project_root, "wood") == before
    assert not (project_root / "Assets" / "Materials" / "wood_n.png").exists()
    assert "wood.mat Already Exists. Import cancelled." in [r.getMessage() for r in caplog.records]


def test_empty_folder(project_root, source_folder):
    report = create_importer(project_root).import_folder(source_folder)

    assert report.summary() == "0 Textures taken, 0 Materials created."
    assert (project_root / "Assets" / "Materials").is_dir()


def test_missing_source_folder_raises(project_root, tmp_path):
    with pytest.raises(TextureImportError):
        create_importer(project_root).import_folder(tmp_path / "missing")


def test_unknown_shader_raises(project_root, source_folder):
    write_png(source_folder / "wood_a.png")
    with pytest.raises(TextureImportError):
        create_importer(project_root, shader_name="Does/Not/Exist").import_folder(source_folder)


def test_invalid_settings_raise():
    with pytest.raises(TextureImportError):
        TextureImporter(ImportSettings(separator_token=""))
    with pytest.raises(TextureImportError):
        TextureImporter("not settings")


def test_injected_repository_is_used(source_folder, tmp_path):
    write_png(source_folder / "wood_a.png")
    repository = FileSystemAssetRepository(tmp_path / "elsewhere")

    importer = TextureImporter(ImportSettings(project_root=tmp_path / "ignored"), repository=repository)
    report = importer.import_folder(source_folder)

    assert importer.repository is repository
    assert report.materials_created == ["wood"]
    assert (tmp_path / "elsewhere" / "Assets" / "Materials" / "wood.mat").is_file()
    assert not (tmp_path / "ignored").exists()


def test_repository_failures_on_setup_are_wrapped(source_folder):
    write_png(source_folder / "wood_a.png")
    mock_repository = mock.MagicMock(spec=AssetRepository)
    mock_repository.ensure_folder.side_effect = AssetRepositoryError("read-only project")

    with pytest.raises(TextureImportError):
        TextureImporter(ImportSettings(), repository=mock_repository).import_folder(source_folder)


def test_jpeg_and_tif_extensions_are_taken(project_root, source_folder):
    write_png(source_folder / "wood_a.png")
    write_png(source_folder / "wood_n.jpeg")
    write_png(source_folder / "wood_h.tif")

    report = create_importer(project_root).import_folder(source_folder)

    assert report.skipped_files == []
    assert report.summary() == "3 Textures taken, 1 Materials created."
    assert read_material(project_root, "wood")["textures"] == {
        "_BumpMap": "Assets/Materials/wood_n.jpeg",
        "_MainTex": "Assets/Materials/wood_a.png",
        "_ParallaxMap": "Assets/Materials/wood_h.tif",
    }


def test_folder_naming_with_relative_current_dir(project_root, tmp_path, monkeypatch):
    oak = tmp_path / "Oak"
    write_png(oak / "bark_a.png")
    monkeypatch.chdir(oak)

    report = create_importer(project_root, material_naming="folder").import_folder(".")

    assert report.materials_created == ["Oak"]
    assert (project_root / "Assets" / "Materials" / "Oak.mat").is_file()


def test_folder_naming_with_parent_reference(project_root, tmp_path, monkeypatch):
    oak = tmp_path / "Oak"
    write_png(oak / "bark_a.png")
    (oak / "sub").mkdir()
    monkeypatch.chdir(oak / "sub")

    report = create_importer(project_root, material_naming="folder").import_folder("..")

    assert report.materials_created == ["Oak"]


@mock.patch('texture_importer.folder_name_from_path', return_value="")
def test_folder_naming_without_folder_name_raises(mock_folder_name, project_root, source_folder):
    write_png(source_folder / "bark_a.png")

    with pytest.raises(TextureImportError):
        create_importer(project_root, material_naming="folder").import_folder(source_folder)
    assert not (project_root / "Assets" / "Materials" / ".mat").exists()


def test_importing_from_the_export_folder_with_overwrite(project_root):
    export_folder = project_root / "Assets" / "Materials"
    write_png(export_folder / "wood_a.png")
    write_png(export_folder / "wood_n.png")

    report = create_importer(project_root, overwrite=True).import_folder(export_folder)

    assert report.failed_files == []
    assert report.summary() == "2 Textures taken, 1 Materials created."
