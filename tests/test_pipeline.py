import numpy as np
import pytest
from PIL import Image as PILImage

from sprite_cutter.exceptions import DirectoryAccessFailure, ImageDecodeFailure
from sprite_cutter.models.cutter_config import CutterConfig
from sprite_cutter.models.image import RasterImage
from sprite_cutter.pipeline.batch_slicer import process_directory
from sprite_cutter.pipeline.spritesheet_slicer import slice_spritesheet
from sprite_cutter.repositories.image_repository import ImageRepository

from .conftest import make_image, write_oversized_png


@pytest.fixture(autouse=True)
def _default_extensions(monkeypatch):
    monkeypatch.delenv("VALID_IMAGE_EXTENSIONS", raising=False)


def _write(path, raster):
    ImageRepository.save(raster, path)
    return path


def _sizes(paths):
    sizes = []
    for p in paths:
        with PILImage.open(p) as im:
            sizes.append(im.size)
    return sizes


class TestSliceSpritesheet:
    def test_frames_written_with_numbered_names(self, tmp_path, three_column_sheet, config):
        src = _write(tmp_path / "hero.png", three_column_sheet)
        out = tmp_path / "out"
        out.mkdir()

        result = slice_spritesheet(src, out, config)

        assert result.method == "grid"
        assert result.frame_count == 3
        assert [p.name for p in result.outputs] == [
            "hero_frame_001.png", "hero_frame_002.png", "hero_frame_003.png",
        ]
        assert _sizes(result.outputs) == [(32, 32), (33, 32), (25, 32)]

    def test_uniform_sheet_is_passed_through(self, tmp_path, config):
        src = _write(tmp_path / "tile.png", RasterImage(make_image(40, 40, (90, 160, 30, 255))))
        out = tmp_path / "out"
        out.mkdir()

        result = slice_spritesheet(src, out, config)

        assert result.method == "passthrough"
        assert result.frame_count == 0
        assert [p.name for p in result.outputs] == ["tile.png"]
        # Background removal turns the whole uniform tile transparent.
        with PILImage.open(out / "tile.png") as im:
            assert im.size == (40, 40)
            assert np.asarray(im.convert("RGBA"))[:, :, 3].max() == 0

    def test_background_kept_when_disabled(self, tmp_path, strip_on_fill):
        src = _write(tmp_path / "strip.png", strip_on_fill)
        out = tmp_path / "out"
        out.mkdir()

        result = slice_spritesheet(src, out, CutterConfig(remove_background=False))

        assert result.method == "fallback"
        with PILImage.open(result.outputs[0]) as im:
            assert (np.asarray(im.convert("RGBA"))[:, :, 3] == 255).all()

    def test_frame_background_is_stripped(self, tmp_path, strip_on_fill, config):
        src = _write(tmp_path / "strip.png", strip_on_fill)
        out = tmp_path / "out"
        out.mkdir()

        result = slice_spritesheet(src, out, config)

        with PILImage.open(result.outputs[0]) as im:
            alpha = np.asarray(im.convert("RGBA"))[:, :, 3]
        # Sprite occupies columns 8..23 and rows 8..23 of the first frame.
        assert alpha[0, 0] == 0
        assert (alpha[8:24, 8:24] == 255).all()

    def test_decode_failure_propagates(self, tmp_path, config):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"garbage")
        with pytest.raises(ImageDecodeFailure):
            slice_spritesheet(bad, tmp_path, config)


class TestProcessDirectory:
    def test_bad_file_does_not_stop_the_batch(self, tmp_path, three_column_sheet, config):
        (tmp_path / "a_broken.png").write_bytes(b"garbage")
        _write(tmp_path / "b_sheet.png", three_column_sheet)

        report = process_directory(tmp_path, config)

        assert report.processed == 1
        assert report.frames_written == 3
        assert [p.name for p, _ in report.failures] == ["a_broken.png"]
        written = sorted(p.name for p in (tmp_path / "assets2").iterdir())
        assert written == ["b_sheet_frame_001.png", "b_sheet_frame_002.png", "b_sheet_frame_003.png"]

    def test_oversized_image_does_not_stop_the_batch(self, tmp_path, three_column_sheet, config):
        write_oversized_png(tmp_path / "a_huge.png")
        _write(tmp_path / "b_sheet.png", three_column_sheet)

        report = process_directory(tmp_path, config)

        assert report.processed == 1
        assert report.frames_written == 3
        assert [p.name for p, _ in report.failures] == ["a_huge.png"]
        assert len(list((tmp_path / "assets2").glob("b_sheet_frame_*.png"))) == 3

    def test_save_failure_does_not_stop_the_batch(self, tmp_path, three_column_sheet, config):
        _write(tmp_path / "a_sheet.png", three_column_sheet)
        _write(tmp_path / "b_sheet.png", three_column_sheet)
        # A directory occupying the first output name makes that save fail.
        (tmp_path / "assets2" / "a_sheet_frame_001.png").mkdir(parents=True)

        report = process_directory(tmp_path, config)

        assert [p.name for p, _ in report.failures] == ["a_sheet.png"]
        assert report.processed == 1
        assert report.frames_written == 3
        assert [r.source.name for r in report.results] == ["b_sheet.png"]
        written = sorted(p.name for p in (tmp_path / "assets2").glob("b_sheet_frame_*.png"))
        assert written == ["b_sheet_frame_001.png", "b_sheet_frame_002.png", "b_sheet_frame_003.png"]

    def test_named_folders(self, tmp_path, three_column_sheet, strip_on_fill):
        (tmp_path / "Base").mkdir()
        (tmp_path / "Ships").mkdir()
        _write(tmp_path / "Base" / "base.png", three_column_sheet)
        _write(tmp_path / "Ships" / "ship.png", strip_on_fill)
        config = CutterConfig(input_folders=("Base", "Ships", "Space"), output_dir="sliced")

        report = process_directory(tmp_path, config)

        assert report.skipped_folders == ["Space"]
        assert report.processed == 2
        assert len(list((tmp_path / "sliced" / "Base").glob("base_frame_*.png"))) == 3
        assert len(list((tmp_path / "sliced" / "Ships").glob("ship_frame_*.png"))) == 3

    def test_output_dir_failure_is_fatal(self, tmp_path, three_column_sheet, config):
        _write(tmp_path / "sheet.png", three_column_sheet)
        (tmp_path / "assets2").write_bytes(b"")  # a file where the directory should go

        with pytest.raises(DirectoryAccessFailure):
            process_directory(tmp_path, config)


class TestEntryPoint:
    def test_main_reads_input_dir_from_env(self, monkeypatch, tmp_path, three_column_sheet):
        from sprite_cutter.cli.batch_process import main

        for name in ("SPRITE_INPUT_FOLDERS", "SPRITE_OUTPUT_DIR", "SPRITE_THRESHOLD_PRESET"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("SPRITE_INPUT_DIR", str(tmp_path))
        _write(tmp_path / "sheet.png", three_column_sheet)

        assert main() == 0
        assert len(list((tmp_path / "assets2").glob("sheet_frame_*.png"))) == 3

    def test_unknown_log_level_falls_back_to_info(self, monkeypatch, tmp_path, three_column_sheet):
        from sprite_cutter.cli.batch_process import log_level_from_env, main

        for name in ("SPRITE_INPUT_FOLDERS", "SPRITE_OUTPUT_DIR", "SPRITE_THRESHOLD_PRESET"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("SPRITE_INPUT_DIR", str(tmp_path))
        monkeypatch.setenv("LOG_LEVEL", "loud")
        _write(tmp_path / "sheet.png", three_column_sheet)

        assert log_level_from_env() == "INFO"
        assert main() == 0

    @pytest.mark.parametrize("raw,expected", [("", "INFO"), ("  ", "INFO"), ("debug", "DEBUG"), (" Warning ", "WARNING")])
    def test_log_level_from_env(self, monkeypatch, raw, expected):
        from sprite_cutter.cli.batch_process import log_level_from_env

        monkeypatch.setenv("LOG_LEVEL", raw)
        assert log_level_from_env() == expected

    def test_main_returns_error_on_directory_failure(self, monkeypatch, tmp_path):
        from sprite_cutter.cli.batch_process import main

        monkeypatch.delenv("SPRITE_INPUT_FOLDERS", raising=False)
        monkeypatch.delenv("SPRITE_OUTPUT_DIR", raising=False)
        monkeypatch.setenv("SPRITE_INPUT_DIR", str(tmp_path))
        (tmp_path / "assets2").write_bytes(b"")

        assert main() == 1
