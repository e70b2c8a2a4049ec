import json
import sys
from pathlib import Path
from unittest.mock import patch

import cv2
import numpy as np

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pixelforge.cli as cli_module  # noqa: E402
from pixelforge.metadata import load_metadata  # noqa: E402


def write_grid_sheet(path: Path, cell=(6, 5), gutter=2, rows=2, cols=3) -> Path:
    width, height = cell
    image = np.zeros((rows * (height + gutter), cols * (width + gutter), 4), dtype=np.uint8)
    for row in range(rows):
        for col in range(cols):
            y = row * (height + gutter)
            x = col * (width + gutter)
            image[y : y + height, x : x + width] = (0, 255, 0, 255)
    cv2.imwrite(str(path), image)
    return path


def run_cli(tmp_path, *args):
    argv = ["--config", str(tmp_path / "absent.json"), *[str(a) for a in args]]
    with patch.object(cli_module, "configure_logging"):
        return cli_module.main(argv)


def write_descriptors(tmp_path) -> Path:
    path = tmp_path / "animations.json"
    path.write_text(
        json.dumps([
            {"name": "Idle", "frames": 3, "loop": "loop"},
            {"name": "Attack", "frames": 2, "loop": "once", "transitionTo": "Idle"},
        ]),
        encoding="utf-8",
    )
    return path


def test_detect_prints_cell_size(tmp_path, capsys):
    sheet = write_grid_sheet(tmp_path / "sheet.png")

    assert run_cli(tmp_path, "detect", sheet) == 0
    assert capsys.readouterr().out.strip() == "6x5"


def test_detect_on_transparent_sheet_fails_cleanly(tmp_path):
    sheet = tmp_path / "empty.png"
    cv2.imwrite(str(sheet), np.zeros((4, 4, 4), dtype=np.uint8))

    assert run_cli(tmp_path, "detect", sheet) == 1


def test_build_with_detected_cell_then_rebuild(tmp_path):
    sheet = write_grid_sheet(tmp_path / "sheet.png")
    output = tmp_path / "meta.json"

    assert run_cli(tmp_path, "build", write_descriptors(tmp_path), "--detect", sheet, "-o", output) == 0
    built = load_metadata(output)
    assert built[1].frames[1].x == 6
    assert built[1].frames[1].y == 5

    assert run_cli(tmp_path, "rebuild", output, "--width", 8, "--height", 7) == 0
    rebuilt = load_metadata(output)
    assert [a.frame_count for a in rebuilt] == [3, 2]
    assert rebuilt[1].frames[1].x == 8
    assert rebuilt[1].frames[1].y == 7
    assert rebuilt[1].transition_to == "Idle"


def test_build_to_stdout_with_explicit_cell(tmp_path, capsys):
    assert run_cli(tmp_path, "build", write_descriptors(tmp_path), "--cell", "10x12") == 0

    document = json.loads(capsys.readouterr().out)
    assert document[0]["frameWidth"] == 10
    assert document[1]["frames"][0] == {"x": 0, "y": 12, "width": 10, "height": 12}


def test_rebuild_rejects_zero_width(tmp_path):
    output = tmp_path / "meta.json"
    run_cli(tmp_path, "build", write_descriptors(tmp_path), "--cell", "4x4", "-o", output)

    assert run_cli(tmp_path, "rebuild", output, "--width", 0, "--height", 4) == 1


def test_build_rejects_zero_cell_size(tmp_path):
    output = tmp_path / "meta.json"

    assert run_cli(tmp_path, "build", write_descriptors(tmp_path), "--cell", "0x16", "-o", output) == 1
    assert not output.exists()


def test_rebuild_missing_metadata_file_fails_cleanly(tmp_path):
    assert run_cli(tmp_path, "rebuild", tmp_path / "nope.json", "--width", 8, "--height", 8) == 1


def test_segment_writes_parts(tmp_path):
    sheet = write_grid_sheet(tmp_path / "sheet.png", rows=1, cols=2)
    parts_dir = tmp_path / "parts"

    assert run_cli(tmp_path, "segment", sheet, "--output-dir", parts_dir) == 0
    assert sorted(p.name for p in parts_dir.iterdir()) == ["part_1.png", "part_2.png"]


def test_play_unknown_animation_fails(tmp_path):
    output = tmp_path / "meta.json"
    run_cli(tmp_path, "build", write_descriptors(tmp_path), "--cell", "4x4", "-o", output)

    assert run_cli(tmp_path, "play", output, "--animation", "Run", "--duration", 0) == 1
