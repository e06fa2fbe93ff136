import json

import numpy as np
import pytest

from edge_response.data.config_manager import ConfigManager
from edge_response.main import main
from edge_response.utils.file_io import FileIO


@pytest.fixture(autouse=True)
def no_root_logging(mocker):
    # keep the CLI from replacing pytest's log capture handlers
    return mocker.patch("edge_response.main.setup_logging")


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "Edge Response Function Analyzer" in capsys.readouterr().out


def test_synthesize_writes_image(tmp_path):
    output = tmp_path / "disk.png"
    assert main(["synthesize", "--width", "120", "--height", "80", "--radius", "30", "--output", str(output)]) == 0

    image = FileIO().load_image(output)
    assert image.shape == (80, 120)
    assert image[40, 60] == 255


def test_analyze_synthetic(capsys):
    code = main(["analyze", "--synthetic", "--width", "400", "--height", "400", "--radius", "120", "--show-profile"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Edge Response Result" in out
    assert "Steepest edge" in out


def test_analyze_image_file(tmp_path, disk_image, capsys):
    path = tmp_path / "disk.png"
    FileIO().save_image(path, disk_image.pixels)
    assert main(["analyze", "--image", str(path)]) == 0
    assert "Edge Response Result" in capsys.readouterr().out


def test_analyze_uniform_image_fails(tmp_path, uniform_image):
    path = tmp_path / "flat.png"
    FileIO().save_image(path, uniform_image.pixels)
    assert main(["analyze", "--image", str(path)]) == 1


def test_noise_missing_image(tmp_path):
    assert main(["noise", "--image", str(tmp_path / "missing.png")]) == 1


def test_noise_synthetic(capsys):
    assert main(["noise", "--synthetic", "--width", "100", "--height", "100", "--radius", "20"]) == 0
    assert "Noise Level:" in capsys.readouterr().out


def test_cnr_default_roi(capsys):
    assert main(["cnr", "--synthetic"]) == 0
    assert "CNR:" in capsys.readouterr().out


def test_cnr_roi_out_of_bounds():
    args = ["cnr", "--synthetic", "--width", "100", "--height", "100", "--radius", "20", "--roi", "90", "0", "50", "50"]
    assert main(args) == 1


def test_invalid_synthesis_parameters():
    assert main(["noise", "--synthetic", "--width", "0"]) == 1


def test_enhance_writes_output(tmp_path, disk_image):
    src = tmp_path / "disk.png"
    dst = tmp_path / "enhanced.png"
    FileIO().save_image(src, disk_image.pixels)

    assert main(["enhance", "--image", str(src), "--output", str(dst)]) == 0
    enhanced = FileIO().load_image(dst)
    assert np.all(enhanced >= disk_image.pixels)


def test_debug_flag_enables_debug_logging(no_root_logging):
    main(["--debug"])
    no_root_logging.assert_called_once_with(True)


def test_enhance_unsupported_output_format(tmp_path, disk_image):
    src = tmp_path / "disk.png"
    FileIO().save_image(src, disk_image.pixels)
    assert main(["enhance", "--image", str(src), "--output", str(tmp_path / "out.notaformat")]) == 1


def test_synthesize_output_under_a_file(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    assert main(["synthesize", "--radius", "20", "--output", str(blocker / "disk.png")]) == 1


def test_config_prints_effective_settings(capsys):
    assert main(["--set", "detector.hough_param2=30", "config"]) == 0
    settings = json.loads(capsys.readouterr().out)
    assert settings["detector"]["hough_param2"] == 30
    assert settings["quality"]["default_roi"] == [100, 100, 100, 100]


def test_config_writes_file(tmp_path):
    path = tmp_path / "analysis.json"
    assert main(["--set", "profiler.theta_samples=180", "config", "--output", str(path)]) == 0
    assert ConfigManager(path).get("profiler.theta_samples") == 180


def test_config_file_and_overrides_reach_analysis(tmp_path, capsys):
    path = tmp_path / "analysis.json"
    ConfigManager(data={"synthesizer": {"default_radius": 60}}).save(path)
    args = ["--config", str(path), "--set", "synthesizer.default_width=200", "--set", "synthesizer.default_height=200",
            "analyze", "--synthetic"]
    assert main(args) == 0
    assert "Radius:" in capsys.readouterr().out


def test_malformed_override():
    assert main(["--set", "detector.canny_low", "config"]) == 1
