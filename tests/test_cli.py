"""Tests for the scan-cleaner command line interface."""

import json
import logging

from scan_cleaner.cli import EXIT_INVALID_INPUT, EXIT_OK, EXIT_PROCESSING_ERROR, main
from scan_cleaner.config import load_config
from scan_cleaner.processors import load_image, save_image


def test_clean_command(temp_dir, sample_scan):
    source = temp_dir / "scan.png"
    save_image(sample_scan, source)
    output = temp_dir / "out" / "clean.png"
    vis = temp_dir / "out" / "vis.png"
    stats = temp_dir / "out" / "stats.json"

    code = main([
        "--no-rich", "-q", "clean", str(source),
        "-o", str(output), "--visualization", str(vis), "--stats", str(stats),
        "--brightness-threshold", "80",
    ])

    assert code == EXIT_OK
    assert load_image(output).shape == sample_scan.shape
    assert vis.is_file()
    record = json.loads(stats.read_text(encoding="utf-8"))
    assert record["thresholds"]["brightness_threshold"] == 80


def test_clean_default_output_name(temp_dir, white_raster):
    source = temp_dir / "page.png"
    save_image(white_raster, source)
    assert main(["--no-rich", "-q", "clean", str(source)]) == EXIT_OK
    assert (temp_dir / "page_cleaned.png").is_file()


def test_clean_missing_input(temp_dir):
    assert main(["--no-rich", "-q", "clean", str(temp_dir / "none.png")]) == EXIT_INVALID_INPUT


def test_clean_rejects_even_kernel(temp_dir, white_raster):
    source = temp_dir / "page.png"
    save_image(white_raster, source)
    code = main(["--no-rich", "-q", "clean", str(source), "--blur-kernel-size", "12"])
    assert code == EXIT_INVALID_INPUT
    assert not (temp_dir / "page_cleaned.png").exists()


def test_init_config(temp_dir):
    path = temp_dir / "scan.yaml"
    assert main(["--no-rich", "-q", "init-config", str(path)]) == EXIT_OK
    assert load_config(path).params.blur_kernel_size == 13


def test_batch_command(temp_dir, sample_scan):
    input_dir = temp_dir / "in"
    input_dir.mkdir()
    save_image(sample_scan, input_dir / "one.png")
    out = temp_dir / "out"

    assert main(["--no-rich", "-q", "batch", str(input_dir), "-o", str(out)]) == EXIT_OK
    assert (out / "cleaned" / "one_cleaned.png").is_file()
    assert (out / "visualization" / "one_visualization.png").is_file()
    assert (out / "stats" / "one_stats.json").is_file()


def test_batch_reports_failures(temp_dir, sample_scan):
    input_dir = temp_dir / "in"
    input_dir.mkdir()
    save_image(sample_scan, input_dir / "one.png")
    (input_dir / "two.png").write_bytes(b"garbage")

    code = main(["--no-rich", "-q", "batch", str(input_dir), "-o", str(temp_dir / "out")])
    assert code == EXIT_PROCESSING_ERROR


def test_config_file_logging_section(temp_dir, white_raster):
    source = temp_dir / "page.png"
    save_image(white_raster, source)
    log_file = temp_dir / "logs" / "scan.log"
    config_path = temp_dir / "scan.json"
    config_path.write_text(json.dumps({
        "logging": {"log_file": str(log_file), "use_rich": False},
        "params": {"blur_kernel_size": 9},
    }))

    code = main(["--no-rich", "-q", "clean", str(source), "-c", str(config_path)])

    for handler in logging.getLogger().handlers:
        handler.flush()
    assert code == EXIT_OK
    assert "Saved cleaned image" in log_file.read_text(encoding="utf-8")


def test_invalid_config_file(temp_dir, white_raster):
    source = temp_dir / "page.png"
    save_image(white_raster, source)
    config_path = temp_dir / "scan.yaml"
    config_path.write_text("params:\n  blur_kernel_size: 12\n")

    code = main(["--no-rich", "-q", "clean", str(source), "-c", str(config_path)])
    assert code == EXIT_INVALID_INPUT
