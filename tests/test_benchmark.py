# tests/test_benchmark.py
import json
import logging

import numpy as np
import pytest

import benchmark
from position_seed.hashing import hash_grid


@pytest.fixture
def small_settings():
    args = benchmark.build_parser().parse_args(
        ["--width", "32", "--height", "20", "--chunk-rows", "6", "--workers", "0", "--repeats", "1"]
    )
    return benchmark.resolve_settings({}, args)


def test_chunks_reassemble_the_grid(small_settings, logger):
    result = benchmark.run_chunked_pass(small_settings, logger)
    assert result["cells"] == 32 * 20
    assert result["checksum_matches"]
    assert result["checksum"] == benchmark.grid_checksum(32, 20, small_settings["seed"])


def test_process_chunk_hashes_its_rows():
    benchmark.init_worker(11, 8)
    result = benchmark.process_chunk((5, 3))
    rows = hash_grid(8, 3, seed=11, origin=(0, 5))
    assert result["cells"] == 24
    assert result["checksum"] == int(np.bitwise_xor.reduce(rows.ravel()))


def test_settings_precedence():
    args = benchmark.build_parser().parse_args(["--seed", "9"])
    settings = benchmark.resolve_settings({"seed": 5, "grid_width": 10}, args)
    assert settings["seed"] == 9
    assert settings["grid_width"] == 10
    assert settings["grid_height"] == benchmark.DEFAULTS.BENCHMARK_GRID_HEIGHT


def test_load_config(tmp_path, logger):
    path = tmp_path / "bench.json"
    path.write_text(json.dumps({"grid_width": 64}))
    assert benchmark.load_config(None, logger) == {}
    assert benchmark.load_config(str(path), logger) == {"grid_width": 64}


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_load_config_rejects_bad_files(tmp_path, logger, caplog, content):
    path = tmp_path / "bench.json"
    path.write_text(content)
    with caplog.at_level(logging.CRITICAL, logger=logger.name):
        assert benchmark.load_config(str(path), logger) is None
    assert caplog.records


def test_missing_config_fails_main(tmp_path):
    assert benchmark.main(["--config", str(tmp_path / "missing.json")]) == 1


def test_run_benchmark_small(small_settings, logger):
    results = benchmark.run_benchmark(small_settings, logger)
    assert len(results["variants"]) == 2 * len(benchmark.VARIANTS)
    assert results["race"]["cells"] == 640
    assert results["fbm_cells_per_second"] > 0.0
    assert results["chunked"]["checksum_matches"]
