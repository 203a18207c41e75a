# benchmark.py

"""
================================================================================
HASH THROUGHPUT BENCHMARK SCRIPT
================================================================================
This script is a command-line tool for measuring how fast the coordinate
pipeline turns positions into values, and for demonstrating that the work
splits across processes with no coordination: every row chunk of the grid is
hashed independently and the XOR checksum of the chunks must equal the
checksum of the whole grid hashed in one go.

Usage:
    python benchmark.py [--config path/to/config.json] [--width 1024]
                        [--height 1024] [--seed 42] [--workers 4]
                        [--log-level DEBUG]

Config file keys (all optional): seed, grid_width, grid_height, chunk_rows,
repeats, workers.
================================================================================
"""
import sys
import json
import logging
import argparse
import time
import multiprocessing
import numpy as np
from tqdm import tqdm

from position_seed import config as DEFAULTS
from position_seed.fractal import fbm_grid
from position_seed.hashing import hash_grid
from position_seed.throughput import VARIANTS, compare_sequential_parallel, measure_throughput

# --- Global variables for worker processes ---
worker_seed = 0
worker_width = 0


def init_worker(seed, width):
    """Initializes the global state for each worker process."""
    global worker_seed, worker_width
    worker_seed = seed
    worker_width = width


def process_chunk(task):
    """Hashes one block of rows. Returns only its XOR checksum and size."""
    row_start, rows = task
    hashes = hash_grid(worker_width, rows, seed=worker_seed, origin=(0, row_start))
    return {
        'row_start': row_start,
        'cells': int(hashes.size),
        'checksum': int(np.bitwise_xor.reduce(hashes.ravel())),
    }


def grid_checksum(width: int, height: int, seed: int) -> int:
    """XOR checksum of the whole grid, hashed in a single call."""
    return int(np.bitwise_xor.reduce(hash_grid(width, height, seed=seed).ravel()))


def load_config(config_path: str, logger: logging.Logger):
    """Reads the optional JSON config. Returns None if it cannot be used."""
    if config_path is None:
        return {}
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return None
    if not isinstance(config, dict):
        logger.critical(f"Config file must contain a JSON object, got {type(config).__name__}")
        return None
    return config


def resolve_settings(config: dict, args) -> dict:
    """Defaults, then config file values, then explicit command-line flags."""
    settings = {
        'seed': config.get('seed', DEFAULTS.DEFAULT_SEED),
        'grid_width': config.get('grid_width', DEFAULTS.BENCHMARK_GRID_WIDTH),
        'grid_height': config.get('grid_height', DEFAULTS.BENCHMARK_GRID_HEIGHT),
        'chunk_rows': config.get('chunk_rows', DEFAULTS.BENCHMARK_CHUNK_ROWS),
        'repeats': config.get('repeats', DEFAULTS.BENCHMARK_REPEATS),
        'workers': config.get('workers', max(1, multiprocessing.cpu_count() - 1)),
    }
    overrides = {
        'seed': args.seed, 'grid_width': args.width, 'grid_height': args.height,
        'chunk_rows': args.chunk_rows, 'repeats': args.repeats, 'workers': args.workers,
    }
    for key, value in overrides.items():
        if value is not None:
            settings[key] = value
    return settings


def run_chunked_pass(settings: dict, logger: logging.Logger) -> dict:
    """
    Hashes the grid in row chunks, across a process pool when workers > 0 or
    in this process when workers == 0, and checks the combined checksum.
    """
    width = settings['grid_width']
    height = settings['grid_height']
    seed = settings['seed']
    chunk_rows = max(1, settings['chunk_rows'])
    tasks = [(row, min(chunk_rows, height - row)) for row in range(0, height, chunk_rows)]

    checksum = 0
    cells = 0
    start_time = time.perf_counter()

    if settings['workers'] > 0:
        logger.info(f"Using {settings['workers']} worker processes for {len(tasks)} chunks.")
        with multiprocessing.Pool(processes=settings['workers'], initializer=init_worker,
                                  initargs=(seed, width)) as pool:
            results_iterator = pool.imap_unordered(process_chunk, tasks)
            for result in tqdm(results_iterator, total=len(tasks), desc="Hashing Chunks"):
                checksum ^= result['checksum']
                cells += result['cells']
    else:
        init_worker(seed, width)
        for task in tqdm(tasks, desc="Hashing Chunks"):
            result = process_chunk(task)
            checksum ^= result['checksum']
            cells += result['cells']

    elapsed = time.perf_counter() - start_time
    expected = grid_checksum(width, height, seed)
    if checksum != expected:
        logger.error(f"Chunked checksum {checksum:016x} does not match single-pass checksum {expected:016x}")
    else:
        logger.info(f"Chunked checksum {checksum:016x} matches the single-pass grid.")

    return {
        'cells': cells,
        'seconds': elapsed,
        'cells_per_second': cells / elapsed if elapsed > 0 else float('inf'),
        'checksum': checksum,
        'checksum_matches': checksum == expected,
    }


def run_benchmark(settings: dict, logger: logging.Logger) -> dict:
    """Runs every measurement and logs a summary. Returns the raw results."""
    width = settings['grid_width']
    height = settings['grid_height']
    cells = width * height
    logger.info(f"Benchmarking a {width}x{height} grid ({cells} cells) with seed {settings['seed']}")

    results = {'variants': [], 'settings': dict(settings)}

    # 1. --- Hash variants, sequential and parallel ---
    for variant in VARIANTS:
        for parallel in (False, True):
            r = measure_throughput(variant, cells, seed=settings['seed'],
                                   repeats=settings['repeats'], parallel=parallel)
            results['variants'].append(r)
            mode = 'parallel' if parallel else 'sequential'
            logger.info(f"  - {variant:<10} {mode:<10} {r['hashes_per_second']:>16,.0f} hashes/s")

    # 2. --- Sequential generator vs position-is-seed ---
    race = compare_sequential_parallel(width, height, seed=settings['seed'])
    results['race'] = race
    logger.info(
        f"Tribonacci fill: {race['sequential_cells_per_second']:,.0f} cells/s; "
        f"coordinate hash grid: {race['parallel_cells_per_second']:,.0f} cells/s "
        f"({race['speedup']:.2f}x)"
    )

    # 3. --- fBm over the same grid ---
    xs, ys = np.meshgrid(np.linspace(0.0, 16.0, width), np.linspace(0.0, 16.0, height))
    fbm_grid(xs[:1, :1], ys[:1, :1], seed=settings['seed'])
    start_time = time.perf_counter()
    fbm_grid(xs, ys, seed=settings['seed'])
    fbm_seconds = time.perf_counter() - start_time
    results['fbm_cells_per_second'] = cells / fbm_seconds if fbm_seconds > 0 else float('inf')
    logger.info(f"fBm grid ({DEFAULTS.DEFAULT_OCTAVES} octaves): {results['fbm_cells_per_second']:,.0f} cells/s")

    # 4. --- Independent row chunks ---
    results['chunked'] = run_chunked_pass(settings, logger)
    logger.info(f"Chunked pass: {results['chunked']['cells_per_second']:,.0f} cells/s")

    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Throughput benchmark for the position-is-seed pipeline.")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to an optional JSON file overriding the benchmark defaults.")
    parser.add_argument("--seed", type=int, default=None, help="Universe seed.")
    parser.add_argument("--width", type=int, default=None, help="Grid width in cells.")
    parser.add_argument("--height", type=int, default=None, help="Grid height in cells.")
    parser.add_argument("--chunk-rows", dest="chunk_rows", type=int, default=None,
                        help="Rows per worker task.")
    parser.add_argument("--repeats", type=int, default=None, help="Timed repeats per measurement (best is kept).")
    parser.add_argument("--workers", type=int, default=None,
                        help="Worker processes for the chunked pass (0 runs it in-process).")
    parser.add_argument("--log-level", dest="log_level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging verbosity.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Benchmark")

    config = load_config(args.config, logger)
    if config is None:
        return 1

    results = run_benchmark(resolve_settings(config, args), logger)
    return 0 if results['chunked']['checksum_matches'] else 1


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
