# tests/conftest.py
import logging

import numpy as np
import pytest


@pytest.fixture
def logger():
    """A quiet logger in the shape the builders expect."""
    log = logging.getLogger("position_seed.tests")
    log.setLevel(logging.DEBUG)
    return log


@pytest.fixture
def seed():
    return 42


@pytest.fixture
def rng():
    return np.random.default_rng(20240601)


@pytest.fixture
def unit_grid():
    """A small meshgrid that crosses several lattice cells."""
    xs = np.linspace(-3.7, 5.3, 17)
    ys = np.linspace(-2.1, 4.9, 11)
    return np.meshgrid(xs, ys)
