import numpy as np
import pytest

from scalargrad.graph import use_graph


@pytest.fixture(autouse=True)
def graph():
    """Every test builds into its own fresh default graph."""
    with use_graph() as g:
        yield g


@pytest.fixture
def rng():
    return np.random.default_rng(0)
