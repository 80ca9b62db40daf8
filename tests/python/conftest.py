"""
Pytest configuration and shared fixtures for sparsemat tests.
"""

import pytest
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from sparsemat import SparseMatrix, config, from_dense


# Try to import scipy
try:
    import scipy.sparse as sp
    HAS_SCIPY = True
except ImportError:
    HAS_SCIPY = False


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_config():
    """Restore default configuration after every test."""
    yield
    config.reset()


@pytest.fixture(scope="session")
def requires_scipy():
    """Skip test if scipy is not available."""
    if not HAS_SCIPY:
        pytest.skip("scipy not available")


@pytest.fixture
def diagonal_matrix():
    """3x3 float matrix with diagonal 1, 2, 3."""
    mat = SparseMatrix(3)
    mat.set(1.0, 0, 0).set(2.0, 1, 1).set(3.0, 2, 2)
    return mat


@pytest.fixture
def small_matrix():
    """Create a small test matrix (3x4).

    Matrix:
    [[1, 0, 2, 0],
     [0, 3, 0, 4],
     [5, 0, 0, 6]]
    """
    return from_dense([
        [1, 0, 2, 0],
        [0, 3, 0, 4],
        [5, 0, 0, 6],
    ], dtype='int64')


# =============================================================================
# Helper Functions
# =============================================================================

def dense_rows(mat):
    """Read every element through ``get`` into nested lists."""
    return [[mat.get(i, j) for j in range(mat.cols)] for i in range(mat.rows)]
