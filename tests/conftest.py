import os
import sys

import pytest

# Run every pool op under the link guards unless explicitly overridden.
os.environ.setdefault("STACK_POOL_TEST_GUARDS", "1")

import jax

# Ensure src/ is importable without an editable install.
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from stack_pool.arena import StackPool


@pytest.fixture(autouse=True)
def _set_default_device():
    with jax.default_device(jax.devices("cpu")[0]):
        yield


@pytest.fixture
def pool():
    return StackPool()
