# tests/conftest.py
import random
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so the flat modules (models, session, ...) import in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from models import GenerationLimits  # noqa: E402


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fast_limits():
    return GenerationLimits(max_shape_attempts=200, walks_per_shape=300)
