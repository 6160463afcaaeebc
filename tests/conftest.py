import os
import pathlib
import sys

import pytest

# 1) Make the project root importable
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# 2) Test defaults: no remote AI, no interaction log, lenient config validation
os.environ["APP_ENV"] = "testing"
os.environ["AI_QUERY_PROVIDER"] = "off"
os.environ.pop("INTERACTION_LOG_FILE", None)

from assistant.schemas import KnowledgeSnapshot  # noqa: E402
from tests.utils import make_snapshot  # noqa: E402


@pytest.fixture
def snapshot() -> KnowledgeSnapshot:
    return make_snapshot()


@pytest.fixture
def empty_snapshot() -> KnowledgeSnapshot:
    return KnowledgeSnapshot.empty()
