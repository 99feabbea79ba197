import sys
from pathlib import Path

import pytest

# Make the top-level packages importable without installing the project
sys.path.insert(0, str(Path(__file__).parent.parent))

from scheduler.scheduler_core import clear_job_logs


@pytest.fixture(autouse=True)
def reset_job_logs():
    """Start every test with an empty job execution log."""
    clear_job_logs()
    yield
    clear_job_logs()
