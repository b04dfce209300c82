import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'realitycheck'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from realitycheck.core.settings import SettingsStore  # noqa: E402
from realitycheck.core.state import StateStore  # noqa: E402
from realitycheck.core.stdlib_logging import reset_logging_for_tests  # noqa: E402
from realitycheck.data import clear_caches  # noqa: E402

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

_ENV_KEYS = (
    "REALITYCHECK_PROJECT_ROOT",
    "REALITYCHECK_STATE_DIR",
    "REALITYCHECK_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Ensure no Reality Check env override leaks between tests."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    clear_caches()
    yield
    reset_logging_for_tests()


@pytest.fixture
def project_root(tmp_path, monkeypatch) -> Path:
    """Isolated project directory used as the Reality Check root."""
    root = tmp_path / "project"
    (root / ".git").mkdir(parents=True)
    monkeypatch.setenv("REALITYCHECK_PROJECT_ROOT", str(root))
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def settings_store(project_root) -> SettingsStore:
    return SettingsStore(project_root)


@pytest.fixture
def state_store(project_root, clock) -> StateStore:
    return StateStore(project_root, clock=clock)
