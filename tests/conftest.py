import os
import pathlib
import sys
import pytest


# Ensure repo root is on PYTHONPATH for direct package imports (e.g. `import hintcodec`).
_REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))


def _env_flag(name: str) -> bool:
    v = (os.environ.get(name) or '').strip().lower()
    return v in {'1', 'true', 'yes', 'y', 'on'}


_CONFIG_ENV_VARS = (
    'HINTCODEC_MEMORY_MAX_OFFSET',
    'HINTCODEC_MEMORY_MAX_SEGMENTS',
    'HINTCODEC_LOG_LEVEL_VM',
    'HINTCODEC_LOG_LEVEL',
    'HINTCODEC_LOG_FORMAT',
)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "slow: large-value sweeps (skipped unless HINTCODEC_RUN_SLOW=1)",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_slow = _env_flag('HINTCODEC_RUN_SLOW')

    for item in items:
        if 'slow' in item.keywords and not run_slow:
            item.add_marker(pytest.mark.skip(reason='slow tests skipped; set HINTCODEC_RUN_SLOW=1 to enable'))


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Every test starts from default configuration with no env overrides."""
    from hintcodec.config import get_config_manager

    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config_manager().reset()
    yield
    get_config_manager().reset()


@pytest.fixture
def memory():
    from hintcodec.memory import SegmentedMemory
    return SegmentedMemory()


@pytest.fixture
def base(memory):
    """Base address of a fresh segment in ``memory``."""
    return memory.add_memory_segment()
