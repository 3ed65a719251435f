"""Pytest configuration and shared fixtures for rabbithole tests."""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

# Add the repository root to the Python path BEFORE test collection
package_root = Path(__file__).parent.parent
if str(package_root) not in sys.path:
    sys.path.insert(0, str(package_root))

from rabbithole.config import (  # noqa: E402
    BehaviorConfig,
    RabbitholeConfig,
    default_config,
    load_config,
    save_config,
)
from rabbithole.core.store import Database  # noqa: E402
from rabbithole.errors import ExternalToolError  # noqa: E402


class FakeRunner:
    """Stand-in for CommandRunner with scripted responses.

    Responses are registered per command prefix. A list of responses is
    consumed one per call and the last one repeats. A response that is an
    exception instance is raised instead of returned. Commands with no
    registered response fail like a missing binary.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[str]] = []
        self.timeouts: List[Optional[float]] = []
        self.spawned: List[List[str]] = []
        self.spawn_error: Optional[Exception] = None
        self._responses: Dict[Tuple[str, ...], list] = {}

    def on(self, prefix: Sequence[str], *responses) -> "FakeRunner":
        self._responses[tuple(prefix)] = list(responses) or [""]
        return self

    def run(self, args, *, timeout=None, input_text=None, use_default_timeout=True):
        cmd = list(args)
        self.calls.append(cmd)
        self.inputs.append(input_text)
        self.timeouts.append(timeout if timeout is not None or not use_default_timeout else 2.0)

        for prefix in sorted(self._responses, key=len, reverse=True):
            if tuple(cmd[:len(prefix)]) == prefix:
                queue = self._responses[prefix]
                response = queue.pop(0) if len(queue) > 1 else queue[0]
                if isinstance(response, BaseException):
                    raise response
                return response

        raise ExternalToolError(cmd[0], "command not found")

    def spawn(self, args):
        if self.spawn_error is not None:
            raise self.spawn_error
        self.spawned.append(list(args))

    def calls_to(self, *prefix: str) -> List[List[str]]:
        return [call for call in self.calls if tuple(call[:len(prefix)]) == prefix]


class FakeClock:
    """Monotonic clock that only advances when sleep() is called."""

    def __init__(self, start: float = 100.0):
        self.start = start
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    @property
    def elapsed(self) -> float:
        return self.now - self.start


def wmctrl_output(*windows: Tuple[str, str]) -> str:
    """Render ``wmctrl -l`` output for (id, title) pairs."""
    return "".join(f"{window_id}  0 workstation {title}\n" for window_id, title in windows)


def tool_error(tool: str, message: str = "failed", returncode: Optional[int] = 1) -> ExternalToolError:
    return ExternalToolError(tool, message, returncode=returncode)


@pytest.fixture(autouse=True)
def reset_rabbithole_logger():
    """Drop handlers installed by setup_logging() between tests."""
    yield
    logger = logging.getLogger("rabbithole")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def clock() -> FakeClock:
    """Fake monotonic clock."""
    return FakeClock()


@pytest.fixture
def db():
    """In-memory database with the rabbithole schema."""
    database = Database(":memory:")
    yield database
    database.close()


@pytest.fixture
def behavior() -> BehaviorConfig:
    """Default behaviour settings."""
    return BehaviorConfig()


@pytest.fixture
def home(tmp_path, monkeypatch) -> Path:
    """Isolated home directory (no sudo, no config override)."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.delenv("RABBITHOLE_CONFIG", raising=False)
    return home_dir


@pytest.fixture
def config_file(tmp_path) -> Path:
    """Default config written to disk, with the database kept in tmp_path."""
    config = default_config()
    config.database.path = str(tmp_path / "rabbithole.db")
    path = tmp_path / "config" / "config.json"
    save_config(config, path)
    return path


@pytest.fixture
def config(config_file) -> RabbitholeConfig:
    """The config stored in config_file."""
    return load_config(config_file)
