"""Pytest configuration and fixtures for the workbench service tests."""

import tempfile
import threading
from collections.abc import Generator
from pathlib import Path

import pytest
from git import Repo

from workbench_core.models.process import CommandOutput


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def project_dir(temp_dir: Path) -> Path:
    """Create a small project tree with text, binary and vendored files."""
    root = temp_dir / "project"
    (root / "src").mkdir(parents=True)
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "assets").mkdir()

    (root / "README.md").write_text("# Hello\nhello again, HELLO!\n")
    (root / "src" / "main.py").write_text(
        "def main():\n    print('hello world')\n    return 'Hello'\n"
    )
    (root / "src" / "pets.txt").write_text("category\nCat sat\nthe cat and the CAT\n")
    (root / "src" / "windows.txt").write_bytes(b"first hello\r\nsecond line\r\n")
    (root / "node_modules" / "lib" / "index.js").write_text("// hello from a dependency\n")
    (root / "assets" / "logo.png").write_bytes(b"\x89PNG\r\nhello\x00\x00")
    (root / "broken.txt").write_bytes(b"hello \xff\xfe not utf-8\n")

    return root


@pytest.fixture
def git_project(project_dir: Path) -> Path:
    """Turn the project tree into a git repository with ignore rules."""
    repo = Repo.init(project_dir)

    with repo.config_writer() as git_config:
        git_config.set_value("user", "name", "Test User")
        git_config.set_value("user", "email", "test@example.com")

    (project_dir / "build").mkdir()
    (project_dir / "build" / "out.txt").write_text("hello from build output\n")
    (project_dir / "debug.log").write_text("hello from a log\n")
    (project_dir / ".config").mkdir()
    (project_dir / ".config" / "settings.ini").write_text("greeting = hello\n")

    # Tracked before it became ignored
    (project_dir / "generated.txt").write_text("hello from generated\n")
    repo.index.add(["README.md", "src/main.py", "generated.txt"])
    repo.index.commit("Initial commit")

    (project_dir / ".gitignore").write_text("build/\n*.log\ngenerated.txt\n")

    return project_dir


class EventCollector:
    """Thread-safe listener recording CommandOutput events of one execution."""

    def __init__(self):
        self.events: list[CommandOutput] = []
        self.done = threading.Event()
        self._lock = threading.Lock()

    def __call__(self, event: CommandOutput) -> None:
        with self._lock:
            self.events.append(event)
        if event.is_final:
            self.done.set()

    def wait(self, timeout: float = 15.0) -> list[CommandOutput]:
        assert self.done.wait(timeout), "execution did not finish in time"
        with self._lock:
            return list(self.events)

    def lines(self, is_error: bool) -> list[str]:
        with self._lock:
            return [e.output for e in self.events if not e.is_final and e.is_error == is_error]


@pytest.fixture
def collector() -> EventCollector:
    """Create an event collector."""
    return EventCollector()


@pytest.fixture
def make_collector() -> type[EventCollector]:
    """Provide the collector class for tests that run several executions."""
    return EventCollector
