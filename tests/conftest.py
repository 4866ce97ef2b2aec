"""Shared fixtures: stub CLI executables and an offline config."""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from container_manager.config import CLILocator, Config, Settings
from container_manager.services.runner import CommandRunner


@pytest.fixture
def make_cli(tmp_path: Path) -> Callable[..., str]:
    """Factory writing an executable /bin/sh script and returning its path."""
    counter = {"n": 0}

    def _make(body: str, name: str | None = None, mode: int = 0o755) -> str:
        counter["n"] += 1
        path = tmp_path / (name or f"stub_cli_{counter['n']}")
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(mode)
        return str(path)

    return _make


@pytest.fixture
def config_for() -> Callable[[str], Config]:
    """Factory building a Config pinned to one CLI path."""

    def _config(cli_path: str, **settings: object) -> Config:
        return Config(
            settings=Settings(cli_path=cli_path, **settings),  # type: ignore[arg-type]
            locator=CLILocator(configured_path=cli_path, candidates=()),
        )

    return _config


@pytest.fixture
def runner() -> CommandRunner:
    """Runner with a small stream queue so backpressure is exercised."""
    return CommandRunner(stream_queue_size=4, stream_terminate_grace=2.0)



@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging() so caplog keeps seeing package records."""
    package_logger = logging.getLogger("container_manager")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    for handler in package_logger.handlers:
        if handler not in handlers:
            package_logger.removeHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = propagate
