"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from chessreplay.config import EngineSettings
from chessreplay.engine.process import EngineProcess

# Linux CI runners are often headless. Force an offscreen backend only there.
if (
    sys.platform.startswith("linux")
    and "QT_QPA_PLATFORM" not in os.environ
    and "DISPLAY" not in os.environ
    and "WAYLAND_DISPLAY" not in os.environ
):
    os.environ["QT_QPA_PLATFORM"] = "offscreen"

FAKE_ENGINE = Path(__file__).parent / "engine" / "fake_engine.py"


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QCoreApplication for signal tests."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


def fake_engine_settings(mode: str = "normal", **overrides: object) -> EngineSettings:
    """Settings that launch the scripted fake engine in *mode*."""
    values: dict[str, object] = {
        "engine_path": sys.executable,
        "engine_args": (str(FAKE_ENGINE), mode),
        "handshake_timeout_ms": 5000,
        "stop_timeout_ms": 2000,
        "shutdown_timeout_ms": 2000,
    }
    values.update(overrides)
    return EngineSettings(**values)  # type: ignore[arg-type]


@pytest.fixture
def engine_factory() -> Iterator[Callable[..., EngineProcess]]:
    """Start fake engines and guarantee their shutdown after the test."""
    started: list[EngineProcess] = []

    def _start(mode: str = "normal", **overrides: object) -> EngineProcess:
        engine = EngineProcess(fake_engine_settings(mode, **overrides))
        started.append(engine)
        engine.start()
        return engine

    yield _start

    for engine in started:
        engine.shutdown()


@pytest.fixture
def engine(engine_factory: Callable[..., EngineProcess]) -> EngineProcess:
    return engine_factory("normal")


@pytest.fixture
def fake_settings() -> Callable[..., EngineSettings]:
    return fake_engine_settings
