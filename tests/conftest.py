"""Shared fixtures for onboarding tests."""

import threading
from pathlib import Path
from typing import Callable

import pytest

from game_asset_onboarding.core.archives import MPQ_MAGIC, REQUIRED_ARCHIVES
from game_asset_onboarding.engine.base import ExtractionEngine, NetworkProtocol


def write_archive(directory: Path, name: str, header: bytes = MPQ_MAGIC, size: int = 64) -> Path:
    """Write a fake archive with the given header, padded to ``size`` bytes."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    body = (name.encode() * size)[: max(size - len(header), 0)]
    path.write_bytes(header + body)
    return path


@pytest.fixture
def game_dir(tmp_path: Path) -> Path:
    """A directory holding every required archive with a valid header."""
    directory = tmp_path / "Diablo II"
    for name in REQUIRED_ARCHIVES:
        write_archive(directory, name)
    return directory


class FakeEngine(ExtractionEngine):
    """Scriptable engine for supervisor, resolver and controller tests."""

    def __init__(
        self,
        result: bool = True,
        missing: list[str] | None = None,
        error: str = "",
        raises: Exception | None = None,
        gate: threading.Event | None = None,
    ):
        self.result = result
        self.missing = list(missing or [])
        self.error = error
        self.raises = raises
        self.gate = gate

        self.progress = 0.0
        self.file = ""
        self.devices: list[str] = []
        self.connect_result = True
        self.calls: list[tuple[str, str]] = []
        self.connect_calls: list[tuple] = []

    def extract(self, source_path: str, destination_path: str) -> bool:
        self.calls.append((source_path, destination_path))
        if self.gate is not None:
            self.gate.wait(5)
        if self.raises is not None:
            raise self.raises
        return self.result

    def current_progress(self) -> float:
        return self.progress

    def current_file_name(self) -> str:
        return self.file

    def missing_files(self) -> list[str]:
        return list(self.missing)

    def validate(self, path: str) -> bool:
        return self.result

    def list_usb_devices(self) -> list[str]:
        return list(self.devices)

    def connect_network(
        self,
        protocol: NetworkProtocol,
        host: str,
        share: str,
        username: str,
        password: str,
    ) -> bool:
        self.connect_calls.append((protocol, host, share, username, password))
        return self.connect_result

    def last_error(self) -> str:
        return self.error


class RecordingSpawner:
    """Collects spawned work so tests can run it inline, in any order."""

    def __init__(self) -> None:
        self.spawned: list[tuple[str, Callable[[], None]]] = []

    def __call__(self, target: Callable[[], None], name: str) -> None:
        self.spawned.append((name, target))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.spawned]

    def run(self, name: str) -> None:
        """Run and forget the oldest pending target with this name."""
        for index, (spawned_name, target) in enumerate(self.spawned):
            if spawned_name == name:
                del self.spawned[index]
                target()
                return
        raise AssertionError(f"Nothing spawned under {name!r}")

    def run_worker(self) -> None:
        self.run("extraction-worker")


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def spawner() -> RecordingSpawner:
    return RecordingSpawner()
