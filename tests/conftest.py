# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
import pytest

from csv_translator.logging.init import reset_logging
from csv_translator.services.backend import BackendError


class FakeBackend:
    """Backend double: records every call, uppercases by default.

    fail_on: texts that raise BackendError
    empty_on: texts that return zero results
    always_fail: every call raises BackendError
    """

    def __init__(self, fail_on=(), empty_on=(), always_fail=False, transform=str.upper):
        self.calls: list[str] = []
        self.fail_on = set(fail_on)
        self.empty_on = set(empty_on)
        self.always_fail = always_fail
        self.transform = transform
        self.closed = False

    def translate(self, text: str) -> list[str]:
        self.calls.append(text)
        if self.always_fail or text in self.fail_on:
            raise BackendError(f"quota exceeded for {text!r}")
        if text in self.empty_on:
            return []
        return [self.transform(text)]

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def make_backend():
    return FakeBackend


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(content: str, name: str = "cities.csv") -> Path:
        path = temp_workdir / "data" / name
        path.write_bytes(content.encode("utf-8"))
        return path
    return _write


@pytest.fixture()
def sample_config_yaml() -> str:
    return """project_id: yaml-project
location: global
target_language: en
exclude_columns: [id]
output_suffix: _translated
max_workers: 1
request_timeout: 10
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "translate.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def project_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "test-project")
    return "test-project"


@pytest.fixture()
def no_project_env(monkeypatch):
    monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
