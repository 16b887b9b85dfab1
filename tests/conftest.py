"""Shared test fixtures for daybook."""

import os
import tempfile

import pytest

from daybook.journal.store import EntryStore


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {
            "data_dir": os.path.join(tmp_dir, "data"),
            "entries_dir": os.path.join(tmp_dir, "entries"),
            "images_dir": os.path.join(tmp_dir, "images"),
        },
        "diary": {
            "entries_per_page": 3,
            "timezone": "UTC",
        },
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def entries_dir(tmp_path):
    d = tmp_path / "diary_entries"
    d.mkdir()
    return d


@pytest.fixture
def images_dir(tmp_path):
    d = tmp_path / "diary_images"
    d.mkdir()
    return d


@pytest.fixture
def write_entry(entries_dir):
    """Write a raw entry file, bypassing the store."""

    def _write(identifier: str, title: str = "Title", images: str = "[]", body: str = "Body") -> None:
        (entries_dir / f"{identifier}.txt").write_text(f"{title}\n{images}\n{body}", encoding="utf-8")

    return _write


class FakeImageProcessor:
    """In-memory image collaborator that records calls."""

    def __init__(self, stored=None, fail_on=None):
        self.stored = set(stored or [])
        self.deleted: list[str] = []
        self.uploaded: list[tuple[bytes, str]] = []
        self.fail_on = set(fail_on or [])
        self._counter = 0

    def process_upload(self, data: bytes, declared_mime_type: str) -> str:
        self.uploaded.append((data, declared_mime_type))
        self._counter += 1
        name = f"upload{self._counter}.jpg"
        self.stored.add(name)
        return name

    def delete_stored(self, stored_filename: str) -> bool:
        self.deleted.append(stored_filename)
        if stored_filename in self.fail_on:
            raise OSError("permission denied")
        if stored_filename not in self.stored:
            return False
        self.stored.discard(stored_filename)
        return True


@pytest.fixture
def fake_images():
    return FakeImageProcessor()


@pytest.fixture
def store(entries_dir):
    return EntryStore(entries_dir)


@pytest.fixture
def make_fake_images():
    """Factory for fake image processors preloaded with stored names."""
    return FakeImageProcessor
