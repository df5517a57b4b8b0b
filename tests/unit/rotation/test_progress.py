"""Tests for durable rotation progress."""

from pathlib import Path
from unittest.mock import patch

import orjson
import pytest

from codespace_rotator.rotation.progress import ProgressRecord, ProgressStore


@pytest.fixture
def store(tmp_path: Path) -> ProgressStore:
    return ProgressStore(tmp_path / "state" / "state.json")


@pytest.mark.unit
class TestProgressRecord:
    def test_defaults(self) -> None:
        record = ProgressRecord()

        assert record.current_account_index == 0
        assert not record.has_sessions

    def test_with_index_clears_sessions(self) -> None:
        record = ProgressRecord(2, "cs-p", "cs-s").with_index(3)

        assert record == ProgressRecord(3, "", "")

    @pytest.mark.parametrize(
        "data",
        [
            {"current_account_index": -1},
            {"current_account_index": "2"},
            {"current_account_index": True},
            {"current_primary_name": 7},
        ],
    )
    def test_from_dict_rejects_bad_fields(self, data: dict) -> None:
        with pytest.raises(ValueError):
            ProgressRecord.from_dict(data)


@pytest.mark.unit
class TestProgressStore:
    def test_missing_file_yields_initial_record(self, store: ProgressStore) -> None:
        assert not store.exists()
        assert store.load() == ProgressRecord()

    def test_save_then_load(self, store: ProgressStore) -> None:
        record = ProgressRecord(1, "cs-primary", "cs-secondary")

        assert store.save(record)
        assert store.load() == record
        assert not store.path.with_name("state.json.tmp").exists()

    def test_file_uses_persisted_field_names(self, store: ProgressStore) -> None:
        store.save(ProgressRecord(2, "a", "b"))

        assert orjson.loads(store.path.read_bytes()) == {
            "current_account_index": 2,
            "current_primary_name": "a",
            "current_secondary_name": "b",
        }

    @pytest.mark.parametrize(
        "content",
        [b"", b"{truncated", b"[1, 2]", b'{"current_account_index": -4}'],
    )
    def test_corrupt_file_yields_initial_record(
        self, store: ProgressStore, content: bytes
    ) -> None:
        store.path.parent.mkdir(parents=True)
        store.path.write_bytes(content)

        assert store.load() == ProgressRecord()

    def test_failed_replace_keeps_previous_record(self, store: ProgressStore) -> None:
        store.save(ProgressRecord(1, "old-p", "old-s"))

        with patch(
            "codespace_rotator.rotation.progress.os.replace",
            side_effect=OSError("disk full"),
        ):
            assert store.save(ProgressRecord(2)) is False

        assert store.load() == ProgressRecord(1, "old-p", "old-s")

    def test_unusable_parent_directory_returns_false(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = ProgressStore(blocker / "state.json")

        assert store.save(ProgressRecord(1)) is False
        assert blocker.read_text() == "not a directory"
