"""Tests for daybook.journal.diary: the save/delete workflow and scenarios."""

from datetime import date

import pytest

from daybook.core.config import Config
from daybook.core.config_schema import DaybookConfig
from daybook.core.exceptions import InvalidEntry, StorageUnavailable
from daybook.journal.diary import Diary
from daybook.journal.image_store import LocalImageStore
from daybook.journal.images import Upload
from daybook.journal.models import QuickTags

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def diary(entries_dir, fake_images):
    return Diary(entries_dir, fake_images, timezone="UTC", entries_per_page=2)


@pytest.mark.smoke
class TestScenarios:
    def test_save_creates_named_file_and_parses_tags(self, diary, entries_dir):
        diary.save_entry("2024-03-01", "09:30", "Morning", "Tags: work, ideas\n\nWent for a walk.")
        assert (entries_dir / "2024-03-01_0930.txt").is_file()

        entry = diary.get("2024-03-01_0930")
        assert entry.content_without_tags == "Went for a walk."
        assert entry.entry_tags == ["work", "ideas"]

    def test_listing_newest_first(self, diary):
        diary.save_entry("2024-03-01", "09:30", "Morning", "Went for a walk.")
        diary.save_entry("2024-03-02", "08:00", "Next day", "Coffee.")
        assert [e.identifier for e in diary.list_all()] == ["2024-03-02_0800", "2024-03-01_0930"]

    def test_delete_removes_images(self, entries_dir, make_fake_images):
        fake = make_fake_images(stored=["a.jpg", "b.jpg"])
        diary = Diary(entries_dir, fake)
        diary.save_entry("2024-03-01", "09:30", "Pics", "Two photos.", existing_images=["a.jpg", "b.jpg"])

        assert diary.delete_entry("2024-03-01_0930") is True
        assert not (entries_dir / "2024-03-01_0930.txt").exists()
        assert fake.deleted == ["a.jpg", "b.jpg"]

    def test_search(self, diary):
        diary.save_entry("2024-03-01", "09:30", "Morning", "Tags: work, ideas\n\nWent for a walk.")
        assert [e.identifier for e in diary.search("walk")] == ["2024-03-01_0930"]
        assert diary.search("xyz") == []


class TestValidation:
    def test_collects_all_errors(self, diary, entries_dir):
        with pytest.raises(InvalidEntry) as exc_info:
            diary.save_entry("2024-02-30", "25:00", "  ", "")
        assert exc_info.value.errors == [
            "Invalid date format.",
            "Invalid time format (HH:MM required).",
            "Title is required.",
            "Content is required.",
        ]
        assert list(entries_dir.iterdir()) == []

    def test_title_too_long(self, diary):
        with pytest.raises(InvalidEntry, match="at most 200"):
            diary.save_entry("2024-03-01", "09:30", "x" * 201, "Body")

    def test_title_at_limit(self, diary):
        entry = diary.save_entry("2024-03-01", "09:30", "x" * 200, "Body")
        assert len(entry.title) == 200

    def test_title_limit_ignores_surrounding_whitespace(self, diary):
        entry = diary.save_entry("2024-03-01", "09:30", "  " + "x" * 200 + "  ", "Body")
        assert entry.title == "x" * 200

    def test_bad_original_identifier(self, diary):
        with pytest.raises(InvalidEntry, match="Invalid original entry"):
            diary.save_entry("2024-03-01", "09:30", "T", "Body", original_identifier="../x")

    def test_no_uploads_stored_when_invalid(self, diary, fake_images):
        with pytest.raises(InvalidEntry):
            diary.save_entry("bad", "09:30", "T", "Body", uploads=[Upload(PNG, "image/png")])
        assert fake_images.uploaded == []


class TestSaveWorkflow:
    def test_structured_fields_composed(self, diary):
        entry = diary.save_entry(
            "2024-03-01",
            "09:30",
            "Trip",
            "Arrived late.",
            quick_tags=QuickTags(location="Porto", weather="Rain"),
            tags=["Travel", "travel", "#family"],
        )
        assert entry.raw_content == "Location: Porto\nWeather: Rain\nTags: Travel, family\n\nArrived late."
        assert entry.quick_tags.location == "Porto"
        assert entry.entry_tags == ["Travel", "family"]

    def test_uploads_appended(self, diary, fake_images):
        entry = diary.save_entry(
            "2024-03-01",
            "09:30",
            "Pics",
            "Body",
            existing_images=["old.jpg"],
            uploads=[Upload(PNG, "image/png"), Upload(PNG, "image/png")],
        )
        assert entry.images == ["old.jpg", "upload1.jpg", "upload2.jpg"]

    def test_removed_images_deleted(self, entries_dir, make_fake_images):
        fake = make_fake_images(stored=["a.jpg", "b.jpg"])
        diary = Diary(entries_dir, fake)
        diary.save_entry("2024-03-01", "09:30", "Pics", "Body", existing_images=["a.jpg", "b.jpg"])

        entry = diary.save_entry(
            "2024-03-01", "09:30", "Pics", "Body", original_identifier="2024-03-01_0930", removed_images=["a.jpg"]
        )
        assert entry.images == ["b.jpg"]
        assert fake.deleted == ["a.jpg"]

    def test_edit_keeps_images_by_default(self, diary):
        diary.save_entry("2024-03-01", "09:30", "Pics", "Body", existing_images=["a.jpg"])
        entry = diary.save_entry("2024-03-01", "09:30", "Edited", "Body", original_identifier="2024-03-01_0930")
        assert entry.images == ["a.jpg"]

    def test_date_change_moves_file(self, diary, entries_dir):
        diary.save_entry("2024-03-01", "09:30", "Morning", "Body")
        diary.save_entry("2024-03-05", "07:15", "Morning", "Body", original_identifier="2024-03-01_0930")
        names = sorted(p.name for p in entries_dir.iterdir())
        assert names == ["2024-03-05_0715.txt"]

    def test_failed_upload_rolls_back_stored_uploads(self, entries_dir, images_dir):
        store = LocalImageStore(images_dir)
        diary = Diary(entries_dir, store)
        with pytest.raises(InvalidEntry, match="Invalid image type"):
            diary.save_entry(
                "2024-03-01",
                "09:30",
                "T",
                "Body",
                uploads=[Upload(PNG, "image/png"), Upload(b"%PDF", "application/pdf")],
            )
        assert list(images_dir.iterdir()) == []
        assert list(entries_dir.iterdir()) == []

    def test_storage_failure_propagates(self, diary, monkeypatch):
        def boom(*args, **kwargs):
            raise StorageUnavailable("disk full")

        monkeypatch.setattr(diary.store, "save", boom)
        with pytest.raises(StorageUnavailable):
            diary.save_entry("2024-03-01", "09:30", "T", "Body")

    def test_storage_failure_keeps_image_state(self, entries_dir, images_dir, monkeypatch):
        diary = Diary(entries_dir, LocalImageStore(images_dir))
        original = diary.save_entry("2024-03-01", "09:30", "Pics", "Body", uploads=[Upload(PNG, "image/png")])
        kept = original.images[0]

        def boom(*args, **kwargs):
            raise StorageUnavailable("write lock held")

        monkeypatch.setattr(diary.store, "save", boom)
        with pytest.raises(StorageUnavailable):
            diary.save_entry(
                "2024-03-01",
                "09:30",
                "Pics",
                "Body",
                original_identifier=original.identifier,
                removed_images=[kept],
                uploads=[Upload(PNG, "image/png")],
            )

        assert [p.name for p in images_dir.iterdir()] == [kept]
        assert diary.get(original.identifier).images == [kept]


class TestQueries:
    def test_page_uses_configured_size(self, diary):
        for day in range(1, 6):
            diary.save_entry(f"2024-03-0{day}", "09:00", f"Day {day}", "Body")
        page = diary.page(diary.list_all(), 2)
        assert [e.identifier for e in page.items] == ["2024-03-03_0900", "2024-03-02_0900"]
        assert page.total_pages == 3

    def test_passthroughs(self, diary):
        diary.save_entry("2023-03-01", "09:00", "Last year", "Tags: past\n\nOld")
        diary.save_entry("2024-03-01", "09:00", "This year", "Tags: Past\n\nNew")
        assert len(diary.filter_by_tag("PAST")) == 2
        assert len(diary.filter_by_month(2024, 3)) == 1
        assert len(diary.filter_by_date("2023-03-01")) == 1
        assert [m.years_ago for m in diary.memories(date(2024, 3, 1))] == [1]
        assert [(t.tag, t.count) for t in diary.tag_cloud()] == [("Past", 2)]
        assert diary.months() == [("2024-03", 1), ("2023-03", 1)]


class TestFromConfig:
    def test_wires_directories(self, tmp_config_file, tmp_dir):
        diary = Diary.from_config(Config(config_file=tmp_config_file))
        assert diary.entries_per_page == 3
        assert str(diary.store.entries_dir).endswith("entries")
        assert isinstance(diary.images.processor, LocalImageStore)

        entry = diary.save_entry("2024-03-01", "09:30", "Hi", "Body", uploads=[Upload(PNG, "image/png")])
        assert diary.images.processor.exists(entry.images[0])

    def test_preview_length_from_config(self, tmp_path):
        settings = DaybookConfig(paths={"data_dir": tmp_path}, diary={"preview_length": 10, "timezone": "UTC"})
        diary = Diary.from_config(settings)
        assert diary.preview_length == 10

        entry = diary.save_entry("2024-03-01", "09:30", "Walk", "Mood: calm\n\nA long walk along the river.")
        assert diary.preview(entry) == "A long wal..."

    def test_default_preview_length(self, diary):
        entry = diary.save_entry("2024-03-01", "09:30", "Walk", "y" * 200)
        assert diary.preview(entry) == "y" * 150 + "..."
