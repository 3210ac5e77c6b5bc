import json
import math
from pathlib import Path

import pytest
from conftest import CONSOLE_ERROR_SNAPSHOT

from overlaycheck.schema.overlay import MISSING
from overlaycheck.snapshot.store import SnapshotLocation, SnapshotStore
from overlaycheck.utils.settings import settings


def location(tmp_path: Path, call_site: str = "test_case 1", build_mode="webpack"):
    return SnapshotLocation(
        test_file=tmp_path / "test_errors.py",
        call_site=call_site,
        build_mode=build_mode,
    )


class TestSnapshotLocation:
    def test_key_includes_build_mode(self, tmp_path):
        assert location(tmp_path).key == "test_case 1 [webpack]"
        assert str(location(tmp_path, build_mode="turbopack")) == (
            "test_errors.py::test_case 1 [turbopack]"
        )

    def test_build_mode_defaults_to_settings(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "BUILD_MODE", "turbopack")

        loc = SnapshotLocation(test_file=tmp_path / "t.py", call_site="x")

        assert loc.build_mode == "turbopack"

    def test_from_caller_points_at_this_test(self):
        loc = SnapshotLocation.from_caller()

        assert loc.test_file == Path(__file__).resolve()
        assert loc.call_site.startswith("test_from_caller_points_at_this_test:")


class TestSnapshotStore:
    def test_store_lives_beside_test_file(self, tmp_path):
        store = SnapshotStore.for_test_file(tmp_path / "test_errors.py")

        assert store.path == (
            tmp_path / settings.SNAPSHOT_DIR_NAME / "test_errors.json"
        ).resolve()
        assert SnapshotStore.for_test_file(tmp_path / "test_errors.py") is store

    @pytest.mark.asyncio
    async def test_records_when_absent(self, tmp_path):
        store = SnapshotStore(tmp_path / "snaps.json", update=False, ci=False)

        result = await store.compare_or_record(CONSOLE_ERROR_SNAPSHOT, location(tmp_path))

        assert result.passed
        assert result.recorded
        saved = json.loads((tmp_path / "snaps.json").read_text())
        assert saved == {"test_case 1 [webpack]": CONSOLE_ERROR_SNAPSHOT}

    @pytest.mark.asyncio
    async def test_second_call_compares_against_recorded(self, tmp_path):
        store = SnapshotStore(tmp_path / "snaps.json", update=False, ci=False)
        loc = location(tmp_path)

        first = await store.compare_or_record(CONSOLE_ERROR_SNAPSHOT, loc)
        second = await store.compare_or_record(CONSOLE_ERROR_SNAPSHOT, loc)
        changed = await store.compare_or_record(
            dict(CONSOLE_ERROR_SNAPSHOT, count=2), loc
        )

        assert first.recorded
        assert second.passed and not second.recorded
        assert not changed.passed
        assert changed.fields == ["count"]

    @pytest.mark.asyncio
    async def test_persisted_entries_survive_a_new_store(self, tmp_path):
        path = tmp_path / "snaps.json"
        nan_snapshot = dict(CONSOLE_ERROR_SNAPSHOT, count=math.nan, title=None)
        await SnapshotStore(path, update=False, ci=False).compare_or_record(
            nan_snapshot, location(tmp_path)
        )

        store = SnapshotStore(path, update=False, ci=False)
        stored = await store.lookup(location(tmp_path))
        result = await store.compare_or_record(nan_snapshot, location(tmp_path))

        assert math.isnan(stored["count"])
        assert result.passed
        assert await store.lookup(location(tmp_path, "other")) is MISSING

    @pytest.mark.asyncio
    async def test_build_modes_are_stored_separately(self, tmp_path):
        store = SnapshotStore(tmp_path / "snaps.json", update=False, ci=False)

        await store.compare_or_record("<no redbox found>", location(tmp_path))
        result = await store.compare_or_record(
            CONSOLE_ERROR_SNAPSHOT, location(tmp_path, build_mode="turbopack")
        )

        assert result.recorded
        assert await store.lookup(location(tmp_path)) == "<no redbox found>"

    @pytest.mark.asyncio
    async def test_ci_refuses_to_record(self, tmp_path):
        store = SnapshotStore(tmp_path / "snaps.json", update=False, ci=True)

        result = await store.compare_or_record(CONSOLE_ERROR_SNAPSHOT, location(tmp_path))

        assert not result.passed
        assert result.missing
        assert "not written" in result.message
        assert not (tmp_path / "snaps.json").exists()

    @pytest.mark.asyncio
    async def test_update_rewrites_mismatch_once(self, tmp_path):
        path = tmp_path / "snaps.json"
        await SnapshotStore(path, update=False, ci=False).compare_or_record(
            CONSOLE_ERROR_SNAPSHOT, location(tmp_path)
        )
        store = SnapshotStore(path, update=True, ci=False)
        changed = dict(CONSOLE_ERROR_SNAPSHOT, count=2)

        updated = await store.compare_or_record(changed, location(tmp_path))
        again = await store.compare_or_record(
            dict(CONSOLE_ERROR_SNAPSHOT, count=3), location(tmp_path)
        )

        assert updated.passed and updated.updated
        assert json.loads(path.read_text())["test_case 1 [webpack]"]["count"] == 2
        # already written this run, so the third value is compared, not stored
        assert not again.passed
        assert again.fields == ["count"]

    @pytest.mark.asyncio
    async def test_failed_write_is_not_kept(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = SnapshotStore(blocker / "snaps.json", update=False, ci=False)

        with pytest.raises(OSError):
            await store.compare_or_record(CONSOLE_ERROR_SNAPSHOT, location(tmp_path))

        assert await store.lookup(location(tmp_path)) is MISSING
