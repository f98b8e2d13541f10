"""Tests for the project media scanner."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path

import pytest

from promanage.descfile import DescriptionFile
from promanage.errors import NoStorageLocation
from promanage.media import media_type_for, refresh, scan_media
from promanage.models.project import MediaType, ProjectRecord


def as_set(media):
    return {(m.uri, m.description, m.type) for m in media}


class TestMediaTypeFor:
    """Tests for extension classification."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("cat.png", MediaType.IMAGE),
            ("scan.TIFF", MediaType.IMAGE),
            ("clip.mov", MediaType.VIDEO),
            ("walkthrough.MP4", MediaType.VIDEO),
            ("statue.OBJ", MediaType.MODEL),
            ("scene.glb", MediaType.MODEL),
        ],
    )
    def test_known(self, name, expected):
        assert media_type_for(name) == expected

    @pytest.mark.parametrize("name", ["unknown.xyz", "README", ".hidden"])
    def test_unknown(self, name):
        assert media_type_for(name) is None


class TestScanMedia:
    """Tests for building the media inventory."""

    def test_scan(self, project_root):
        descriptions = DescriptionFile(entries={"cat.png": "A cat", "statue": "The statue"})

        media = scan_media(project_root, descriptions)
        by_name = {m.uri.rsplit("/", 1)[-1]: m for m in media}

        assert set(by_name) == {"cat.png", "unknown.xyz", "walkthrough.MP4", "statue.OBJ"}
        assert by_name["cat.png"].description == "A cat"
        assert by_name["statue.OBJ"].description == "The statue"
        assert by_name["statue.OBJ"].type == MediaType.MODEL
        assert by_name["unknown.xyz"].type == MediaType.IMAGE
        assert by_name["unknown.xyz"].description == "unknown.xyz"
        assert by_name["walkthrough.MP4"].type == MediaType.VIDEO

    def test_uri_is_path_in_folder(self, project_root):
        media = scan_media(project_root)

        cat = next(m for m in media if m.uri.endswith("cat.png"))
        assert cat.uri == str(project_root / "photos" / "cat.png")

    def test_directories_ignored(self, project_root):
        media = scan_media(project_root)

        assert not any(m.uri.endswith("nested") for m in media)

    def test_extension_beats_folder(self, tmp_path):
        (tmp_path / "photos").mkdir()
        (tmp_path / "photos" / "clip.webm").write_bytes(b"")

        media = scan_media(tmp_path)

        assert [m.type for m in media] == [MediaType.VIDEO]

    def test_unreadable_folder_skipped(self, project_root, monkeypatch):
        real_scandir = os.scandir

        def scandir(path):
            if Path(path).name == "photos":
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", scandir)

        names = {m.uri.rsplit("/", 1)[-1] for m in scan_media(project_root)}

        assert names == {"walkthrough.MP4", "statue.OBJ"}

    def test_unreadable_entry_skipped(self, project_root, monkeypatch):
        real_scandir = os.scandir

        class BrokenEntry:
            def __init__(self, entry):
                self.name = entry.name
                self.path = entry.path

            def is_file(self):
                raise OSError(5, "Input/output error", self.path)

        @contextmanager
        def scandir(path):
            with real_scandir(path) as it:
                yield [BrokenEntry(e) if e.name == "cat.png" else e for e in it]

        monkeypatch.setattr(os, "scandir", scandir)

        names = {m.uri.rsplit("/", 1)[-1] for m in scan_media(project_root)}

        assert names == {"unknown.xyz", "walkthrough.MP4", "statue.OBJ"}

    def test_absent_folders(self, tmp_path):
        assert scan_media(tmp_path) == []

    def test_missing_root(self, tmp_path):
        assert scan_media(tmp_path / "gone") == []


class TestRefresh:
    """Tests for project refresh."""

    @pytest.mark.asyncio
    async def test_refresh(self, project):
        updated = await refresh(project)

        assert updated.description == "Garden statue restoration\nPhase one of three"
        assert len(updated.media) == 4
        assert updated.id == project.id
        # input left untouched
        assert project.media == []
        assert project.description == "Old description"

    @pytest.mark.asyncio
    async def test_idempotent(self, project):
        first = await refresh(project)
        second = await refresh(first)

        assert as_set(first.media) == as_set(second.media)
        assert second.description == first.description

    @pytest.mark.asyncio
    async def test_replaces_media(self, project, project_root):
        first = await refresh(project)
        (project_root / "photos" / "cat.png").unlink()

        second = await refresh(first)

        assert len(second.media) == len(first.media) - 1
        assert not any(m.uri.endswith("cat.png") for m in second.media)

    @pytest.mark.asyncio
    async def test_keeps_description_without_desc_file(self, tmp_path):
        project = ProjectRecord(
            id="p2", user_id="u1", description="Kept", storage_location=str(tmp_path)
        )

        updated = await refresh(project)

        assert updated.description == "Kept"
        assert updated.media == []

    @pytest.mark.asyncio
    async def test_no_storage_location(self):
        project = ProjectRecord(id="p3", user_id="u1")

        with pytest.raises(NoStorageLocation):
            await refresh(project)
