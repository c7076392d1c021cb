"""
Tests for exporting part of an archive into a new one.
"""
from datetime import timedelta

import pytest

from bufkit_archive import Archive
from bufkit_archive.enums import Model, StateProv
from bufkit_archive.errors import ArchiveIOError
from bufkit_archive.models import Site

from conftest import INIT, bufkit_text

H = timedelta(hours=1)


def test_export_subset(archive, tmp_path):
    archive.add_site(
        Site(station_num=1, name="Missoula", state=StateProv.MT, auto_download=True)
    )
    archive.add_site(Site(station_num=2, name="Boise", state=StateProv.ID))
    for station_num, site_id in ((1, "KMSO"), (2, "KBOI")):
        for offset in (0, 6, 12, 18):
            archive.add(
                site_id,
                Model.GFS,
                bufkit_text(station_num, site_id, init_time=INIT + offset * H),
            )
        archive.add(site_id, Model.NAM, bufkit_text(station_num, site_id))

    source_names = archive.file_names()
    destination = tmp_path / "exported"

    with archive.export([1], [Model.GFS], INIT + 6 * H, INIT + 12 * H, destination) as exported:
        assert exported.sites() == [archive.site(1)]
        assert exported.init_times(1, Model.GFS) == [INIT + 6 * H, INIT + 12 * H]
        assert exported.models(1) == {Model.GFS}
        assert exported.station_num_for_id("KMSO") == 1
        assert exported.file_names() == exported.blobs.enumerate()
        for name in exported.file_names():
            assert (
                exported.blobs.path_for(name).read_bytes()
                == archive.blobs.path_for(name).read_bytes()
            )

    assert archive.file_names() == source_names
    assert archive.count(2, Model.GFS) == 4

    with Archive.connect(destination) as reopened:
        assert reopened.count(1, Model.GFS) == 2


def test_failed_export_leaves_nothing_behind(archive, tmp_path):
    first = archive.add("KMSO", Model.GFS, bufkit_text(1, "KMSO"))
    archive.add("KMSO", Model.GFS, bufkit_text(1, "KMSO", init_time=INIT + 6 * H))
    archive.blobs.path_for(first.file_name).unlink()
    destination = tmp_path / "exported"

    with pytest.raises(ArchiveIOError):
        archive.export([1], [Model.GFS], INIT, INIT + 6 * H, destination)
    assert not destination.exists()

    with archive.export([1], [Model.GFS], INIT + 6 * H, INIT + 6 * H, destination) as exported:
        assert exported.count(1, Model.GFS) == 1


def test_failed_export_into_existing_directory(archive, tmp_path):
    first = archive.add("KMSO", Model.GFS, bufkit_text(1, "KMSO"))
    archive.blobs.path_for(first.file_name).unlink()
    destination = tmp_path / "exported"
    destination.mkdir()
    (destination / "README").write_text("keep me")

    with pytest.raises(ArchiveIOError):
        archive.export([1], [Model.GFS], INIT, INIT, destination)
    assert sorted(p.name for p in destination.iterdir()) == ["README"]
