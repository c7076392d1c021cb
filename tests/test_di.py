from bufkit_archive.di import Container
from bufkit_archive.enums import Model

from conftest import bufkit_text


def test_container_creates_then_connects(tmp_path):
    root = tmp_path / "bufkit"
    first = Container(root)
    arch = first.archive()
    assert (root / "index.db").exists()
    assert first.archive() is arch
    arch.add("KMSO", Model.GFS, bufkit_text())
    first.close()

    second = Container(root)
    assert second.archive().count(727730, Model.GFS) == 1
    second.close()
