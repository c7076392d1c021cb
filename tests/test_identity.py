"""
Tests for site id bindings.
"""
import pytest

from bufkit_archive.errors import NotFoundError
from bufkit_archive.models import Site


@pytest.fixture
def two_sites(archive):
    archive.add_site(Site(station_num=5))
    archive.add_site(Site(station_num=7))
    return archive


def test_rebinding_moves_only_that_id(two_sites):
    arch = two_sites
    assert arch.bind_id("ABC", 5) is None
    assert arch.bind_id("XYZ", 5) is None
    assert arch.station_num_for_id("ABC") == 5

    assert arch.bind_id("ABC", 7) == 5
    assert arch.station_num_for_id("ABC") == 7
    assert arch.station_num_for_id("XYZ") == 5


def test_binding_same_station_is_noop(two_sites):
    arch = two_sites
    arch.bind_id("abc", 5)
    assert arch.bind_id("ABC", 5) is None
    assert arch.station_num_for_id("Abc") == 5


def test_unknown_id(two_sites):
    with pytest.raises(NotFoundError):
        two_sites.station_num_for_id("NOPE")


def test_bind_to_unknown_station(two_sites):
    with pytest.raises(NotFoundError):
        two_sites.bind_id("ABC", 99)


def test_manager_lists_ids(two_sites):
    from bufkit_archive.identity import SiteIdentityManager

    arch = two_sites
    with arch.session() as session:
        manager = SiteIdentityManager(session)
        manager.bind_id("B", 5)
        manager.bind_id("A", 5)
        manager.bind_id("C", 7)
    with arch.session() as session:
        manager = SiteIdentityManager(session)
        assert manager.ids_for_station(5) == ["A", "B"]
        assert manager.station_for_id("C") == 7
        manager.unbind("C")
    with arch.session() as session:
        with pytest.raises(NotFoundError):
            SiteIdentityManager(session).station_for_id("C")


def test_rebind_rolls_back_with_transaction(two_sites):
    from bufkit_archive.identity import SiteIdentityManager

    arch = two_sites
    arch.bind_id("ABC", 5)
    with pytest.raises(RuntimeError):
        with arch.session() as session:
            SiteIdentityManager(session).bind_id("ABC", 7)
            raise RuntimeError("abort")
    assert arch.station_num_for_id("ABC") == 5
