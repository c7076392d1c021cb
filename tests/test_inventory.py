"""
Unit tests for inventory gap analysis.
"""
from datetime import datetime, timedelta

import pytest

from bufkit_archive.enums import Model
from bufkit_archive.errors import InsufficientDataError
from bufkit_archive.inventory import build_inventory, missing_runs

T = datetime(2017, 4, 1, 0)
H = timedelta(hours=1)


def test_single_gap():
    inv = build_inventory([T, T + 6 * H, T + 18 * H, T + 24 * H], 6)
    assert inv.first == T
    assert inv.last == T + 24 * H
    assert inv.missing == [(T + 12 * H, T + 12 * H)]
    assert inv.auto_download is False


def test_single_time():
    inv = build_inventory([T], 6, auto_download=True)
    assert inv.first == inv.last == T
    assert inv.missing == []
    assert inv.auto_download is True


def test_multi_run_gaps_reported_as_blocks():
    times = [T, T + 30 * H, T + 36 * H, T + 54 * H]
    inv = build_inventory(times, 6)
    assert inv.missing == [
        (T + 6 * H, T + 24 * H),
        (T + 42 * H, T + 48 * H),
    ]
    assert inv.last == T + 54 * H


def test_complete_series_has_no_gaps():
    inv = build_inventory((T + 6 * i * H for i in range(10)), 6)
    assert inv.missing == []
    assert inv.last == T + 54 * H


def test_empty_series():
    with pytest.raises(InsufficientDataError):
        build_inventory([], 6)


@pytest.mark.parametrize("cadence", [0, -6])
def test_bad_cadence(cadence):
    with pytest.raises(ValueError):
        build_inventory([T], cadence)


def test_missing_runs_within_range():
    times = [T, T + 6 * H, T + 18 * H]
    assert missing_runs(times, Model.GFS, T, T + 18 * H) == [T + 12 * H]
    assert missing_runs(times, Model.GFS, T, T + 24 * H) == [T + 12 * H, T + 24 * H]
    assert missing_runs([], Model.NAM, T, T + 6 * H) == [T, T + 6 * H]
