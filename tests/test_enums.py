"""
Unit tests for model and state/province parsing.
"""
from datetime import datetime

import pytest

from bufkit_archive.enums import Model, StateProv
from bufkit_archive.errors import InvalidModelName, InvalidStateProv


@pytest.mark.parametrize(
    "text,expected",
    [
        ("gfs", Model.GFS),
        ("GFS", Model.GFS),
        ("gfs3", Model.GFS),
        ("GFS3", Model.GFS),
        ("nam", Model.NAM),
        ("NAMM", Model.NAM),
        ("namm", Model.NAM),
        ("nam4km", Model.NAM4KM),
        ("NAM4KM", Model.NAM4KM),
    ],
)
def test_model_aliases(text, expected):
    assert Model.parse(text) is expected
    assert Model(text) is expected


def test_model_serializes_to_one_spelling():
    assert str(Model.parse("GFS3")) == "gfs"
    assert Model.NAM4KM.value == "nam4km"


@pytest.mark.parametrize("text", ["", "rap", "Gfs", "nam12"])
def test_model_rejects_unknown(text):
    with pytest.raises(InvalidModelName):
        Model.parse(text)


def test_invalid_model_is_value_error():
    with pytest.raises(ValueError):
        Model.parse("hrrr")


def test_model_cadence():
    for model in Model:
        assert model.hours_between_runs == 6
        assert model.base_hour == 0


def test_all_runs_forward():
    start = datetime(2018, 9, 1, 0)
    end = datetime(2018, 9, 2, 0)
    runs = list(Model.GFS.all_runs(start, end))
    assert len(runs) == 5
    assert runs[0] == start and runs[-1] == end
    assert runs == sorted(runs)

    runs = list(Model.GFS.all_runs(datetime(2018, 9, 1, 0, 1), end))
    assert len(runs) == 4
    assert runs[0] == datetime(2018, 9, 1, 6)


def test_all_runs_backward():
    start = datetime(2018, 9, 2, 0)
    end = datetime(2018, 9, 1, 0)
    runs = list(Model.GFS.all_runs(start, end))
    assert len(runs) == 5
    assert runs == sorted(runs, reverse=True)

    runs = list(Model.GFS.all_runs(datetime(2018, 9, 2, 0, 2), datetime(2018, 9, 1, 0, 1)))
    assert len(runs) == 4
    assert all(datetime(2018, 9, 1, 0, 1) <= r <= datetime(2018, 9, 2, 0, 2) for r in runs)


def test_state_round_trip():
    for state in StateProv:
        assert StateProv.parse(state.value) is state


def test_state_aliases():
    assert StateProv.parse("mt") is StateProv.MT
    assert StateProv.parse("NB") is StateProv.NE
    assert StateProv("NB") is StateProv.NE
    assert str(StateProv.NE) == "NE"


def test_state_rejects_unknown():
    with pytest.raises(InvalidStateProv):
        StateProv.parse("XX")
