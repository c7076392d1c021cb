"""
Test configuration and fixtures.
"""
from datetime import datetime, timedelta
from typing import Optional

import pytest

from bufkit_archive import Archive

MSO = 727730
BOI = 726810
INIT = datetime(2017, 4, 1, 0)


def bufkit_text(
    station_num: int = MSO,
    station_id: Optional[str] = "KMSO",
    init_time: datetime = INIT,
    hours: int = 3,
    step: int = 3,
    lat: float = 46.92,
    lon: float = -114.08,
    elevation: float = 972.0,
) -> str:
    """Small BUFKIT document with ``hours`` forecast hours ``step`` hours apart."""
    lines = [
        "SNPARM = PRES;TMPC;TMWC;DWPC;THTE;DRCT;SKNT;OMEG;CFRL;HGHT",
        "STNPRM = SHOW;LIFT;SWET;KINX;LCLP;PWAT;TOTL;CAPE;LCLT;CINS;EQLV;LFCT;BRCH",
        "",
    ]
    for idx in range(hours):
        valid = init_time + timedelta(hours=step * idx)
        lines.append(f"STID = {station_id or ''} STNM = {station_num} TIME = {valid:%y%m%d/%H%M}")
        lines.append(f"SLAT = {lat} SLON = {lon} SELV = {elevation}")
        lines.append(f"STIM = {step * idx}")
        lines.append("")
        lines.append("SHOW = 9.10 LIFT = 8.94 SWET = 77.82 KINX = 7.55")
        lines.append("PRES TMPC TMWC DWPC THTE DRCT SKNT OMEG")
        lines.append("903.60 5.24 1.25 -4.26 296.55 249.44 6.21 -1.00")
        lines.append("")
    return "\n".join(lines) + "\n"


@pytest.fixture
def archive(tmp_path):
    arch = Archive.create(tmp_path / "archive")
    yield arch
    arch.close()


@pytest.fixture
def make_text():
    return bufkit_text
