"""
Reads the station header blocks of BUFKIT text.

Only the header lines preceding each forecast hour are read:

    STID = KMSO STNM = 727730 TIME = 170401/0000
    SLAT = 46.92 SLON = -114.08 SELV = 972.0

The profile data itself is opaque to the archive.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional, Protocol

from pydantic import BaseModel

from ..errors import ContentParseError
from ..models import Coords

_HEADER = re.compile(
    r"STID\s*=\s*(?:(?!STNM)(?P<stid>\S+))?\s*"
    r"STNM\s*=\s*(?P<stnm>-?\d+)\s+"
    r"TIME\s*=\s*(?P<time>\d{6}/\d{4})"
)
_LOCATION = re.compile(
    r"SLAT\s*=\s*(?P<lat>-?\d+(?:\.\d*)?)\s+"
    r"SLON\s*=\s*(?P<lon>-?\d+(?:\.\d*)?)\s+"
    r"SELV\s*=\s*(?P<elev>-?\d+(?:\.\d*)?)"
)


class ForecastHour(BaseModel):
    station_num: int
    station_id: Optional[str] = None
    valid_time: datetime
    coords: Optional[Coords] = None
    elevation_m: Optional[float] = None


class ContentSummary(BaseModel):
    station_num: int
    station_id: Optional[str] = None
    init_time: datetime
    end_time: datetime
    coords: Optional[Coords] = None
    elevation_m: Optional[float] = None


class ContentParser(Protocol):
    def summarize(self, text: str) -> ContentSummary:
        ...


def parse_forecast_hours(text: str) -> List[ForecastHour]:
    headers = list(_HEADER.finditer(text))
    if not headers:
        raise ContentParseError("No BUFKIT station header found")

    hours: List[ForecastHour] = []
    for idx, header in enumerate(headers):
        block_end = headers[idx + 1].start() if idx + 1 < len(headers) else len(text)
        try:
            valid_time = datetime.strptime(header.group("time"), "%y%m%d/%H%M")
        except ValueError as exc:
            raise ContentParseError(f"Bad valid time {header.group('time')!r}") from exc

        coords = None
        elevation = None
        location = _LOCATION.search(text, header.end(), block_end)
        if location:
            coords = Coords(lat=float(location.group("lat")), lon=float(location.group("lon")))
            elevation = float(location.group("elev"))

        stid = header.group("stid")
        hours.append(
            ForecastHour(
                station_num=int(header.group("stnm")),
                station_id=stid.upper() if stid else None,
                valid_time=valid_time,
                coords=coords,
                elevation_m=elevation,
            )
        )
    return hours


def summarize(text: str) -> ContentSummary:
    """
    Station identity and time span of a BUFKIT file: the first forecast hour
    gives the station and initialization time, the last gives the end time.
    """
    hours = parse_forecast_hours(text)
    first, last = hours[0], hours[-1]
    if first.station_num <= 0:
        raise ContentParseError(f"Invalid station number {first.station_num}")
    if last.valid_time < first.valid_time:
        raise ContentParseError("Forecast hours are not in time order")
    return ContentSummary(
        station_num=first.station_num,
        station_id=first.station_id,
        init_time=first.valid_time,
        end_time=last.valid_time,
        coords=first.coords,
        elevation_m=first.elevation_m,
    )


class BufkitParser:
    """Default content parser handed to :class:`~bufkit_archive.archive.Archive`."""

    def summarize(self, text: str) -> ContentSummary:
        return summarize(text)
