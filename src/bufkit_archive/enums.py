from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Iterator

from .errors import InvalidModelName, InvalidStateProv


class Model(str, Enum):
    """Numerical weather prediction sources stored in the archive."""

    GFS = "gfs"
    NAM = "nam"
    NAM4KM = "nam4km"

    def __str__(self) -> str:
        return self.value

    @property
    def hours_between_runs(self) -> int:
        return 6

    @property
    def base_hour(self) -> int:
        return 0

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return _MODEL_ALIASES.get(value.strip())
        return None

    @classmethod
    def parse(cls, text: str) -> "Model":
        try:
            return _MODEL_ALIASES[text.strip()]
        except (KeyError, AttributeError):
            raise InvalidModelName(f"Invalid model name: {text!r}") from None

    def all_runs(self, start: datetime, end: datetime) -> Iterator[datetime]:
        """
        Every run of this model between ``start`` and ``end`` (inclusive),
        walking backwards in time when ``start`` is after ``end``.
        """
        step = timedelta(hours=self.hours_between_runs)
        anchor = datetime(start.year, start.month, start.day) + timedelta(
            hours=self.base_hour
        )
        if start <= end:
            while anchor > start:
                anchor -= step
            while anchor < start:
                anchor += step
            current = anchor
            while current <= end:
                yield current
                current += step
        else:
            while anchor < start:
                anchor += step
            while anchor > start:
                anchor -= step
            current = anchor
            while current >= end:
                yield current
                current -= step


_MODEL_ALIASES: Dict[str, Model] = {
    "gfs": Model.GFS,
    "gfs3": Model.GFS,
    "GFS": Model.GFS,
    "GFS3": Model.GFS,
    "nam": Model.NAM,
    "namm": Model.NAM,
    "NAM": Model.NAM,
    "NAMM": Model.NAM,
    "nam4km": Model.NAM4KM,
    "NAM4KM": Model.NAM4KM,
}


class StateProv(str, Enum):
    AL = "AL"  # Alabama
    AK = "AK"  # Alaska
    AZ = "AZ"  # Arizona
    AR = "AR"  # Arkansas
    CA = "CA"  # California
    CO = "CO"  # Colorado
    CT = "CT"  # Connecticut
    DE = "DE"  # Delaware
    FL = "FL"  # Florida
    GA = "GA"  # Georgia
    HI = "HI"  # Hawaii
    ID = "ID"  # Idaho
    IL = "IL"  # Illinois
    IN = "IN"  # Indiana
    IA = "IA"  # Iowa
    KS = "KS"  # Kansas
    KY = "KY"  # Kentucky
    LA = "LA"  # Louisiana
    ME = "ME"  # Maine
    MD = "MD"  # Maryland
    MA = "MA"  # Massachusetts
    MI = "MI"  # Michigan
    MN = "MN"  # Minnesota
    MS = "MS"  # Mississippi
    MO = "MO"  # Missouri
    MT = "MT"  # Montana
    NE = "NE"  # Nebraska
    NV = "NV"  # Nevada
    NH = "NH"  # New Hampshire
    NJ = "NJ"  # New Jersey
    NM = "NM"  # New Mexico
    NY = "NY"  # New York
    NC = "NC"  # North Carolina
    ND = "ND"  # North Dakota
    OH = "OH"  # Ohio
    OK = "OK"  # Oklahoma
    OR = "OR"  # Oregon
    PA = "PA"  # Pennsylvania
    RI = "RI"  # Rhode Island
    SC = "SC"  # South Carolina
    SD = "SD"  # South Dakota
    TN = "TN"  # Tennessee
    TX = "TX"  # Texas
    UT = "UT"  # Utah
    VT = "VT"  # Vermont
    VA = "VA"  # Virginia
    WA = "WA"  # Washington
    WV = "WV"  # West Virginia
    WI = "WI"  # Wisconsin
    WY = "WY"  # Wyoming
    AS = "AS"  # American Samoa
    DC = "DC"  # District of Columbia
    FM = "FM"  # Federated States of Micronesia
    MH = "MH"  # Marshall Islands
    MP = "MP"  # Northern Mariana Islands
    PW = "PW"  # Palau
    PR = "PR"  # Puerto Rico
    VI = "VI"  # Virgin Islands

    def __str__(self) -> str:
        return self.value

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return _STATE_ALIASES.get(value.strip())
        return None

    @classmethod
    def parse(cls, text: str) -> "StateProv":
        try:
            return _STATE_ALIASES[text.strip()]
        except (KeyError, AttributeError):
            raise InvalidStateProv(f"Invalid state/province code: {text!r}") from None


_STATE_ALIASES: Dict[str, StateProv] = {}
for _state in StateProv:
    _STATE_ALIASES[_state.value] = _state
    _STATE_ALIASES[_state.value.lower()] = _state
# Pre-1969 postal abbreviation for Nebraska, still found in older site lists.
_STATE_ALIASES["NB"] = StateProv.NE
_STATE_ALIASES["nb"] = StateProv.NE
del _state
