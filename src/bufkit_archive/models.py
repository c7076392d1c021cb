from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Annotated, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import Model, StateProv

# 0 is never a valid station number.
StationNumber = Annotated[int, Field(gt=0)]

EARTH_RADIUS_KM = 6371.0088


class Coords(BaseModel):
    lat: float
    lon: float

    model_config = ConfigDict(frozen=True)

    def distance_km(self, lat: float, lon: float) -> float:
        """Great circle (haversine) distance to another point."""
        dlat = math.radians(lat - self.lat)
        dlon = math.radians(lon - self.lon)
        a = (
            math.sin(dlat / 2) ** 2
            + math.sin(dlon / 2) ** 2 * math.cos(math.radians(lat)) * math.cos(math.radians(self.lat))
        )
        return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


class Site(BaseModel):
    station_num: StationNumber
    name: Optional[str] = None
    notes: Optional[str] = None
    state: Optional[StateProv] = None
    auto_download: bool = False
    tz_offset_seconds: Optional[int] = None

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    @property
    def time_zone(self) -> Optional[timezone]:
        if self.tz_offset_seconds is None:
            return None
        return timezone(timedelta(seconds=self.tz_offset_seconds))

    @property
    def incomplete(self) -> bool:
        return self.name is None or self.state is None or self.tz_offset_seconds is None


class FileRecord(BaseModel):
    station_num: StationNumber
    model: Model
    init_time: datetime
    end_time: datetime
    file_name: str
    site_id: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    elevation_m: Optional[float] = None

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    @model_validator(mode="after")
    def _check_times(self) -> "FileRecord":
        if self.init_time > self.end_time:
            raise ValueError("init_time must not be after end_time")
        return self

    @property
    def coords(self) -> Optional[Coords]:
        if self.lat is None or self.lon is None:
            return None
        return Coords(lat=self.lat, lon=self.lon)


class Inventory(BaseModel):
    """
    First and last initialization times for a site and model, plus the
    blocks of runs missing in between as inclusive ``(start, end)`` pairs.
    """

    first: datetime
    last: datetime
    missing: List[Tuple[datetime, datetime]] = Field(default_factory=list)
    auto_download: bool = False


class AddStatus(str, Enum):
    OK = "ok"
    NEW = "new"
    ID_MOVED_STATION = "id_moved_station"


class AddFileResult(BaseModel):
    status: AddStatus
    station_num: StationNumber
    file_name: str
    # Station the id was bound to before this file moved it.
    previous_station_num: Optional[int] = None


class DownloadInfo(BaseModel):
    id: str
    station_num: StationNumber
    model: Model


class StationSummary(BaseModel):
    station_num: StationNumber
    ids: List[str] = Field(default_factory=list)
    models: List[Model] = Field(default_factory=list)
    name: Optional[str] = None
    notes: Optional[str] = None
    state: Optional[StateProv] = None
    tz_offset_seconds: Optional[int] = None
    auto_download: bool = False
    coords: List[Coords] = Field(default_factory=list)
    number_of_files: int = 0

    def ids_as_string(self) -> str:
        return ", ".join(self.ids)

    def models_as_string(self) -> str:
        return ", ".join(model.value for model in self.models)

    def coords_as_string(self) -> str:
        return ", ".join(f"({c.lat},{c.lon})" for c in self.coords)


class CleanReport(BaseModel):
    removed_from_index: List[str] = Field(default_factory=list)
    added: List[str] = Field(default_factory=list)
    duplicates_removed: List[str] = Field(default_factory=list)
    foreign_removed: Dict[str, str] = Field(default_factory=dict)
    orphan_stations: List[int] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(
            self.removed_from_index
            or self.added
            or self.duplicates_removed
            or self.foreign_removed
        )
