from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from ..enums import Model
from ..errors import DuplicateFileError, DuplicateSiteError, NotFoundError
from ..models import FileRecord, Site
from ..utils import normalize_id
from .orm import FileRow, SiteRow


def _site_values(site: Site) -> dict:
    return {
        "name": site.name,
        "state": site.state.value if site.state is not None else None,
        "notes": site.notes,
        "auto_download": site.auto_download,
        "tz_offset_seconds": site.tz_offset_seconds,
    }


class SiteRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, site: Site) -> None:
        if self.session.get(SiteRow, site.station_num) is not None:
            raise DuplicateSiteError(site.station_num)
        self.session.add(SiteRow(station_num=site.station_num, **_site_values(site)))
        self.session.flush()

    def update(self, site: Site) -> None:
        row = self.session.get(SiteRow, site.station_num)
        if row is None:
            raise NotFoundError(f"No site with station number {site.station_num}")
        for key, value in _site_values(site).items():
            setattr(row, key, value)
        self.session.flush()

    def ensure(self, station_num: int) -> bool:
        """Create a bare site if none exists. Returns True when one was created."""
        if self.session.get(SiteRow, station_num) is not None:
            return False
        self.add(Site(station_num=station_num))
        return True

    def get(self, station_num: int) -> Optional[Site]:
        row = self.session.get(SiteRow, station_num)
        return Site.model_validate(row, from_attributes=True) if row else None

    def list_all(self) -> List[Site]:
        rows = self.session.scalars(select(SiteRow).order_by(SiteRow.station_num)).all()
        return [Site.model_validate(row, from_attributes=True) for row in rows]

    def list_for(self, station_nums: Iterable[int]) -> List[Site]:
        stmt = (
            select(SiteRow)
            .where(SiteRow.station_num.in_(list(station_nums)))
            .order_by(SiteRow.station_num)
        )
        rows = self.session.scalars(stmt).all()
        return [Site.model_validate(row, from_attributes=True) for row in rows]

    def station_nums(self) -> Set[int]:
        return set(self.session.scalars(select(SiteRow.station_num)).all())

    def auto_download_station_nums(self) -> List[int]:
        stmt = (
            select(SiteRow.station_num)
            .where(SiteRow.auto_download.is_(True))
            .order_by(SiteRow.station_num)
        )
        return list(self.session.scalars(stmt).all())

    def delete(self, station_num: int) -> List[str]:
        """
        Delete a site, its files and its id bindings. Returns the file names
        that were removed from the index.
        """
        row = self.session.get(SiteRow, station_num)
        if row is None:
            raise NotFoundError(f"No site with station number {station_num}")
        file_names = list(
            self.session.scalars(
                select(FileRow.file_name).where(FileRow.station_num == station_num)
            ).all()
        )
        self.session.delete(row)
        self.session.flush()
        return file_names


class FileRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _key(self, station_num: int, model: Model, init_time: datetime) -> list:
        return [
            FileRow.station_num == station_num,
            FileRow.model == Model(model).value,
            FileRow.init_time == init_time,
        ]

    def upsert(self, record: FileRecord) -> Optional[str]:
        """
        Insert or replace the row for the record's (station, model, init_time).

        Returns the file name of the replaced row when it differs from the new
        one so the caller can drop the stale blob.
        """
        owner = self.session.scalar(select(FileRow).where(FileRow.file_name == record.file_name))
        if owner is not None and (
            owner.station_num != record.station_num
            or owner.model != record.model.value
            or owner.init_time != record.init_time
        ):
            raise DuplicateFileError(record.file_name)

        row = self.session.scalar(
            select(FileRow).where(*self._key(record.station_num, record.model, record.init_time))
        )
        replaced: Optional[str] = None
        if row is None:
            row = FileRow(
                station_num=record.station_num,
                model=record.model.value,
                init_time=record.init_time,
            )
            self.session.add(row)
        elif row.file_name != record.file_name:
            replaced = row.file_name
        row.end_time = record.end_time
        row.file_name = record.file_name
        row.site_id = record.site_id
        row.lat = record.lat
        row.lon = record.lon
        row.elevation_m = record.elevation_m
        self.session.flush()
        return replaced

    def insert(self, record: FileRecord) -> None:
        """Plain insert; uniqueness violations surface as IntegrityError on flush."""
        self.session.add(
            FileRow(
                station_num=record.station_num,
                model=record.model.value,
                init_time=record.init_time,
                end_time=record.end_time,
                file_name=record.file_name,
                site_id=record.site_id,
                lat=record.lat,
                lon=record.lon,
                elevation_m=record.elevation_m,
            )
        )
        self.session.flush()

    def file_name(self, station_num: int, model: Model, init_time: datetime) -> str:
        name = self.session.scalar(
            select(FileRow.file_name).where(*self._key(station_num, model, init_time))
        )
        if name is None:
            raise NotFoundError(
                f"No {Model(model).value} file for station {station_num} at {init_time}"
            )
        return name

    def most_recent(self, station_num: int, model: Model) -> FileRecord:
        row = self.session.scalar(
            select(FileRow)
            .where(FileRow.station_num == station_num, FileRow.model == Model(model).value)
            .order_by(FileRow.init_time.desc())
            .limit(1)
        )
        if row is None:
            raise NotFoundError(f"No {Model(model).value} files for station {station_num}")
        return self._to_record(row)

    def exists(self, station_num: int, model: Model, init_time: datetime) -> bool:
        count = self.session.scalar(
            select(func.count())
            .select_from(FileRow)
            .where(*self._key(station_num, model, init_time))
        )
        return bool(count)

    def count(self, station_num: int, model: Model) -> int:
        stmt = (
            select(func.count())
            .select_from(FileRow)
            .where(FileRow.station_num == station_num, FileRow.model == Model(model).value)
        )
        return int(self.session.scalar(stmt) or 0)

    def init_times(self, station_num: int, model: Model) -> List[datetime]:
        stmt = (
            select(FileRow.init_time)
            .where(FileRow.station_num == station_num, FileRow.model == Model(model).value)
            .order_by(FileRow.init_time.asc())
        )
        return list(self.session.scalars(stmt).all())

    def models(self, station_num: int) -> Set[Model]:
        stmt = select(FileRow.model).where(FileRow.station_num == station_num).distinct()
        return {Model(name) for name in self.session.scalars(stmt).all()}

    def station_for_id(self, site_id: str, model: Model) -> Optional[int]:
        """Station most recently filed under ``site_id`` for ``model``."""
        return self.session.scalar(
            select(FileRow.station_num)
            .where(FileRow.site_id == normalize_id(site_id), FileRow.model == Model(model).value)
            .order_by(FileRow.init_time.desc())
            .limit(1)
        )

    def ids(self, station_num: int, model: Model) -> List[str]:
        stmt = (
            select(FileRow.site_id)
            .where(
                FileRow.station_num == station_num,
                FileRow.model == Model(model).value,
                FileRow.site_id.is_not(None),
            )
            .distinct()
            .order_by(FileRow.site_id)
        )
        return list(self.session.scalars(stmt).all())

    def most_recent_id(self, station_num: int, model: Model) -> Optional[str]:
        return self.session.scalar(
            select(FileRow.site_id)
            .where(FileRow.station_num == station_num, FileRow.model == Model(model).value)
            .order_by(FileRow.init_time.desc())
            .limit(1)
        )

    def file_names_valid_in(
        self, station_num: int, model: Model, start: datetime, end: datetime
    ) -> List[str]:
        """Files with any forecast hour valid between ``start`` and ``end``."""
        stmt = (
            select(FileRow.file_name)
            .where(
                FileRow.station_num == station_num,
                FileRow.model == Model(model).value,
                or_(
                    (FileRow.init_time <= start) & (FileRow.end_time >= end),
                    (FileRow.init_time >= start) & (FileRow.init_time < end),
                    (FileRow.end_time > start) & (FileRow.end_time <= end),
                ),
            )
            .order_by(FileRow.init_time.asc())
        )
        return list(self.session.scalars(stmt).all())

    def matching(
        self,
        station_nums: Sequence[int],
        models: Sequence[Model],
        start: datetime,
        end: datetime,
    ) -> List[FileRecord]:
        stmt = (
            select(FileRow)
            .where(
                FileRow.station_num.in_(list(station_nums)),
                FileRow.model.in_([Model(m).value for m in models]),
                FileRow.init_time >= start,
                FileRow.init_time <= end,
            )
            .order_by(FileRow.station_num, FileRow.model, FileRow.init_time)
        )
        return [self._to_record(row) for row in self.session.scalars(stmt).all()]

    def for_station(self, station_num: int) -> List[FileRecord]:
        stmt = (
            select(FileRow)
            .where(FileRow.station_num == station_num)
            .order_by(FileRow.model, FileRow.init_time)
        )
        return [self._to_record(row) for row in self.session.scalars(stmt).all()]

    def delete(self, station_num: int, model: Model, init_time: datetime) -> None:
        result = self.session.execute(delete(FileRow).where(*self._key(station_num, model, init_time)))
        if result.rowcount == 0:
            raise NotFoundError(
                f"No {Model(model).value} file for station {station_num} at {init_time}"
            )

    def delete_by_name(self, file_name: str) -> int:
        result = self.session.execute(delete(FileRow).where(FileRow.file_name == file_name))
        return int(result.rowcount or 0)

    def all_file_names(self) -> Set[str]:
        return set(self.session.scalars(select(FileRow.file_name)).all())

    @staticmethod
    def _to_record(row: FileRow) -> FileRecord:
        return FileRecord.model_validate(row, from_attributes=True)
