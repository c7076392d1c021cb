from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Generator, List, Optional, Sequence, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .blobs import BlobStore
from .config import DATA_DIR_NAME, INDEX_FILE_NAME
from .db.database import create_index_engine, init_database, make_session_factory, session_scope
from .db.repositories import FileRepository, SiteRepository
from .enums import Model
from .errors import (
    ArchiveExistsError,
    ArchiveIOError,
    ArchiveNotFoundError,
    ContentParseError,
    IdentityMismatchError,
    IndexStoreError,
    InsufficientDataError,
    InvalidSiteId,
    NotFoundError,
)
from .export import export_archive
from .identity import SiteIdentityManager
from .inventory import build_inventory, missing_runs
from .models import (
    AddFileResult,
    AddStatus,
    CleanReport,
    Coords,
    DownloadInfo,
    FileRecord,
    Inventory,
    Site,
    StationSummary,
)
from .reconcile import Reconciler
from .services.bufkit import BufkitParser, ContentParser
from .utils import file_name_for, is_valid_site_id, normalize_id

logger = logging.getLogger(__name__)


class Archive:
    """
    An archive of BUFKIT soundings: a SQLite index under ``root`` plus a
    directory of gzip-compressed files, kept in step with each other.

    Use :meth:`create` for a new archive and :meth:`connect` for an existing
    one. Each operation draws its own session from the handle's pool; callers
    that write from several processes must serialize externally.
    """

    def __init__(self, root: Path, parser: Optional[ContentParser] = None) -> None:
        self.root = Path(root)
        self.parser: ContentParser = parser or BufkitParser()
        self.blobs = BlobStore(self.data_root)
        self.engine = create_index_engine(self.root)
        self._sessions = make_session_factory(self.engine)

    # ------------------------------------------------------------------ setup

    @classmethod
    def create(cls, root: Path, parser: Optional[ContentParser] = None) -> "Archive":
        root = Path(root)
        if (root / INDEX_FILE_NAME).exists():
            raise ArchiveExistsError(f"An archive already exists at {root}")
        try:
            (root / DATA_DIR_NAME).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArchiveIOError(f"Unable to create archive at {root}: {exc}") from exc
        archive = cls(root, parser)
        archive._migrate()
        logger.info("created archive at %s", root)
        return archive

    @classmethod
    def connect(cls, root: Path, parser: Optional[ContentParser] = None) -> "Archive":
        root = Path(root)
        if not (root / INDEX_FILE_NAME).is_file() or not (root / DATA_DIR_NAME).is_dir():
            raise ArchiveNotFoundError(f"No archive at {root}")
        archive = cls(root, parser)
        archive._migrate()
        return archive

    def _migrate(self) -> None:
        try:
            init_database(self.engine)
        except SQLAlchemyError as exc:
            self.close()
            raise IndexStoreError(f"Unable to prepare index: {exc}") from exc

    @property
    def data_root(self) -> Path:
        return self.root / DATA_DIR_NAME

    def close(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> "Archive":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """One transaction against the index; index failures become IndexStoreError."""
        try:
            with session_scope(self._sessions) as session:
                yield session
        except SQLAlchemyError as exc:
            raise IndexStoreError(str(exc)) from exc

    # ------------------------------------------------------------------ sites

    def add_site(self, site: Site) -> None:
        with self.session() as session:
            SiteRepository(session).add(site)
        logger.info("added site %s", site.station_num)

    def update_site(self, site: Site) -> None:
        with self.session() as session:
            SiteRepository(session).update(site)

    def site(self, station_num: int) -> Optional[Site]:
        with self.session() as session:
            return SiteRepository(session).get(station_num)

    def sites(self) -> List[Site]:
        with self.session() as session:
            return SiteRepository(session).list_all()

    def remove_site(self, station_num: int) -> List[str]:
        """
        Remove a site with all its files. Returns the removed file names.

        Unlike :meth:`remove`, blobs that are already missing are logged and
        skipped so a site can always be dropped.
        """
        with self.session() as session:
            file_names = SiteRepository(session).delete(station_num)
            for name in file_names:
                if self.blobs.exists(name):
                    self.blobs.remove(name)
                else:
                    logger.warning("blob %s for station %s was already missing", name, station_num)
        logger.info("removed site %s and %d files", station_num, len(file_names))
        return file_names

    # ---------------------------------------------------------------- site ids

    def bind_id(self, site_id: str, station_num: int) -> Optional[int]:
        """
        Point ``site_id`` at ``station_num``. Returns the station the id was
        moved away from, if any.
        """
        with self.session() as session:
            if SiteRepository(session).get(station_num) is None:
                raise NotFoundError(f"No site with station number {station_num}")
            return SiteIdentityManager(session).bind_id(site_id, station_num)

    def station_num_for_id(self, site_id: str, model: Optional[Model] = None) -> int:
        """
        Station currently bound to ``site_id``. When no binding exists and a
        model is given, fall back to the station most recently filed under
        that id for the model.
        """
        with self.session() as session:
            station_num = SiteIdentityManager(session).owner(site_id)
            if station_num is None and model is not None:
                station_num = FileRepository(session).station_for_id(site_id, model)
        if station_num is None:
            raise NotFoundError(f"No station for site id {normalize_id(site_id)}")
        return station_num

    def ids(self, station_num: int, model: Model) -> List[str]:
        """Every id files for this station and model were filed under."""
        with self.session() as session:
            return FileRepository(session).ids(station_num, model)

    def most_recent_id(self, station_num: int, model: Model) -> Optional[str]:
        """
        The id of the newest file for this station and model, provided that
        id still belongs to the station.
        """
        with self.session() as session:
            site_id = FileRepository(session).most_recent_id(station_num, model)
            if site_id is None:
                return None
            owner = SiteIdentityManager(session).owner(site_id)
        return site_id if owner in (None, station_num) else None

    # ------------------------------------------------------------------ files

    def add(self, site_id_hint: str, model: Model, text: str) -> AddFileResult:
        """
        Parse, compress and index one BUFKIT file.

        The site is created when its station number has never been seen, and
        ``site_id_hint`` is bound to the station, moving it from another
        station if necessary.
        """
        model = Model(model)
        hint = normalize_id(site_id_hint) if site_id_hint else ""
        if hint and not is_valid_site_id(hint):
            raise InvalidSiteId(f"Site id {site_id_hint!r} cannot be used in a file name")
        summary = self.parser.summarize(text)
        if summary.station_id and not is_valid_site_id(summary.station_id):
            raise ContentParseError(f"Site id {summary.station_id!r} in file is not usable")
        if summary.station_id and hint and summary.station_id != hint:
            raise IdentityMismatchError(hint, summary.station_id)
        site_id = hint or summary.station_id
        if not site_id:
            raise ContentParseError("No site id in the file and no hint given")

        file_name = file_name_for(site_id, model, summary.init_time)
        record = FileRecord(
            station_num=summary.station_num,
            model=model,
            init_time=summary.init_time,
            end_time=summary.end_time,
            file_name=file_name,
            site_id=site_id,
            lat=summary.coords.lat if summary.coords else None,
            lon=summary.coords.lon if summary.coords else None,
            elevation_m=summary.elevation_m,
        )

        with self.session() as session:
            created = SiteRepository(session).ensure(record.station_num)
            replaced = FileRepository(session).upsert(record)
            self.blobs.store(file_name, text)
            previous = SiteIdentityManager(session).bind_id(site_id, record.station_num)

        if replaced and self.blobs.exists(replaced):
            self.blobs.remove(replaced)
            logger.info("replaced %s with %s", replaced, file_name)

        if previous is not None:
            status = AddStatus.ID_MOVED_STATION
        elif created:
            status = AddStatus.NEW
            logger.info("new site %s from %s", record.station_num, file_name)
        else:
            status = AddStatus.OK
        logger.debug("added %s", file_name)
        return AddFileResult(
            status=status,
            station_num=record.station_num,
            file_name=file_name,
            previous_station_num=previous,
        )

    def retrieve(self, station_num: int, model: Model, init_time: datetime) -> str:
        with self.session() as session:
            file_name = FileRepository(session).file_name(station_num, model, init_time)
        return self.blobs.load(file_name)

    def retrieve_most_recent(self, station_num: int, model: Model) -> str:
        with self.session() as session:
            record = FileRepository(session).most_recent(station_num, model)
        return self.blobs.load(record.file_name)

    def retrieve_all_valid_in(
        self, station_num: int, model: Model, start: datetime, end: datetime
    ) -> List[str]:
        """Text of every file with data valid between ``start`` and ``end``."""
        with self.session() as session:
            file_names = FileRepository(session).file_names_valid_in(
                station_num, model, start, end
            )
        if not file_names:
            raise NotFoundError(
                f"No {Model(model).value} files for station {station_num} "
                f"valid between {start} and {end}"
            )
        return [self.blobs.load(name) for name in file_names]

    def remove(self, station_num: int, model: Model, init_time: datetime) -> None:
        """
        Remove one file and its row together. When the blob is already gone
        this raises ArchiveIOError and the row stays; ``clean`` drops such rows.
        """
        with self.session() as session:
            files = FileRepository(session)
            file_name = files.file_name(station_num, model, init_time)
            files.delete(station_num, model, init_time)
            self.blobs.remove(file_name)
        logger.info("removed %s", file_name)

    def file_exists(self, station_num: int, model: Model, init_time: datetime) -> bool:
        with self.session() as session:
            return FileRepository(session).exists(station_num, model, init_time)

    def most_recent_init_time(self, station_num: int, model: Model) -> datetime:
        with self.session() as session:
            return FileRepository(session).most_recent(station_num, model).init_time

    def init_times(self, station_num: int, model: Model) -> List[datetime]:
        with self.session() as session:
            return FileRepository(session).init_times(station_num, model)

    def count(self, station_num: int, model: Model) -> int:
        with self.session() as session:
            return FileRepository(session).count(station_num, model)

    def models(self, station_num: int) -> Set[Model]:
        with self.session() as session:
            return FileRepository(session).models(station_num)

    def file_names(self) -> Set[str]:
        with self.session() as session:
            return FileRepository(session).all_file_names()

    # -------------------------------------------------------------- inventory

    def inventory(self, station_num: int, model: Model) -> Inventory:
        model = Model(model)
        with self.session() as session:
            site = SiteRepository(session).get(station_num)
            if site is None:
                raise NotFoundError(f"No site with station number {station_num}")
            init_times = FileRepository(session).init_times(station_num, model)
        return build_inventory(init_times, model.hours_between_runs, site.auto_download)

    def missing_inventory(
        self,
        station_num: int,
        model: Model,
        time_range: Optional[Tuple[datetime, datetime]] = None,
    ) -> List[datetime]:
        """
        Runs absent from the archive. Without ``time_range`` the span between
        the first and last stored runs is checked; the range is inclusive.
        """
        model = Model(model)
        init_times = self.init_times(station_num, model)
        if time_range is None:
            if not init_times:
                raise InsufficientDataError(
                    f"No {model.value} files for station {station_num}"
                )
            time_range = (init_times[0], init_times[-1])
        start, end = time_range
        return missing_runs(init_times, model, start, end)

    def auto_downloads(self) -> List[DownloadInfo]:
        """Sites flagged for automatic download with the id to request them by."""
        infos: List[DownloadInfo] = []
        with self.session() as session:
            files = FileRepository(session)
            identity = SiteIdentityManager(session)
            for station_num in SiteRepository(session).auto_download_station_nums():
                bound = identity.ids_for_station(station_num)
                for model in sorted(files.models(station_num), key=lambda m: m.value):
                    site_id = files.most_recent_id(station_num, model)
                    if site_id is None or identity.owner(site_id) not in (None, station_num):
                        site_id = bound[0] if bound else None
                    if site_id is None:
                        continue
                    infos.append(DownloadInfo(id=site_id, station_num=station_num, model=model))
        if not infos:
            raise NotFoundError("No sites are marked for automatic download")
        return infos

    def station_summaries(self) -> List[StationSummary]:
        summaries: List[StationSummary] = []
        with self.session() as session:
            files = FileRepository(session)
            identity = SiteIdentityManager(session)
            for site in SiteRepository(session).list_all():
                records = files.for_station(site.station_num)
                ids = set(identity.ids_for_station(site.station_num))
                ids.update(r.site_id for r in records if r.site_id)
                coords: List[Coords] = []
                for record in records:
                    if record.coords is not None and record.coords not in coords:
                        coords.append(record.coords)
                summaries.append(
                    StationSummary(
                        station_num=site.station_num,
                        ids=sorted(ids),
                        models=sorted({r.model for r in records}, key=lambda m: m.value),
                        name=site.name,
                        notes=site.notes,
                        state=site.state,
                        tz_offset_seconds=site.tz_offset_seconds,
                        auto_download=site.auto_download,
                        coords=coords,
                        number_of_files=len(records),
                    )
                )
        return summaries

    def station_summaries_near(self, lat: float, lon: float) -> List[StationSummary]:
        """
        Summaries of stations with files located within half a degree of
        ``(lat, lon)``, nearest first. Only coordinates inside that box are
        kept on each summary.
        """
        near: List[StationSummary] = []
        for summary in self.station_summaries():
            coords = [
                c for c in summary.coords if abs(c.lat - lat) < 0.5 and abs(c.lon - lon) < 0.5
            ]
            if coords:
                near.append(summary.model_copy(update={"coords": coords}))
        near.sort(key=lambda s: min(c.distance_km(lat, lon) for c in s.coords))
        return near

    def sites_and_ids_for(self, model: Model) -> List[Tuple[Site, str]]:
        """Each site with files for ``model`` paired with the id of its newest one."""
        pairs: List[Tuple[Site, str]] = []
        with self.session() as session:
            files = FileRepository(session)
            for site in SiteRepository(session).list_all():
                site_id = files.most_recent_id(site.station_num, model)
                if site_id is not None:
                    pairs.append((site, site_id))
        return pairs

    # ------------------------------------------------------------ maintenance

    def clean(self) -> CleanReport:
        return Reconciler(self).clean()

    def export(
        self,
        stations: Sequence[int],
        models: Sequence[Model],
        start: datetime,
        end: datetime,
        destination: Path,
    ) -> "Archive":
        return export_archive(self, stations, models, start, end, destination)
