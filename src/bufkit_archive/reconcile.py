"""Reconciliation of the index with the files on disk.

``clean`` brings the set of file names in the index and the set of blobs in
the data directory back into agreement:

1. rows whose blob is gone are dropped (the data cannot be recovered);
2. blobs without a row are re-indexed from their contents when the name
   follows the archive grammar and the contents parse, otherwise deleted;
3. stations left without any site id are reported;
4. the index file is compacted.

Steps 1 and 2 each run in one transaction. A bad blob never stops the pass;
it is deleted and recorded in the report. Filesystem failures abort it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Set

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from .db.database import vacuum
from .db.repositories import FileRepository, SiteRepository
from .errors import BlobDecodeError, ContentParseError
from .identity import SiteIdentityManager
from .models import CleanReport, FileRecord
from .utils import is_valid_site_id, parse_file_name

if TYPE_CHECKING:
    from .archive import Archive

logger = logging.getLogger(__name__)


class Reconciler:
    def __init__(self, archive: "Archive") -> None:
        self.archive = archive

    def clean(self) -> CleanReport:
        report = CleanReport()

        logger.info("Building set of files from the index.")
        indexed = self.archive.file_names()

        logger.info("Building set of files from the file system.")
        on_disk = self.archive.blobs.enumerate()

        logger.info("Removing index entries without a file.")
        self._remove_missing_from_index(indexed - on_disk, report)

        logger.info("Indexing files missing from the index.")
        self._index_unlisted_files(on_disk - indexed, report)

        logger.info("Checking for orphaned stations.")
        self._find_orphaned_stations(report)

        logger.info("Compressing index.")
        vacuum(self.archive.engine)

        return report

    def _remove_missing_from_index(self, missing: Set[str], report: CleanReport) -> None:
        if not missing:
            return
        with self.archive.session() as session:
            files = FileRepository(session)
            for file_name in sorted(missing):
                files.delete_by_name(file_name)
                report.removed_from_index.append(file_name)
                logger.info("Removing %s from index.", file_name)

    def _index_unlisted_files(self, unlisted: Set[str], report: CleanReport) -> None:
        if not unlisted:
            return
        blobs = self.archive.blobs
        with self.archive.session() as session:
            sites = SiteRepository(session)
            files = FileRepository(session)
            identity = SiteIdentityManager(session)

            for file_name in sorted(unlisted):
                parsed = parse_file_name(file_name)
                if parsed is None:
                    self._drop_foreign(file_name, "name does not follow archive naming", report)
                    continue

                try:
                    summary = self.archive.parser.summarize(blobs.load(file_name))
                    site_id = (
                        summary.station_id
                        if is_valid_site_id(summary.station_id)
                        else parsed.site_id
                    )
                    record = FileRecord(
                        station_num=summary.station_num,
                        model=parsed.model,
                        init_time=summary.init_time,
                        end_time=summary.end_time,
                        file_name=file_name,
                        site_id=site_id,
                        lat=summary.coords.lat if summary.coords else None,
                        lon=summary.coords.lon if summary.coords else None,
                        elevation_m=summary.elevation_m,
                    )
                except (BlobDecodeError, ContentParseError, ValidationError) as exc:
                    self._drop_foreign(file_name, str(exc), report)
                    continue

                try:
                    with session.begin_nested():
                        if sites.ensure(record.station_num):
                            logger.info("Created site %s for %s.", record.station_num, file_name)
                        files.insert(record)
                        session.flush()
                except IntegrityError:
                    blobs.remove(file_name)
                    report.duplicates_removed.append(file_name)
                    logger.info("Duplicate file removed: %s", file_name)
                    continue

                # Recovered files never take an id away from its current owner.
                if identity.owner(site_id) is None:
                    identity.bind_id(site_id, record.station_num)
                report.added.append(file_name)
                logger.info("Added %s", file_name)

    def _drop_foreign(self, file_name: str, reason: str, report: CleanReport) -> None:
        self.archive.blobs.remove(file_name)
        report.foreign_removed[file_name] = reason
        logger.info("Removed non-bufkit file %s: %s", file_name, reason)

    def _find_orphaned_stations(self, report: CleanReport) -> None:
        with self.archive.session() as session:
            sites = SiteRepository(session)
            orphans = sites.station_nums() - SiteIdentityManager(session).bound_station_nums()
            for station_num in sorted(orphans):
                site = sites.get(station_num)
                logger.info("     %s - %s", station_num, site.name if site and site.name else "unknown")
                report.orphan_stations.append(station_num)
