from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence

from .config import DATA_DIR_NAME, INDEX_FILE_NAME
from .db.repositories import FileRepository, SiteRepository
from .enums import Model
from .identity import SiteIdentityManager

if TYPE_CHECKING:
    from .archive import Archive

logger = logging.getLogger(__name__)


def export_archive(
    source: "Archive",
    stations: Sequence[int],
    models: Sequence[Model],
    start: datetime,
    end: datetime,
    destination: Path,
) -> "Archive":
    """
    Copy the given stations, and their files for ``models`` initialized in
    ``[start, end]``, into a new archive at ``destination``.

    Blobs are copied byte for byte. The destination index is written in one
    transaction; the source is only read. On failure everything the export
    created at ``destination`` is removed again.
    """
    destination = Path(destination)
    with source.session() as session:
        sites = SiteRepository(session).list_for(stations)
        identity = SiteIdentityManager(session)
        bindings = {site.station_num: identity.ids_for_station(site.station_num) for site in sites}
        records = FileRepository(session).matching(
            [site.station_num for site in sites], [Model(m) for m in models], start, end
        )

    created = [p for p in (destination, destination / DATA_DIR_NAME) if not p.exists()]
    target = type(source).create(destination, source.parser)
    try:
        with target.session() as session:
            site_repo = SiteRepository(session)
            file_repo = FileRepository(session)
            target_identity = SiteIdentityManager(session)
            for site in sites:
                site_repo.add(site)
                for site_id in bindings[site.station_num]:
                    target_identity.bind_id(site_id, site.station_num)
            for record in records:
                file_repo.insert(record)
                source.blobs.copy_to(record.file_name, target.blobs)
    except Exception:
        target.close()
        _discard(destination, created, [r.file_name for r in records])
        raise

    logger.info(
        "exported %d sites and %d files to %s", len(sites), len(records), destination
    )
    return target


def _discard(destination: Path, created: List[Path], file_names: List[str]) -> None:
    """Undo a failed export, leaving only what existed before it started."""
    try:
        if destination in created:
            shutil.rmtree(destination)
            return
        for suffix in ("", "-wal", "-shm"):
            index = destination / f"{INDEX_FILE_NAME}{suffix}"
            if index.exists():
                index.unlink()
        data = destination / DATA_DIR_NAME
        if data in created:
            shutil.rmtree(data)
        else:
            for name in file_names:
                blob = data / name
                if blob.exists():
                    blob.unlink()
    except OSError as exc:
        logger.warning("could not clean up failed export at %s: %s", destination, exc)
