"""Site id to station number bindings.

A textual site id (an airport code, for instance) resolves to at most one
station at any time. Ids get reassigned between stations over the years, so
a rebinding simply moves the id; file rows reference station numbers and are
never touched here.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .db.orm import SiteIdRow
from .errors import NotFoundError
from .utils import normalize_id

logger = logging.getLogger(__name__)


class SiteIdentityManager:
    """
    Operates inside the caller's session, so a rebind commits or rolls back
    together with whatever else the caller is doing.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def owner(self, site_id: str) -> Optional[int]:
        return self.session.scalar(
            select(SiteIdRow.station_num).where(SiteIdRow.id == normalize_id(site_id))
        )

    def bind_id(self, site_id: str, station_num: int) -> Optional[int]:
        """
        Bind ``site_id`` to ``station_num``.

        Returns the station the id was taken from when it had to move, None
        when the id was unbound or already bound to this station.
        """
        site_id = normalize_id(site_id)
        current = self.owner(site_id)
        if current == station_num:
            return None
        if current is not None:
            self.session.execute(delete(SiteIdRow).where(SiteIdRow.id == site_id))
            self.session.flush()
            logger.info("site id %s moved from station %s to %s", site_id, current, station_num)
        self.session.add(SiteIdRow(id=site_id, station_num=station_num))
        self.session.flush()
        return current

    def unbind(self, site_id: str) -> None:
        self.session.execute(delete(SiteIdRow).where(SiteIdRow.id == normalize_id(site_id)))

    def station_for_id(self, site_id: str) -> int:
        station_num = self.owner(site_id)
        if station_num is None:
            raise NotFoundError(f"Site id {normalize_id(site_id)} is not bound to a station")
        return station_num

    def ids_for_station(self, station_num: int) -> List[str]:
        stmt = (
            select(SiteIdRow.id)
            .where(SiteIdRow.station_num == station_num)
            .order_by(SiteIdRow.id)
        )
        return list(self.session.scalars(stmt).all())

    def bound_station_nums(self) -> set:
        return set(self.session.scalars(select(SiteIdRow.station_num)).all())
