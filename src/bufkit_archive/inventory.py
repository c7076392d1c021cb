from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from .enums import Model
from .errors import InsufficientDataError
from .models import Inventory


def build_inventory(
    init_times: Iterable[datetime],
    hours_between_runs: int,
    auto_download: bool = False,
) -> Inventory:
    """
    Coverage and gaps for one site and model in a single forward pass.

    ``init_times`` must be ascending. Each gap is reported once as an
    inclusive ``(first missing run, last missing run)`` block.
    """
    if hours_between_runs <= 0:
        raise ValueError("hours_between_runs must be greater than 0")
    delta = timedelta(hours=hours_between_runs)

    times = iter(init_times)
    first: Optional[datetime] = next(times, None)
    if first is None:
        raise InsufficientDataError("No initialization times to build an inventory from")

    missing: List[Tuple[datetime, datetime]] = []
    expected = first
    for init_time in times:
        expected += delta
        if expected < init_time:
            missing.append((expected, init_time - delta))
            while expected < init_time:
                expected += delta

    return Inventory(first=first, last=expected, missing=missing, auto_download=auto_download)


def missing_runs(
    init_times: Iterable[datetime],
    model: Model,
    start: datetime,
    end: datetime,
) -> List[datetime]:
    """Every run of ``model`` in ``[start, end]`` that is not in ``init_times``."""
    present = set(init_times)
    return [run for run in model.all_runs(start, end) if run not in present]
