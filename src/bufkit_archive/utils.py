import re
from datetime import datetime
from typing import NamedTuple, Optional

from .enums import Model
from .errors import InvalidModelName, InvalidSiteId

_TIME_TOKEN = re.compile(r"^\d{10}Z$")
_SITE_ID = re.compile(r"^[A-Z0-9]+$")


class ParsedFileName(NamedTuple):
    init_time: datetime
    model: Model
    site_id: str


def normalize_id(site_id: str) -> str:
    return site_id.strip().upper()


def is_valid_site_id(site_id: Optional[str]) -> bool:
    """Ids are letters and digits only once normalized."""
    return bool(site_id) and _SITE_ID.match(normalize_id(site_id)) is not None


def file_name_for(site_id: str, model: Model, init_time: datetime) -> str:
    """
    Blob name for a sounding: ``<YYYYMMDDHH>Z_<model>_<ID>.buf.gz``.
    """
    if not is_valid_site_id(site_id):
        raise InvalidSiteId(f"Site id {site_id!r} cannot be used in a file name")
    return f"{init_time:%Y%m%d%H}Z_{model.value}_{normalize_id(site_id)}.buf.gz"


def parse_file_name(file_name: str) -> Optional[ParsedFileName]:
    """
    Inverse of :func:`file_name_for`. Returns None for anything that does not
    follow the grammar.
    """
    tokens = re.split(r"[_.]", file_name)
    if len(tokens) != 5 or tokens[3] != "buf" or tokens[4] != "gz":
        return None
    time_token, model_token, site_id = tokens[0], tokens[1], tokens[2]
    if not _TIME_TOKEN.match(time_token) or not is_valid_site_id(site_id):
        return None
    try:
        init_time = datetime.strptime(time_token[:-1], "%Y%m%d%H")
        model = Model.parse(model_token)
    except (ValueError, InvalidModelName):
        return None
    return ParsedFileName(init_time, model, site_id.upper())
