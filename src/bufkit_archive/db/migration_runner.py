from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Engine


def _alembic_config(db_url: str) -> Config:
    config = Config()
    here = Path(__file__).parent
    config.set_main_option("script_location", str(here / "alembic"))
    config.set_main_option("sqlalchemy.url", db_url)
    config.set_main_option("timezone", "UTC")
    return config


def run_migrations(engine: Engine) -> None:
    """
    Upgrade the index behind ``engine`` to the latest revision.
    """
    cfg = _alembic_config(engine.url.render_as_string(hide_password=False))
    with engine.begin() as connection:
        cfg.attributes["connection"] = connection
        command.upgrade(cfg, "head")
