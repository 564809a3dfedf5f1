# core/db.py
from __future__ import annotations
import logging
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from core.schema_registry import auto_discover, run_all
from core.settings import Settings

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path(__file__).resolve().parents[1] / "schemas"


def _enable_sqlite_foreign_keys(dbapi_conn, _record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_url: str, timeout: float = 30.0, echo: bool = False) -> Engine:
    connect_args = {}
    if db_url.startswith("sqlite:///"):
        db_file = db_url.replace("sqlite:///", "")
        if db_file and db_file != ":memory:":
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)
        connect_args["timeout"] = timeout
    engine = create_engine(db_url, future=True, echo=echo, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def engine_from_settings(settings: Settings) -> Engine:
    return get_engine(settings.db.url, timeout=settings.db.timeout, echo=settings.db.echo)


def init_db(engine: Engine) -> None:
    # importing the schema modules registers their installers
    auto_discover(SCHEMAS_DIR)
    run_all(engine)
    logger.info(f"Database initialised at {engine.url}")
