from __future__ import annotations
import logging
import yaml
from pathlib import Path
from pydantic import BaseModel

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parents[1] / "config" / "settings.yaml"

class AppConfig(BaseModel):
    name: str
    environment: str = "development"

class DBConfig(BaseModel):
    url: str
    # seconds the SQLite driver waits on a locked database before failing
    timeout: float = 30.0
    echo: bool = False

class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

class Settings(BaseModel):
    app: AppConfig
    db: DBConfig
    logging: LoggingConfig = LoggingConfig()

def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Settings:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return Settings(
        app=AppConfig(**data["app"]),
        db=DBConfig(**data["db"]),
        logging=LoggingConfig(**(data.get("logging") or {})),
    )

def configure_logging(settings: Settings) -> None:
    """Entry points call this once; library modules only create loggers."""
    logging.basicConfig(
        level=getattr(logging, settings.logging.level.upper(), logging.INFO),
        format=settings.logging.format,
    )
