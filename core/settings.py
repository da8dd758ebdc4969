from __future__ import annotations
import logging
import os
import yaml
from pathlib import Path
from typing import Literal
from pydantic import BaseModel

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parents[1] / "config" / "settings.yaml"
SETTINGS_ENV_VAR = "UNIVERSITY_SETTINGS"

class AppConfig(BaseModel):
    name: str = "University Management System"
    environment: str = "development"
    portal: Literal["admin", "student"] = "admin"

class AuthConfig(BaseModel):
    login_path: str = "/login"
    unauthorized_path: str = "/unauthorized"
    default_route: str = "/dashboard"
    demo_login_enabled: bool = False

class DBConfig(BaseModel):
    url: str

class LoggingConfig(BaseModel):
    level: str = "INFO"

class Settings(BaseModel):
    app: AppConfig = AppConfig()
    auth: AuthConfig = AuthConfig()
    db: DBConfig
    logging: LoggingConfig = LoggingConfig()

def load_settings(path: str | Path | None = None) -> Settings:
    if path is None:
        path = os.environ.get(SETTINGS_ENV_VAR) or DEFAULT_SETTINGS_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return Settings(
        app=AppConfig(**(data.get("app") or {})),
        auth=AuthConfig(**(data.get("auth") or {})),
        db=DBConfig(**data["db"]),
        logging=LoggingConfig(**(data.get("logging") or {})),
    )

def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.logging.level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
