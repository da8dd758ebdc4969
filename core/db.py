# core/db.py
from __future__ import annotations
from pathlib import Path
from sqlalchemy import create_engine

from core.schema_registry import auto_discover, run_all

SCHEMAS_DIR = Path(__file__).resolve().parents[1] / "schemas"

def get_engine(db_url: str):
    if db_url.startswith("sqlite:///"):
        db_file = db_url.replace("sqlite:///", "")
        Path(db_file).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(db_url, future=True)
    return engine

def init_db(engine):
    # auto-discover schema modules (schemas/*.py), then run every registered installer
    auto_discover(SCHEMAS_DIR)
    run_all(engine)
