from sqlalchemy import text as sa_text
from core.schema_registry import register

@register
def ensure_role_changes_schema(engine):
    with engine.begin() as conn:
        conn.execute(sa_text("""
        CREATE TABLE IF NOT EXISTS role_changes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            target_email TEXT NOT NULL,
            old_role TEXT,
            new_role TEXT NOT NULL,
            actor_email TEXT NOT NULL,
            at DATETIME DEFAULT CURRENT_TIMESTAMP
        )"""))
