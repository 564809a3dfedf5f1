# services/courses_db.py
from __future__ import annotations
from typing import List, Dict, Any
from sqlalchemy import text as sa_text


def list_all(conn) -> List[Dict[str, Any]]:
    """Every course in the catalog, ordered by id."""
    rows = conn.execute(sa_text(
        "SELECT id, course_code, name FROM courses ORDER BY id"
    )).fetchall()
    return [dict(r._mapping) for r in rows]

