# services/assessments_db.py
from __future__ import annotations
from typing import List, Dict, Any, Optional
from sqlalchemy import text as sa_text


def find_by_course_and_name(conn, course_id: int, name: str) -> Optional[Dict[str, Any]]:
    """Resolve an assessment by (course, name); names are unique within a course."""
    row = conn.execute(sa_text("""
        SELECT id, course_id, name, weight
        FROM assessments
        WHERE course_id = :cid AND name = :name
    """), {"cid": course_id, "name": name}).fetchone()
    return dict(row._mapping) if row else None


def list_by_course(conn, course_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(sa_text("""
        SELECT id, course_id, name, weight
        FROM assessments
        WHERE course_id = :cid
        ORDER BY id
    """), {"cid": course_id}).fetchall()
    return [dict(r._mapping) for r in rows]
