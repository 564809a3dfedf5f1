# services/students_db.py
"""Student directory: read-only lookups over the students table."""
from __future__ import annotations
from typing import List, Dict, Any, Optional
from sqlalchemy import text as sa_text

_STUDENT_COLUMNS = "s.id, s.matric_number, s.name, s.email"


def list_all(conn) -> List[Dict[str, Any]]:
    rows = conn.execute(sa_text(f"""
        SELECT {_STUDENT_COLUMNS} FROM students s ORDER BY s.name, s.matric_number
    """)).fetchall()
    return [dict(r._mapping) for r in rows]


def find_by_id(conn, student_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        sa_text(f"SELECT {_STUDENT_COLUMNS} FROM students s WHERE s.id = :id"),
        {"id": student_id},
    ).fetchone()
    return dict(row._mapping) if row else None


def find_by_matric_number(conn, matric_number: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        sa_text(f"SELECT {_STUDENT_COLUMNS} FROM students s WHERE s.matric_number = :m"),
        {"m": matric_number},
    ).fetchone()
    return dict(row._mapping) if row else None


def list_enrolled_with_names(conn, course_id: int) -> List[Dict[str, Any]]:
    """Students enrolled in a course, ordered by id."""
    rows = conn.execute(sa_text("""
        SELECT s.id, s.name, s.matric_number
        FROM enrollments e
        JOIN students s ON s.id = e.student_id
        WHERE e.course_id = :cid
        ORDER BY s.id
    """), {"cid": course_id}).fetchall()
    return [dict(r._mapping) for r in rows]


def list_not_enrolled(conn, course_id: int) -> List[Dict[str, Any]]:
    """Students with no enrollment row for the course."""
    rows = conn.execute(sa_text(f"""
        SELECT {_STUDENT_COLUMNS}
        FROM students s
        WHERE NOT EXISTS (
            SELECT 1 FROM enrollments e
            WHERE e.student_id = s.id AND e.course_id = :cid
        )
        ORDER BY s.name, s.matric_number
    """), {"cid": course_id}).fetchall()
    return [dict(r._mapping) for r in rows]


def list_enrollments(conn, student_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(sa_text("""
        SELECT e.id, e.student_id, e.course_id, c.name AS course_name, e.enrolled_at
        FROM enrollments e
        JOIN courses c ON c.id = e.course_id
        WHERE e.student_id = :sid
        ORDER BY e.course_id
    """), {"sid": student_id}).fetchall()
    return [dict(r._mapping) for r in rows]
