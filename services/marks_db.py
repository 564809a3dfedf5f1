# services/marks_db.py
"""
Row-level primitives for enrollments and student_assessment_marks.
Every function runs on the caller's connection; transaction control stays
with the caller.
"""
from __future__ import annotations
from typing import List, Dict, Any
from sqlalchemy import text as sa_text


# ------- ENROLLMENTS -------
def is_enrolled(conn, student_id: int, course_id: int) -> bool:
    row = conn.execute(
        sa_text("SELECT 1 FROM enrollments WHERE student_id = :sid AND course_id = :cid"),
        {"sid": student_id, "cid": course_id},
    ).fetchone()
    return row is not None


def enroll(conn, student_id: int, course_id: int) -> bool:
    """Enroll a student; returns False when the row already existed."""
    res = conn.execute(sa_text("""
        INSERT INTO enrollments (student_id, course_id)
        VALUES (:sid, :cid)
        ON CONFLICT(student_id, course_id) DO NOTHING
    """), {"sid": student_id, "cid": course_id})
    return res.rowcount == 1


# ------- MARKS -------
def has_recorded_mark(conn, student_id: int, course_id: int, assessment_name: str) -> bool:
    """True when a real mark (not just the scaffold zero) exists for the pair."""
    row = conn.execute(sa_text("""
        SELECT 1
        FROM student_assessment_marks m
        JOIN assessments a ON a.id = m.assessment_id
        WHERE m.student_id = :sid AND a.course_id = :cid AND a.name = :name
          AND m.is_recorded = 1
    """), {"sid": student_id, "cid": course_id, "name": assessment_name}).fetchone()
    return row is not None


def initialize_mark(conn, student_id: int, assessment_id: int, mark: float = 0.0) -> bool:
    """Insert a mark row only if none exists. Existing marks are left alone."""
    res = conn.execute(sa_text("""
        INSERT INTO student_assessment_marks (student_id, assessment_id, mark)
        VALUES (:sid, :aid, :m)
        ON CONFLICT(student_id, assessment_id) DO NOTHING
    """), {"sid": student_id, "aid": assessment_id, "m": float(mark)})
    return res.rowcount == 1


def record_first_mark(conn, student_id: int, assessment_id: int, mark: float) -> bool:
    """
    Overwrite a scaffold zero with a real mark. Returns False when the row is
    missing or already holds a recorded mark.
    """
    res = conn.execute(sa_text("""
        UPDATE student_assessment_marks
        SET mark = :m, is_recorded = 1, updated_at = CURRENT_TIMESTAMP
        WHERE student_id = :sid AND assessment_id = :aid AND is_recorded = 0
    """), {"sid": student_id, "aid": assessment_id, "m": float(mark)})
    return res.rowcount == 1


def upsert_mark(conn, student_id: int, assessment_id: int, mark: float) -> None:
    conn.execute(sa_text("""
        INSERT INTO student_assessment_marks (student_id, assessment_id, mark, is_recorded)
        VALUES (:sid, :aid, :m, 1)
        ON CONFLICT(student_id, assessment_id) DO UPDATE SET
            mark = excluded.mark,
            is_recorded = 1,
            updated_at = CURRENT_TIMESTAMP
    """), {"sid": student_id, "aid": assessment_id, "m": float(mark)})


def list_marks_by_course(conn, course_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(sa_text("""
        SELECT m.student_id, m.assessment_id, m.mark
        FROM student_assessment_marks m
        JOIN assessments a ON a.id = m.assessment_id
        WHERE a.course_id = :cid
        ORDER BY m.student_id, m.assessment_id
    """), {"cid": course_id}).fetchall()
    return [dict(r._mapping) for r in rows]


def list_marks_for_assessment(conn, course_id: int, assessment_id: int) -> List[Dict[str, Any]]:
    """Enrolled students with their mark on one assessment (None when no row yet)."""
    rows = conn.execute(sa_text("""
        SELECT s.id, s.name, s.matric_number, m.mark
        FROM enrollments e
        JOIN students s ON s.id = e.student_id
        LEFT JOIN student_assessment_marks m
               ON m.student_id = s.id AND m.assessment_id = :aid
        WHERE e.course_id = :cid
        ORDER BY s.name, s.matric_number
    """), {"cid": course_id, "aid": assessment_id}).fetchall()
    return [dict(r._mapping) for r in rows]
