from __future__ import annotations
from sqlalchemy import text as sa_text
from core.schema_registry import register


@register("marks")
def ensure_marks_schema(engine):
    with engine.begin() as conn:
        conn.execute(sa_text("""
        CREATE TABLE IF NOT EXISTS enrollments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            student_id INTEGER NOT NULL,
            course_id INTEGER NOT NULL,
            enrolled_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (student_id) REFERENCES students(id),
            FOREIGN KEY (course_id) REFERENCES courses(id),
            UNIQUE(student_id, course_id)
        )"""))
        conn.execute(sa_text("CREATE INDEX IF NOT EXISTS idx_enrollments_course ON enrollments(course_id)"))

        # UNIQUE(student_id, assessment_id) keeps concurrent cascades from
        # creating duplicate rows
        conn.execute(sa_text("""
        CREATE TABLE IF NOT EXISTS student_assessment_marks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            student_id INTEGER NOT NULL,
            assessment_id INTEGER NOT NULL,
            mark REAL NOT NULL DEFAULT 0,
            -- 0 while the row only holds the scaffold zero
            is_recorded INTEGER NOT NULL DEFAULT 0,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (student_id) REFERENCES students(id),
            FOREIGN KEY (assessment_id) REFERENCES assessments(id),
            UNIQUE(student_id, assessment_id)
        )"""))
        conn.execute(sa_text("CREATE INDEX IF NOT EXISTS idx_marks_assessment ON student_assessment_marks(assessment_id)"))
