# services/__init__.py
"""
Marks services

- Student, course and assessment lookups (students_db, courses_db, assessments_db)
- Enrollment and mark row primitives (marks_db)
- The consistency engine (marks_engine.MarksEngine)
- Course reports built on aggregated marks (reporting)
"""

from services.marks_engine import MarksEngine

__all__ = ["MarksEngine"]
