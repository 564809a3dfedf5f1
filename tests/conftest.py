# tests/conftest.py
"""
Shared fixtures: a fresh SQLite database per test, seeded with a small
catalog.

    C1: A1 (weight 30), A2 (weight 70)
    C2: B1 (weight 100)
    students: U1001 (Sam Lee), U1002 (Tara Khan)
"""

import pytest
from sqlalchemy import text as sa_text

from core.db import get_engine, init_db
from services.marks_engine import MarksEngine


@pytest.fixture
def engine(tmp_path):
    eng = get_engine(f"sqlite:///{tmp_path / 'markbook.db'}", timeout=5)
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def catalog(engine):
    ids = {}
    with engine.begin() as conn:
        for code, name in [("C1", "Databases"), ("C2", "Networks")]:
            ids[code] = conn.execute(
                sa_text("INSERT INTO courses (course_code, name) VALUES (:c, :n)"),
                {"c": code, "n": name},
            ).lastrowid
        for course, name, weight in [("C1", "A1", 30), ("C1", "A2", 70), ("C2", "B1", 100)]:
            ids[name] = conn.execute(
                sa_text("INSERT INTO assessments (course_id, name, weight) VALUES (:cid, :n, :w)"),
                {"cid": ids[course], "n": name, "w": weight},
            ).lastrowid
        for matric, name in [("U1001", "Sam Lee"), ("U1002", "Tara Khan")]:
            ids[matric] = conn.execute(
                sa_text("INSERT INTO students (matric_number, name) VALUES (:m, :n)"),
                {"m": matric, "n": name},
            ).lastrowid
    return ids


@pytest.fixture
def marks(engine):
    return MarksEngine(engine)


@pytest.fixture
def count_rows(engine):
    def _count(table, **where):
        sql = f"SELECT COUNT(*) FROM {table}"
        if where:
            sql += " WHERE " + " AND ".join(f"{k} = :{k}" for k in where)
        with engine.connect() as conn:
            return conn.execute(sa_text(sql), where).scalar()
    return _count


@pytest.fixture
def mark_of(engine):
    def _mark(student_id, assessment_id):
        with engine.connect() as conn:
            return conn.execute(
                sa_text("SELECT mark FROM student_assessment_marks WHERE student_id = :s AND assessment_id = :a"),
                {"s": student_id, "a": assessment_id},
            ).scalar()
    return _mark


@pytest.fixture
def make_record():
    def _record(course_id, assessment_name, mark, matric="U1001", name="Sam Lee"):
        return {
            "name": name,
            "matric_number": matric,
            "course_id": course_id,
            "assessment_name": assessment_name,
            "mark": mark,
        }
    return _record
