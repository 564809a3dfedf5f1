# services/marks_engine.py
"""
Enrollment and mark consistency engine.

Keeps students, enrollments and mark rows consistent with one another:

- batch mark commits are all-or-nothing against a single assessment;
- every write scaffolds the student across the whole catalog (an
  enrollment in every course, a zero mark for every assessment) before the
  caller's mark is recorded, so reports never see "no row yet";
- the single-record add is add-only and conflicts with a recorded mark;
- aggregation turns the rows of one course into a grid of students by
  assessments.

The engine owns no connection. It is built with a SQLAlchemy Engine and checks
out a fresh connection for every call.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import (
    ConflictError,
    InternalError,
    MarkbookError,
    NotFoundError,
    ValidationError,
)
from services import assessments_db, courses_db, marks_db, students_db
from services.models import MarkEntry, StudentRecord
from services.validators import validate_mark

logger = logging.getLogger(__name__)

BATCH_SUCCESS = "Marks updated successfully."
RECORD_SUCCESS = (
    "Student record added successfully. "
    "Student enrolled in all courses and relevant assessments initialized."
)
DUPLICATE_RECORD = (
    'A record for this student in this assessment already exists. '
    'Use the "Edit" function to change marks.'
)


class MarksEngine:
    """Orchestrates enrollment cascades, batch mark commits and mark aggregation."""

    def __init__(self, engine: Engine):
        self.engine = engine

    # ========================================================================
    # CONNECTION HANDLING
    # ========================================================================

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Connection]:
        """
        One connection, one transaction. Commits when the block finishes,
        rolls back at most once on any failure. Storage errors leave as
        InternalError; domain errors propagate unchanged.
        """
        conn = self.engine.connect()
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
        except MarkbookError:
            if trans.is_active:
                trans.rollback()
            raise
        except SQLAlchemyError as e:
            if trans.is_active:
                trans.rollback()
            logger.exception(f"Storage failure while trying to {action}")
            raise InternalError(f"Failed to {action}.") from e
        except Exception:
            if trans.is_active:
                trans.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def _reading(self, failure_message: str) -> Iterator[Connection]:
        """Plain connection for read paths; no explicit transaction."""
        try:
            with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.exception(failure_message)
            raise InternalError(failure_message) from e

    # ========================================================================
    # CASCADE PHASES
    # ========================================================================

    def ensure_full_scaffold(self, conn: Connection, student_id: int) -> Dict[str, int]:
        """
        Enroll the student in every course of the catalog and give them a zero
        mark on every assessment that has no row yet. Idempotent; existing
        marks are never touched.

        Returns counts of the rows it created.
        """
        enrolled = 0
        initialized = 0
        for course in courses_db.list_all(conn):
            if not marks_db.is_enrolled(conn, student_id, course["id"]):
                marks_db.enroll(conn, student_id, course["id"])
                enrolled += 1
            for assessment in assessments_db.list_by_course(conn, course["id"]):
                if marks_db.initialize_mark(conn, student_id, assessment["id"], 0):
                    initialized += 1
        return {"enrollments_created": enrolled, "marks_initialized": initialized}

    def set_mark(
        self,
        conn: Connection,
        student_id: int,
        assessment_id: int,
        mark: float,
        create_only: bool = False,
    ) -> None:
        """
        Write one mark row.

        By default the row is upserted. With create_only the write only lands
        on a row that holds no recorded mark yet; the check and the write are a
        single UPDATE, so of two racing adds exactly one wins and the other
        gets ConflictError.
        """
        if not create_only:
            marks_db.upsert_mark(conn, student_id, assessment_id, mark)
            return
        marks_db.initialize_mark(conn, student_id, assessment_id, 0)
        if not marks_db.record_first_mark(conn, student_id, assessment_id, mark):
            logger.warning(f"Mark already recorded for student {student_id} on assessment {assessment_id}")
            raise ConflictError(DUPLICATE_RECORD)

    # ========================================================================
    # WRITE OPERATIONS
    # ========================================================================

    def commit_mark_batch(
        self,
        course_id: int,
        assessment_name: str,
        entries: Sequence[Union[Mapping[str, Any], MarkEntry]],
    ) -> str:
        """
        Apply (student_id, mark) pairs to one assessment, all or nothing.

        Each student is scaffolded across the catalog first, the same way a
        single add does, then their row is upserted. The first entry that is out of bounds, or names an
        unknown student, aborts the batch and nothing from it persists.
        """
        if not isinstance(entries, (list, tuple)):
            raise ValidationError("Invalid marks data provided.", value=entries)
        assessment_name = (assessment_name or "").strip()
        if not assessment_name:
            raise ValidationError("Assessment name is required.", field="assessment_name")

        # shape errors are reported before a transaction is opened
        batch = [MarkEntry.from_mapping(raw) for raw in entries]

        with self._transaction("batch update student marks") as conn:
            assessment = assessments_db.find_by_course_and_name(conn, course_id, assessment_name)
            if not assessment:
                raise NotFoundError("Assessment not found for the given course and name.")

            for entry in batch:
                try:
                    validate_mark(entry.mark, assessment["weight"], student_id=entry.student_id)
                except ValidationError:
                    logger.warning(
                        f"Rejected batch for '{assessment_name}' (course {course_id}): "
                        f"student {entry.student_id} mark {entry.mark} exceeds bounds"
                    )
                    raise
                if students_db.find_by_id(conn, entry.student_id) is None:
                    raise NotFoundError(f"Student {entry.student_id} not found.")
                self.ensure_full_scaffold(conn, entry.student_id)
                self.set_mark(conn, entry.student_id, assessment["id"], entry.mark)

        logger.info(f"Committed {len(batch)} mark(s) for '{assessment_name}' in course {course_id}")
        return BATCH_SUCCESS

    def add_record_with_cascade(self, payload: Union[Mapping[str, Any], StudentRecord]) -> str:
        """
        Record a first mark for an existing student and scaffold them across
        the whole catalog.

        Add-only: a second add for the same (student, assessment) fails with
        ConflictError whatever the mark. Runs in one transaction; any failure
        leaves no enrollment or mark row behind.
        """
        record = payload if isinstance(payload, StudentRecord) else StudentRecord.from_mapping(payload)
        invalid = record.validate()
        if invalid:
            raise ValidationError(
                "Missing or invalid required fields (name, matric_number, mark, course_id, assessment_name).",
                field=", ".join(invalid),
            )

        with self._transaction("add student record") as conn:
            student = students_db.find_by_matric_number(conn, record.matric_number)
            if not student:
                raise NotFoundError("Student not found in the system.")
            student_id = student["id"]

            if marks_db.has_recorded_mark(conn, student_id, record.course_id, record.assessment_name):
                logger.warning(
                    f"Duplicate add for {record.matric_number} on '{record.assessment_name}' "
                    f"(course {record.course_id})"
                )
                raise ConflictError(DUPLICATE_RECORD)

            assessment = assessments_db.find_by_course_and_name(conn, record.course_id, record.assessment_name)
            if not assessment:
                raise NotFoundError("Current assessment not found.")

            mark = validate_mark(record.mark, assessment["weight"])

            summary = self.ensure_full_scaffold(conn, student_id)
            self.set_mark(conn, student_id, assessment["id"], mark, create_only=True)

        logger.info(
            f"Added mark {mark:g} for {record.matric_number} on '{record.assessment_name}'; "
            f"{summary['enrollments_created']} enrollment(s), "
            f"{summary['marks_initialized']} zero mark(s) created"
        )
        return RECORD_SUCCESS

    # ========================================================================
    # AGGREGATION
    # ========================================================================

    def aggregate_marks(self, course_id: int, student_id: Optional[int] = None) -> Dict[str, List[Dict[str, Any]]]:
        """
        Students-by-assessments view of one course.

        Returns {"students": [...], "assessments": [...]}. With student_id the
        student list holds at most that one student; the assessment list is
        always complete.
        """
        if student_id is not None:
            try:
                student_id = int(student_id)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid student_id: {student_id!r}.", value=student_id, field="student_id") from None

        with self._reading("Failed to aggregate course marks.") as conn:
            assessments = assessments_db.list_by_course(conn, course_id)
            students = students_db.list_enrolled_with_names(conn, course_id)
            marks = marks_db.list_marks_by_course(conn, course_id)

        assessment_map = {
            a["id"]: {"id": a["id"], "name": a["name"], "weight": float(a["weight"])}
            for a in assessments
        }

        student_marks: Dict[int, Dict[int, float]] = {}
        for m in marks:
            student_marks.setdefault(m["student_id"], {})[m["assessment_id"]] = float(m["mark"])

        output = []
        for s in students:
            if student_id is not None and s["id"] != student_id:
                continue
            output.append({
                "id": s["id"],
                "name": s["name"],
                "matric_number": s["matric_number"],
                "marks": student_marks.get(s["id"], {}),
            })

        return {"students": output, "assessments": list(assessment_map.values())}

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    def list_students(self) -> List[Dict[str, Any]]:
        with self._reading("Failed to list students.") as conn:
            return students_db.list_all(conn)

    def get_student(self, student_id: int) -> Dict[str, Any]:
        with self._reading("Failed to load student.") as conn:
            student = students_db.find_by_id(conn, student_id)
        if not student:
            raise NotFoundError(f"Student {student_id} not found.")
        return student

    def get_enrollments(self, student_id: int) -> List[Dict[str, Any]]:
        with self._reading("Failed to load enrollments.") as conn:
            if not students_db.find_by_id(conn, student_id):
                raise NotFoundError(f"Student {student_id} not found.")
            return students_db.list_enrollments(conn, student_id)

    def get_eligible_students(self, course_id: int) -> List[Dict[str, Any]]:
        """Students not yet enrolled in the course."""
        with self._reading("Failed to list eligible students.") as conn:
            return students_db.list_not_enrolled(conn, course_id)

    def get_assessment_records(self, course_id: int, assessment_name: str) -> List[Dict[str, Any]]:
        """
        Enrolled students with their mark on one assessment, for batch editing.
        Storage failures get a generic retry-later message rather than detail.
        """
        with self._reading("Failed to retrieve student records. Please try again later.") as conn:
            assessment = assessments_db.find_by_course_and_name(conn, course_id, assessment_name)
            if not assessment:
                raise NotFoundError("Assessment not found for the given course and name.")
            rows = marks_db.list_marks_for_assessment(conn, course_id, assessment["id"])

        return [
            {**r, "mark": float(r["mark"]) if r["mark"] is not None else None}
            for r in rows
        ]
