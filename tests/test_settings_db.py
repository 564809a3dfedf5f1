import logging

import pytest
from sqlalchemy import inspect, text as sa_text
from sqlalchemy.exc import IntegrityError

from core import schema_registry
from core.db import SCHEMAS_DIR, engine_from_settings, get_engine, init_db
from core.errors import ErrorKind, InternalError, NotFoundError
from core.settings import DEFAULT_SETTINGS_PATH, configure_logging, load_settings


SETTINGS_YAML = """
app:
  name: Markbook Test
db:
  url: sqlite:///{db}
  timeout: 2
logging:
  level: debug
"""


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(SETTINGS_YAML.format(db=tmp_path / "nested" / "marks.db"), encoding="utf-8")
    return path


class TestSettings:
    def test_load_settings(self, settings_file):
        settings = load_settings(settings_file)
        assert settings.app.name == "Markbook Test"
        assert settings.app.environment == "development"
        assert settings.db.timeout == 2.0
        assert settings.db.echo is False
        assert settings.logging.level == "debug"

    def test_bundled_settings_load(self):
        settings = load_settings(DEFAULT_SETTINGS_PATH)
        assert settings.db.url.startswith("sqlite:///")

    def test_configure_logging(self, settings_file, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
        configure_logging(load_settings(settings_file))
        assert calls["level"] == logging.DEBUG


class TestDatabase:
    def test_engine_from_settings_creates_parent_dir(self, settings_file, tmp_path):
        engine = engine_from_settings(load_settings(settings_file))
        init_db(engine)
        assert (tmp_path / "nested" / "marks.db").exists()
        engine.dispose()

    def test_init_db_creates_tables(self, engine):
        tables = set(inspect(engine).get_table_names())
        assert {"students", "courses", "assessments", "enrollments", "student_assessment_marks"} <= tables

    def test_init_db_is_idempotent(self, engine):
        init_db(engine)
        assert {"courses", "marks", "students"} <= set(schema_registry.registered_names())

    def test_auto_discover_finds_schema_modules(self, tmp_path):
        assert sorted(schema_registry.auto_discover(SCHEMAS_DIR)) == [
            "schemas.courses_schema",
            "schemas.marks_schema",
            "schemas.students_schema",
        ]
        assert schema_registry.auto_discover(tmp_path / "missing") == []

    def test_foreign_keys_enforced(self, engine):
        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(sa_text("INSERT INTO enrollments (student_id, course_id) VALUES (999, 999)"))

    def test_duplicate_mark_rows_rejected(self, engine, catalog):
        params = {"s": catalog["U1001"], "a": catalog["A1"]}
        insert = sa_text("INSERT INTO student_assessment_marks (student_id, assessment_id) VALUES (:s, :a)")
        with engine.begin() as conn:
            conn.execute(insert, params)
        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(insert, params)

    def test_memory_url(self):
        engine = get_engine("sqlite:///:memory:")
        with engine.connect() as conn:
            assert conn.execute(sa_text("PRAGMA foreign_keys")).scalar() == 1
        engine.dispose()


class TestSchemaRegistry:
    @pytest.fixture(autouse=True)
    def isolated_registry(self, monkeypatch):
        monkeypatch.setattr(schema_registry, "_REGISTRY", [])

    def test_register_forms(self):
        @schema_registry.register
        def first(engine):
            pass

        @schema_registry.register("second")
        def _second(engine):
            pass

        schema_registry.register("third", lambda engine: None)
        assert schema_registry.registered_names() == ["first", "second", "third"]

    def test_re_registering_replaces(self):
        calls = []
        schema_registry.register("x", lambda engine: calls.append("old"))
        schema_registry.register("x", lambda engine: calls.append("new"))
        schema_registry.run_all(None)
        assert calls == ["new"]

    def test_failure_stops_the_run(self):
        calls = []

        def broken(engine):
            raise RuntimeError("boom")

        schema_registry.register("broken", broken)
        schema_registry.register("after", lambda engine: calls.append("after"))
        with pytest.raises(RuntimeError):
            schema_registry.run_all(None)
        assert calls == []

    def test_invalid_usage(self):
        with pytest.raises(TypeError):
            schema_registry.register(42)


class TestErrors:
    @pytest.mark.parametrize("error, status", [(NotFoundError("x"), 404), (InternalError("y"), 500)])
    def test_kind_and_status(self, error, status):
        assert error.kind.http_status == status
        assert error.to_dict() == {"kind": error.kind.value, "message": str(error)}

    def test_kinds_are_strings(self):
        assert ErrorKind.CONFLICT == "conflict"
        assert ErrorKind.VALIDATION.http_status == 400
