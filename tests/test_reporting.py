import pytest

from services import reporting


@pytest.fixture
def aggregate():
    return {
        "assessments": [
            {"id": 10, "name": "A1", "weight": 30.0},
            {"id": 11, "name": "A2", "weight": 70.0},
        ],
        "students": [
            {"id": 1, "name": "Sam Lee", "matric_number": "U1001", "marks": {10: 20.0, 11: 50.0}},
            {"id": 2, "name": "Tara Khan", "matric_number": "U1002", "marks": {10: 30.0}},
            {"id": 3, "name": "Ava Ng", "matric_number": "U1000", "marks": {10: 10.0, 11: 60.0}},
            {"id": 4, "name": "Bo Tan", "matric_number": "U1003", "marks": {}},
        ],
    }


class TestMarksFrame:
    def test_missing_marks_become_zero(self, aggregate):
        frame = reporting.marks_frame(aggregate)
        assert list(frame.columns) == [10, 11]
        assert list(frame.index) == [1, 2, 3, 4]
        assert frame.loc[2, 11] == 0.0
        assert frame.loc[4].sum() == 0.0

    def test_empty_aggregate(self):
        frame = reporting.marks_frame({"students": [], "assessments": []})
        assert frame.empty


class TestStudentTotals:
    def test_totals_and_percentages(self, aggregate):
        totals = {t["matric_number"]: t for t in reporting.student_totals(aggregate)}
        assert totals["U1001"]["total"] == 70.0
        assert totals["U1001"]["percentage"] == 70.0
        assert totals["U1002"]["total"] == 30.0
        assert totals["U1003"]["total"] == 0.0

    def test_no_assessments(self):
        aggregate = {"assessments": [], "students": [{"id": 1, "name": "Sam", "matric_number": "U1", "marks": {}}]}
        assert reporting.student_totals(aggregate) == [
            {"id": 1, "name": "Sam", "matric_number": "U1", "total": 0.0, "percentage": 0.0}
        ]


class TestComponentAverages:
    def test_average_includes_zero_rows(self, aggregate):
        averages = {a["name"]: a for a in reporting.component_averages(aggregate)}
        assert averages["A1"]["average"] == 15.0
        assert averages["A1"]["average_percent"] == 50.0
        assert averages["A2"]["average"] == 27.5

    def test_no_students(self):
        aggregate = {"assessments": [{"id": 10, "name": "A1", "weight": 30.0}], "students": []}
        assert reporting.component_averages(aggregate)[0]["average"] == 0.0


class TestRankStudents:
    def test_ties_share_rank_and_skip_next(self, aggregate):
        ranked = reporting.rank_students(aggregate)
        assert [(r["matric_number"], r["rank"]) for r in ranked] == [
            ("U1000", 1),
            ("U1001", 1),
            ("U1002", 3),
            ("U1003", 4),
        ]
        assert isinstance(ranked[0]["id"], int)

    def test_empty(self):
        assert reporting.rank_students({"students": [], "assessments": []}) == []


def test_reports_from_engine_aggregate(marks, catalog, make_record):
    marks.add_record_with_cascade(make_record(catalog["C1"], "A2", 60))
    marks.add_record_with_cascade(make_record(catalog["C1"], "A1", 25, matric="U1002", name="Tara Khan"))
    ranked = reporting.rank_students(marks.aggregate_marks(catalog["C1"]))
    assert [(r["matric_number"], r["total"], r["rank"]) for r in ranked] == [
        ("U1001", 60.0, 1),
        ("U1002", 25.0, 2),
    ]
