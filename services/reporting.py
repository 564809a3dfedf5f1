# services/reporting.py
"""
Course reports built from MarksEngine.aggregate_marks output.

Nothing here touches storage: every function takes the
{"students": [...], "assessments": [...]} dict and returns plain lists of
dicts ready for serialisation.
"""

from __future__ import annotations
from typing import Any, Dict, List
import pandas as pd


def marks_frame(aggregate: Dict[str, List[Dict[str, Any]]]) -> pd.DataFrame:
    """Students (index) by assessment ids (columns); missing marks count as 0."""
    assessment_ids = [a["id"] for a in aggregate.get("assessments", [])]
    students = aggregate.get("students", [])
    frame = pd.DataFrame(
        [s.get("marks", {}) for s in students],
        index=pd.Index([s["id"] for s in students], name="student_id"),
        columns=assessment_ids,
        dtype=float,
    )
    return frame.fillna(0.0)


def _total_weight(aggregate: Dict[str, List[Dict[str, Any]]]) -> float:
    return float(sum(a["weight"] for a in aggregate.get("assessments", [])))


def student_totals(aggregate: Dict[str, List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    frame = marks_frame(aggregate)
    totals = frame.sum(axis=1) if not frame.empty else pd.Series(dtype=float)
    weight = _total_weight(aggregate)

    results = []
    for s in aggregate.get("students", []):
        total = float(totals.get(s["id"], 0.0))
        results.append({
            "id": s["id"],
            "name": s["name"],
            "matric_number": s["matric_number"],
            "total": round(total, 2),
            "percentage": round(total / weight * 100, 2) if weight > 0 else 0.0,
        })
    return results


def component_averages(aggregate: Dict[str, List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Mean mark per assessment across the enrolled students."""
    frame = marks_frame(aggregate)
    results = []
    for a in aggregate.get("assessments", []):
        column = frame[a["id"]] if a["id"] in frame.columns else pd.Series(dtype=float)
        average = float(column.mean()) if len(column) else 0.0
        weight = float(a["weight"])
        results.append({
            "id": a["id"],
            "name": a["name"],
            "weight": weight,
            "average": round(average, 2),
            "average_percent": round(average / weight * 100, 2) if weight > 0 else 0.0,
        })
    return results


def rank_students(aggregate: Dict[str, List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Students ordered by total, highest first. Equal totals share a rank and
    the next rank is skipped (1, 2, 2, 4); ties are listed by matric number.
    """
    totals = student_totals(aggregate)
    if not totals:
        return []

    frame = pd.DataFrame(totals)
    frame["rank"] = frame["total"].rank(method="min", ascending=False).astype(int)
    frame = frame.sort_values(["rank", "matric_number"], kind="mergesort")
    return [
        {key: (int(value) if key in ("id", "rank") else value) for key, value in row.items()}
        for row in frame.to_dict(orient="records")
    ]
