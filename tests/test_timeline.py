"""
Stage timelines and the timeline page payload.
"""

import json

import pytest

from obras.data import prepare_context
from obras.metrics_timeline import compute_timeline_page
from obras.timeline import StageSpan, stage_timeline, timeline_date, work_timeline
from tests.sample_data import make_row


@pytest.fixture
def staged_rows():
    return [
        make_row(
            id=1,
            nombre="Parque A",
            proyecto_estrategico="Movilidad",
            fecha_inicio_estimada_contratacion="2024-01-10",
            fecha_fin_estimada_contratacion="2024-01-31",
            porcentaje_contratacion="100",
            fecha_inicio_estimada_ejecucion_obra="2024-02-01",
            fecha_fin_estimada_ejecucion_obra="2024-10-31",
            fecha_inicio_real_ejecucion_obra="2024-03-01",
            fecha_fin_real_ejecucion_obra="2024-12-15",
            porcentaje_ejecucion_obra="100",
        ),
        make_row(
            id=2,
            nombre="Colegio B",
            proyecto_estrategico="Movilidad",
            fecha_inicio_estimada_contratacion="2000-01-01",
            fecha_fin_estimada_contratacion="2024-12-01",
            fecha_inicio_estimada_ejecucion_obra="2025-01-15",
            fecha_fin_estimada_ejecucion_obra="2026-02-28",
            fecha_inicio_real_ejecucion_obra="2025-02-01",
            fecha_fin_real_ejecucion_obra="",
            porcentaje_ejecucion_obra="40",
        ),
        make_row(
            id=3,
            nombre="Puente C",
            proyecto_estrategico="Ríos",
            fecha_inicio_estimada_ejecucion_obra="2023-05-01",
            fecha_fin_estimada_ejecucion_obra="2024-05-01",
            fecha_inicio_real_ejecucion_obra="2024-08-01",
            fecha_fin_real_ejecucion_obra="2024-06-01",
        ),
    ]


class TestTimelineDate:
    """Only parseable dates from 2024 on reach the timeline."""

    def test_accepts_recent_dates(self):
        assert timeline_date("2024-03-01").year == 2024

    @pytest.mark.parametrize("raw", ["2023-12-31", "2000-01-01", "2000", None, "", "Sin información", "mañana"])
    def test_rejects_old_placeholder_and_blank(self, raw):
        assert timeline_date(raw) is None


class TestStageTimeline:
    def test_phases_aggregate_over_rows(self, staged_rows):
        out = stage_timeline(staged_rows)
        assert [s.stage for s in out] == ["contratacion", "ejecucion_obra"]

        contratacion, ejecucion = out
        assert contratacion.label == "CONTRATACIÓN"
        assert (contratacion.est_start, contratacion.est_end) == ("2024-01-10", "2024-01-31")
        assert contratacion.real_start is None and contratacion.real_end is None
        assert contratacion.pct == pytest.approx(100 / 3)

        assert (ejecucion.est_start, ejecucion.est_end) == ("2024-02-01", "2026-02-28")
        assert (ejecucion.real_start, ejecucion.real_end) == ("2024-03-01", "2024-12-15")
        assert ejecucion.pct == pytest.approx(140 / 3)

    def test_single_row(self, staged_rows):
        out = stage_timeline(staged_rows[1])
        assert out == [
            StageSpan(
                stage="ejecucion_obra",
                label="EJECUCIÓN OBRA",
                est_start="2025-01-15",
                est_end="2026-02-28",
                real_start=None,
                real_end=None,
                pct=40.0,
            )
        ]

    def test_end_before_start_is_not_a_span(self, staged_rows):
        assert stage_timeline(staged_rows[2]) == []

    def test_rows_without_stage_dates(self, rows):
        assert stage_timeline(rows) == []
        assert stage_timeline([]) == []


class TestWorkTimeline:
    def test_execution_span_per_obra(self, staged_rows):
        out = work_timeline(staged_rows)
        assert [(w.id, w.nombre) for w in out] == [(1, "Parque A"), (2, "Colegio B")]
        assert (out[1].est_start, out[1].est_end) == ("2025-01-15", "2026-02-28")
        assert out[1].real_start is None

    def test_limit(self, staged_rows):
        assert [w.id for w in work_timeline(staged_rows, limit=1)] == [1]


class TestTimelinePage:
    def test_payload(self, staged_rows):
        ctx = prepare_context({"proyecto": "Movilidad"}, staged_rows)
        out = compute_timeline_page(ctx["filters"], ctx)
        assert out["active_filters"] == {"proyecto": "Movilidad"}
        assert [p["stage"] for p in out["phases"]] == ["contratacion", "ejecucion_obra"]
        assert [w["id"] for w in out["works"]] == [1, 2]
        assert out["charts"]["phases"]["encoding"]
        assert out["charts"]["works"]["encoding"]
        json.dumps(out)

    def test_empty_selection(self, staged_rows):
        ctx = prepare_context({"proyecto": "Nada"}, staged_rows)
        out = compute_timeline_page(ctx["filters"], ctx)
        assert out["phases"] == [] and out["works"] == []
        assert out["charts"] == {"phases": {}, "works": {}}
