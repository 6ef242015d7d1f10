"""
Per-year estimated vs. real deliveries.
"""

from obras.fields import FIELDS
from obras.vigencias import (
    ESTIMATED_YEAR_COLUMN,
    REAL_YEAR_COLUMN,
    VigenciaRow,
    compute_vigencias,
    corrected_real_delivery,
    estimated_year,
    filter_by_period,
    real_year,
)
from tests.sample_data import make_row


class TestComputeVigencias:
    def test_sample_rows(self, rows):
        assert compute_vigencias(rows) == [
            VigenciaRow(year=2026, estimated_count=1, estimated_investment=500.0, real_count=0, real_investment=0.0),
            VigenciaRow(year=2024, estimated_count=1, estimated_investment=1500000.0, real_count=1, real_investment=750000.0),
        ]

    def test_unconfirmed_deliveries_are_not_real(self):
        row = make_row(fecha_real_de_entrega="2023-05-01", obra_entregada="NO", presupuesto_ejecutado="10")
        assert compute_vigencias([row]) == []

    def test_tiny_investment_is_zeroed(self):
        row = make_row(fecha_estimada_de_entrega="2025-01-01", costo_estimado_total="0,5")
        assert compute_vigencias([row]) == [
            VigenciaRow(year=2025, estimated_count=1, estimated_investment=0.0, real_count=0, real_investment=0.0)
        ]

    def test_empty(self):
        assert compute_vigencias([]) == []


class TestYears:
    def test_explicit_year_columns_win(self):
        row = {ESTIMATED_YEAR_COLUMN: "2027", REAL_YEAR_COLUMN: 2026.0, FIELDS["fecha_estimada_de_entrega"]: "2020-01-01"}
        assert estimated_year(row) == 2027
        assert real_year(row) == 2026

    def test_placeholder_real_date_uses_end_of_works(self):
        row = make_row(fecha_real_de_entrega="2000-01-01", fecha_fin_real_ejecucion_obra="2025-02-10")
        assert corrected_real_delivery(row).year == 2025
        assert real_year(row) == 2025

    def test_placeholder_kept_without_end_of_works(self):
        row = make_row(fecha_real_de_entrega="2000-01-01")
        assert real_year(row) == 2000

    def test_unparseable_dates(self):
        row = make_row(fecha_estimada_de_entrega="Sin información", fecha_real_de_entrega="")
        assert estimated_year(row) is None
        assert real_year(row) is None


class TestFilterByPeriod:
    def test_sample_rows(self, rows):
        assert [r[FIELDS["id"]] for r in filter_by_period(rows)] == [1, 2]

    def test_progress_or_spend_inside_period(self):
        spent = make_row(id="a", presupuesto_ejecutado_2025="1.000")
        progressed = make_row(id="b", avance_2027=0.4)
        idle = make_row(id="c", avance_2024=0, fecha_estimada_de_entrega="2019-12-31")
        out = filter_by_period([spent, progressed, idle])
        assert [r[FIELDS["id"]] for r in out] == ["a", "b"]

    def test_custom_period(self, rows):
        # Row 1 still qualifies through its 2024-2027 administration spend.
        assert [r[FIELDS["id"]] for r in filter_by_period(rows, 2026, 2026)] == [1, 2]
        assert filter_by_period(rows[1:], 2030, 2031) == []
