"""
Field map lookups.
"""

import pytest

from obras.fields import FIELD_GROUPS, FIELDS, all_columns, columns_for_group


class TestFields:
    def test_map_is_read_only(self):
        with pytest.raises(TypeError):
            FIELDS["nombre"] = "OTRO"

    def test_stage_columns_are_generated(self):
        assert FIELDS["fecha_fin_real_ejecucion_obra"] == "FECHA FIN REAL EJECUCIÓN OBRA"
        assert FIELDS["porcentaje_liquidacion"] == "PORCENTAJE LIQUIDACIÓN"

    def test_groups_reference_known_fields(self):
        for group, keys in FIELD_GROUPS.items():
            assert set(keys) <= set(FIELDS), group

    def test_columns_for_group(self):
        assert columns_for_group("location") == ["COMUNA O CORREGIMIENTO", "DIRECCIÓN", "LONGITUD", "LATITUD"]
        assert columns_for_group("unknown") == []

    def test_all_columns(self):
        columns = all_columns()
        assert len(columns) == len(FIELDS)
        assert "COSTO TOTAL ACTUALIZADO" in columns
