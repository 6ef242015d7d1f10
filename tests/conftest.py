from datetime import date

import pytest

from tests.sample_data import make_row


@pytest.fixture
def today():
    return date(2025, 6, 1)


@pytest.fixture
def rows():
    return [
        make_row(
            id=1,
            nombre="Parque A",
            dependencia="Infraestructura",
            proyecto_estrategico="Movilidad",
            subproyecto_estrategico="Vías",
            comuna_o_corregimiento="Comuna 1",
            tipo_de_intervencion="Construcción",
            estado_de_la_obra="Entregada",
            contratista_operador="Consorcio A",
            costo_total_actualizado="1.500.000",
            costo_estimado_total="1000",
            presupuesto_ejecutado="750.000",
            presupuesto_ejecutado_adm_2024_2027="500.000",
            fecha_estimada_de_entrega="2024-06-30",
            fecha_real_de_entrega="2024-07-15",
            obra_entregada="SI",
            descripcion_del_riesgo="",
            latitud="6.25",
            longitud="-75.57",
        ),
        make_row(
            id=2,
            nombre="Colegio B",
            dependencia="Educación",
            proyecto_estrategico="Movilidad",
            comuna_o_corregimiento="Comuna 2",
            tipo_de_intervencion="Mantenimiento",
            estado_de_la_obra="En ejecución",
            costo_total_actualizado="",
            costo_estimado_total="500",
            presupuesto_ejecutado="100",
            fecha_estimada_de_entrega="2026-03-01",
            fecha_real_de_entrega="",
            obra_entregada="NO",
            descripcion_del_riesgo="Retraso en predios",
            presencia_de_riesgo="Sí",
            impacto_del_riesgo="Alto",
            estado_de_riesgo="Abierto",
            latitud="",
            longitud="",
        ),
        make_row(
            id=3,
            nombre="Puente C",
            dependencia="Infraestructura",
            proyecto_estrategico="Ríos",
            comuna_o_corregimiento="Comuna 1",
            tipo_de_intervencion="Construcción",
            estado_de_la_obra="En ejecución",
            costo_total_actualizado="0",
            costo_estimado_total="200",
            presupuesto_ejecutado="0",
            fecha_estimada_de_entrega="Sin información",
            fecha_real_de_entrega="2023-12-01",
            obra_entregada="",
            descripcion_del_riesgo="   ",
            latitud=6.2,
            longitud=-75.6,
        ),
    ]
