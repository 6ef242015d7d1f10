from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping

# Canonical key -> column name as published by the upstream "obras" API.
_FIELD_COLUMNS: Dict[str, str] = {
    # Basic info
    "id": "id",
    "dependencia": "DEPENDENCIA",
    "url_imagen": "URL IMAGEN",
    "estado_de_la_obra": "ESTADO DE LA OBRA",
    "nombre": "NOMBRE",
    "descripcion": "DESCRIPCIÓN",
    "tipo_de_intervencion": "TIPO DE INTERVECIÓN",
    # Location
    "comuna_o_corregimiento": "COMUNA O CORREGIMIENTO",
    "direccion": "DIRECCIÓN",
    "longitud": "LONGITUD",
    "latitud": "LATITUD",
    # Financial
    "costo_estimado_total": "COSTO ESTIMADO TOTAL",
    "costo_total_actualizado": "COSTO TOTAL ACTUALIZADO",
    "presupuesto_ejecutado": "PRESUPUESTO EJECUTADO",
    "presupuesto_porcentaje_ejecutado": "PRESUPUESTO PORCENTAJE EJECUTADO",
    "presupuesto_ejecutado_adm_anteriores": "PRESUPUESTO EJECUTADO ADMINISTRACIONES ANTERIORES",
    "presupuesto_ejecutado_adm_2024_2027": "PRESUPUESTO EJECUTADO ADMINISTRACIÓN 2024 - 2027",
    "fuentes_financiacion_alternativa": "FUENTES DE FINANCIACIÓN ALTERNATIVA",
    "presupuesto_ejecutado_2024": "PRESUPUESTO EJECUTADO 2024",
    "presupuesto_ejecutado_2025": "PRESUPUESTO EJECUTADO 2025",
    "presupuesto_ejecutado_2026": "PRESUPUESTO EJECUTADO 2026",
    "presupuesto_ejecutado_2027": "PRESUPUESTO EJECUTADO 2027",
    "inversion_planeacion_mga": "INVERSIÓN PLANEACIÓN (MGA)",
    "inversion_estudios_preliminares": "INVERSIÓN ESTUDIOS PRELIMINARES",
    "inversion_viabilizacion_dap": "INVERSIÓN VIABILIZACIÓN (DAP)",
    "inversion_contratacion": "INVERSIÓN CONTRATACIÓN",
    "inversion_inicio": "INVERSIÓN INICIO",
    "inversion_gestion_predial": "INVERSIÓN GESTIÓN PREDIAL",
    "inversion_disenos": "INVERSIÓN DISEÑOS",
    "inversion_ejecucion_obra": "INVERSIÓN EJECUCIÓN OBRA",
    "inversion_entrega_obra": "INVERSIÓN ENTREGA OBRA",
    "inversion_liquidacion": "INVERSIÓN LIQUIDACIÓN",
    # Yearly progress
    "avance_2024": "AVANCE 2024",
    "avance_2025": "AVANCE 2025",
    "avance_2026": "AVANCE 2026",
    "avance_2027": "AVANCE 2027",
    # Codes and strategic projects
    "codigo_proyecto_1": "CÓDIGO PROYECTO 1",
    "codigo_proyecto_2": "CÓDIGO PROYECTO 2",
    "codigo_proyecto_3": "CÓDIGO PROYECTO 3",
    "proyecto_estrategico": "PROYECTO ESTRATÉGICO",
    "subproyecto_estrategico": "SUBPROYECTO ESTRATÉGICO",
    "relacion_pot": "RELACIÓN POT",
    "codigo_programa_pdd": "CÓDIGO DEL PROGRAMA PDD",
    "indicador_1": "INDICADOR 1",
    "indicador_2": "INDICADOR 2",
    "indicador_3": "INDICADOR 3",
    # Administrative
    "periodo_administrativo": "PERIODO ADMINISTRATIVO",
    "etapa": "ETAPA",
    # Contracts
    "contratos_asociados": "CONTRATOS ASOCIADOS",
    "contratista_operador": "CONTRATISTA OPERADOR",
    "convenio": "CONVENIO",
    "responsable_supervisor": "RESPONSABLE SUPERVISOR",
    "empleos_generados": "EMPLEOS GENERADOS",
    "area_construida": "ÁREA CONSTRUIDA",
    "area_espacio_publico": "ÁREA DE ESPACIO PÚBLICO",
    # Delivery
    "fecha_estimada_de_entrega": "FECHA ESTIMADA DE ENTREGA",
    "obra_entregada": "¿OBRA ENTREGADA?",
    "fecha_real_de_entrega": "FECHA REAL DE ENTREGA",
    # Licenses
    "porcentaje_licencias_curaduria": "PORCENTAJE LICENCIAS (CURADURÍA)",
    "inversion_licencias_curaduria": "INVERSIÓN LICENCIAS (CURADURÍA)",
    "fecha_inicio_estimada_licencias_curaduria": "FECHA INICIO ESTIMADA LICENCIAS (CURADURÍA)",
    "fecha_inicio_real_licencias_curaduria": "FECHA INICIO REAL LICENCIAS (CURADURÍA)",
    "fecha_fin_estimada_licencias_curaduria": "FECHA FIN ESTIMADA LICENCIAS (CURADURÍA)",
    "fecha_fin_real_licencias_curaduria": "FECHA FIN REAL LICENCIAS (CURADURÍA)",
    # Risks
    "descripcion_del_riesgo": "DESCRIPCIÓN DEL RIESGO",
    "presencia_de_riesgo": "PRESENCIA DE RIESGO",
    "impacto_del_riesgo": "IMPACTO DEL RIESGO",
    "estado_de_riesgo": "ESTADO DE RIESGO",
}

# Project stages share the same five columns: percentage plus estimated/real start and end dates.
STAGES: Dict[str, str] = {
    "planeacion_mga": "PLANEACIÓN (MGA)",
    "estudios_preliminares": "ESTUDIOS PRELIMINARES",
    "viabilizacion_dap": "VIABILIZACIÓN (DAP)",
    "contratacion": "CONTRATACIÓN",
    "inicio": "INICIO",
    "gestion_predial": "GESTIÓN PREDIAL",
    "disenos": "DISEÑOS",
    "ejecucion_obra": "EJECUCIÓN OBRA",
    "entrega_obra": "ENTREGA OBRA",
    "liquidacion": "LIQUIDACIÓN",
}

for _key, _label in STAGES.items():
    _FIELD_COLUMNS[f"porcentaje_{_key}"] = f"PORCENTAJE {_label}"
    _FIELD_COLUMNS[f"fecha_inicio_estimada_{_key}"] = f"FECHA INICIO ESTIMADA {_label}"
    _FIELD_COLUMNS[f"fecha_inicio_real_{_key}"] = f"FECHA INICIO REAL {_label}"
    _FIELD_COLUMNS[f"fecha_fin_estimada_{_key}"] = f"FECHA FIN ESTIMADA {_label}"
    _FIELD_COLUMNS[f"fecha_fin_real_{_key}"] = f"FECHA FIN REAL {_label}"

FIELDS: Mapping[str, str] = MappingProxyType(_FIELD_COLUMNS)

FIELD_GROUPS: Mapping[str, tuple] = MappingProxyType(
    {
        "basic_info": ("id", "dependencia", "url_imagen", "estado_de_la_obra", "nombre", "descripcion", "tipo_de_intervencion"),
        "location": ("comuna_o_corregimiento", "direccion", "longitud", "latitud"),
        "financial": (
            "costo_estimado_total",
            "costo_total_actualizado",
            "presupuesto_ejecutado",
            "presupuesto_porcentaje_ejecutado",
            "presupuesto_ejecutado_adm_anteriores",
            "presupuesto_ejecutado_adm_2024_2027",
            "fuentes_financiacion_alternativa",
            "presupuesto_ejecutado_2024",
            "presupuesto_ejecutado_2025",
            "presupuesto_ejecutado_2026",
            "presupuesto_ejecutado_2027",
        )
        + tuple(f"inversion_{k}" for k in STAGES),
        "progress": ("avance_2024", "avance_2025", "avance_2026", "avance_2027"),
        "codes": (
            "codigo_proyecto_1",
            "codigo_proyecto_2",
            "codigo_proyecto_3",
            "proyecto_estrategico",
            "subproyecto_estrategico",
            "relacion_pot",
            "codigo_programa_pdd",
            "indicador_1",
            "indicador_2",
            "indicador_3",
        ),
        "administrative": ("periodo_administrativo", "etapa"),
        "contracts": (
            "contratos_asociados",
            "contratista_operador",
            "convenio",
            "responsable_supervisor",
            "empleos_generados",
            "area_construida",
            "area_espacio_publico",
        ),
        "delivery": ("fecha_estimada_de_entrega", "obra_entregada", "fecha_real_de_entrega"),
        "licenses": (
            "porcentaje_licencias_curaduria",
            "inversion_licencias_curaduria",
            "fecha_inicio_estimada_licencias_curaduria",
            "fecha_inicio_real_licencias_curaduria",
            "fecha_fin_estimada_licencias_curaduria",
            "fecha_fin_real_licencias_curaduria",
        ),
        "risks": ("descripcion_del_riesgo", "presencia_de_riesgo", "impacto_del_riesgo", "estado_de_riesgo"),
    }
)


def all_columns(fields: Mapping[str, str] = FIELDS) -> List[str]:
    return list(fields.values())


def columns_for_group(group: str, fields: Mapping[str, str] = FIELDS) -> List[str]:
    """Upstream column names of a field group; unknown groups yield an empty list."""
    return [fields[k] for k in FIELD_GROUPS.get(group, ()) if k in fields]
