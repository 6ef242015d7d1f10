from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class FiltersModel(BaseModel):
    proyecto: Optional[str] = None
    subproyecto: Optional[str] = None
    comuna: Optional[str] = None
    dependencia: Optional[str] = None
    tipo: Optional[str] = None
    estado: Optional[str] = None
    contratista: Optional[str] = None
    nombre: Optional[str] = None
    desde: Optional[str] = Field(default=None, description="YYYY or YYYY-MM")
    hasta: Optional[str] = Field(default=None, description="YYYY or YYYY-MM")


class FilterChangeModel(BaseModel):
    filters: FiltersModel = Field(default_factory=FiltersModel)
    changed: str


class GroupSumRequest(BaseModel):
    filters: FiltersModel = Field(default_factory=FiltersModel)
    key_field: str
    value_field: str
    top_n: int = Field(default=15, ge=1, le=200)
    others_label: str = "Otros"
