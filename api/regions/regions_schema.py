# api/regions/regions_schema.py

from pydantic import Field

from utils.schema_base import CamelModel


class NamedCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=150)


class RegionOut(CamelModel):
    id: int
    name: str


class ResidenceOut(CamelModel):
    id: int
    name: str
