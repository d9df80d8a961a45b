"""Pydantic schemas returned by the visualization API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

__all__ = ["ApiOutModel"]


class ApiOutModel(BaseModel):
    """Base model for API responses built from core dataclasses.

    `from_attributes` lets the routers validate frozen dataclasses directly,
    and the camelCase alias generator produces the field names the React
    client reads (`fullName`, `defaultBranch`, `startDate`, ...).
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
