from __future__ import annotations

from typing import List

from pydantic import BaseModel


class HealthSchema(BaseModel):
    message: str


class LocationSchema(BaseModel):
    id: int
    name: str


class LocationListSchema(BaseModel):
    count: int
    data: List[LocationSchema]


class WardGroupSchema(BaseModel):
    """
    Listing row: `name` is the stored comma-delimited ward list, undecoded.
    """

    id: int
    name: str


class WardGroupListSchema(BaseModel):
    count: int
    data: List[WardGroupSchema]


class MunicipalityWardsSchema(BaseModel):
    """
    Lookup row: `name` holds the decoded ward numbers.
    """

    id: int
    name: List[int]


class ErrorSchema(BaseModel):
    error: str


class RateLimitErrorSchema(ErrorSchema):
    reset: int
