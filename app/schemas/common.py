"""Schemas shared by several endpoint modules."""

from pydantic import BaseModel, ConfigDict


class ItemFailureResponse(BaseModel):
    """One failed item of a bulk operation."""

    model_config = ConfigDict(from_attributes=True)

    item_id: str
    error: str


class ErrorResponse(BaseModel):
    """Error body produced by the exception handlers."""

    error: str
    message: str
    details: dict = {}
