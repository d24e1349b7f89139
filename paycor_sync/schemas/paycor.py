"""Schemas for payloads returned by the Paycor API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PaycorUser(BaseModel):
    """User record returned by the ``users/me`` endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Paycor's identifier for the user.")
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")


__all__ = ["PaycorUser"]
