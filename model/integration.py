# model/integration.py
from pydantic import BaseModel, ConfigDict


class Integration(BaseModel):
    """Bootstrap record returned by the identity service for this integration."""

    model_config = ConfigDict(extra="allow")

    id: int | str
    name: str | None = None
