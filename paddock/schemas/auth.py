from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthContext(BaseModel):
    """The verified identity of the caller, handed explicitly to every service call."""

    subject: UUID

    model_config = ConfigDict(frozen=True)
