"""Bearer token models."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import BaseModel, Field

AuthToken = NewType("AuthToken", str)


class TokenClaims(BaseModel):
    """Identity carried by a verified bearer token."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    issued_at: datetime
    expires_at: datetime
