"""State file models for refresh_token.json and credentials.json."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StoredToken(BaseModel):
    """Long-lived token that allows login without a password."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    account_name: str = Field("", alias="accountName")
    refresh_token: str = Field(alias="refreshToken")


class StoredCredentials(BaseModel):
    """Plaintext fallback credentials, saved only when the user asks for it."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    username: str
    password: str
