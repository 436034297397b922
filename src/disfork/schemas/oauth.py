"""Pydantic schemas for the OAuth device authorization flow.

See: https://docs.github.com/en/apps/oauth-apps/building-oauth-apps/authorizing-oauth-apps#device-flow
"""

from pydantic import BaseModel, Field


class DeviceCode(BaseModel):
    """Response from POST https://github.com/login/device/code."""

    device_code: str = Field(description="Code the client exchanges for a token")
    user_code: str = Field(description="Code the user types on the verification page")
    verification_uri: str = Field(description="Page where the user enters the code")
    expires_in: int = Field(ge=0, description="Seconds until the device code expires")
    interval: int = Field(default=5, ge=0, description="Minimum seconds between polls")


class TokenResponse(BaseModel):
    """Response from POST https://github.com/login/oauth/access_token.

    Either ``access_token`` is set, or ``error`` / ``error_description``.
    """

    access_token: str | None = Field(default=None, description="Granted access token")
    token_type: str | None = Field(default=None, description="Token type (bearer)")
    scope: str | None = Field(default=None, description="Granted scopes")
    error: str | None = Field(default=None, description="Error code")
    error_description: str | None = Field(default=None, description="Human-readable error")
