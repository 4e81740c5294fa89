"""Payloads of the public store app-details endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

DEFAULT_APP_DETAILS_URL = "https://store.steampowered.com/api/appdetails"


class AppDetailsData(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    name: str


class AppDetails(BaseModel):
    """One value of the appdetails response, which is keyed by app id."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    success: bool = False
    data: AppDetailsData | None = None
