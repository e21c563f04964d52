from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


ActionType = Literal["open_linkedin", "assumed_follow"]


class ProfileAction(BaseModel):
    """Append-only event record; profile_id may dangle after a profile delete."""

    id: str
    profile_id: str = Field(alias="profileId")
    action_type: ActionType = Field(alias="actionType")
    # Epoch milliseconds
    timestamp: int

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
