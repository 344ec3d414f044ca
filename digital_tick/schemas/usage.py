"""Admin usage schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserUsageEntry(BaseModel):
    user_key: str = Field(alias="userKey")
    count: int

    model_config = ConfigDict(populate_by_name=True)


class UsageSnapshotResponse(BaseModel):
    """Usage for every identity in the current accounting period."""

    period: str
    total_users: int = Field(alias="totalUsers")
    users: list[UserUsageEntry] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
