from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class FollowRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId", description="被关注（或取消关注）的用户ID")


class FollowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    follower_id: int
    followee_id: int
    created_at: datetime
