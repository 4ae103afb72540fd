from typing import List, Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime

class CamelModel(BaseModel):
    # Clients speak camelCase; python code keeps snake_case
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

class ShareCreate(CamelModel):
    record_id: int

class ShareLinkOut(CamelModel):
    public_code: str
    url: str
    token: str

# Public info for share page (reduced for privacy)
class PublicRecord(CamelModel):
    id: int
    name: str
    photos: List[str] = []
    location: Optional[str] = None
    rating: Optional[int] = None
    memo: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    created_at: str # "March 2025", never the exact timestamp
    sharer_name: str
    sharer_profile_image: Optional[str] = None
    view_count: int

class TrackView(CamelModel):
    public_code: str
    token: str
    session_id: str

class ConnectFriend(CamelModel):
    token: str
    # Lets attribution pick the exact view this browser produced
    session_id: Optional[str] = None

class ConnectFriendResult(CamelModel):
    success: bool
    message: str

class ShareStat(CamelModel):
    public_code: str
    record_label: str
    view_count: int
    tracking_count: int
    conversions: int
    created_at: datetime
