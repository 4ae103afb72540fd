from .share import (
    ShareCreate,
    ShareLinkOut,
    PublicRecord,
    TrackView,
    ConnectFriend,
    ConnectFriendResult,
    ShareStat,
)
