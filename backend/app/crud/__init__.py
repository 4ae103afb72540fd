from .crud_user import user
from .crud_record import record
from .crud_share import share_link, view_event
from .crud_friendship import friendship
