from .user import User
from .record import MealRecord
from .share import ShareLink, ViewEvent
from .friendship import Friendship
