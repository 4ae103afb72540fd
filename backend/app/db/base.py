# Import all the models, so that Base has them before being
# imported by create_all / tests
from app.db.base_class import Base  # noqa
from app.models.user import User  # noqa
from app.models.record import MealRecord  # noqa
from app.models.share import ShareLink, ViewEvent  # noqa
from app.models.friendship import Friendship  # noqa
