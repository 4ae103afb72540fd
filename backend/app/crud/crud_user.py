from app.crud.base import CRUDBase
from app.models.user import User


class CRUDUser(CRUDBase[User]):
    # Accounts belong to the auth service; this side only looks users up by id
    pass


user = CRUDUser(User)
