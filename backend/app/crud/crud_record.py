from app.crud.base import CRUDBase
from app.models.record import MealRecord


class CRUDRecord(CRUDBase[MealRecord]):
    # Records are owned by the meal-record service; we only read them
    def is_owned_by(self, record: MealRecord, user_id: int) -> bool:
        return record.user_id == user_id


record = CRUDRecord(MealRecord)
