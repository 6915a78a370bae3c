"""PreferenceService -- named per-user settings stored as JSON."""

from typing import Any

from sqlalchemy import select

from ledger_kernel.db.upsert import insert_ignoring_conflict
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.preference import Preference
from ledger_kernel.services.base import BaseService

logger = get_logger("services.preference")


class PreferenceService(BaseService):
    """
    Read and write user preferences such as ``language``.

    One row per (user_id, name), guarded by uq_preference_user_name.
    """

    def get(self, user_id: int, name: str, default: Any = None) -> Any:
        stmt = select(Preference.data).where(
            Preference.user_id == user_id,
            Preference.name == name,
        )
        row = self.session.execute(stmt).first()
        if row is None or row.data is None:
            return default
        return row.data

    def set(self, user_id: int, name: str, data: Any) -> Preference:
        insert_ignoring_conflict(
            self.session,
            Preference,
            {"user_id": user_id, "name": name, "data": data},
            conflict_columns=("user_id", "name"),
        )
        stmt = select(Preference).where(
            Preference.user_id == user_id,
            Preference.name == name,
        )
        preference = self.session.execute(stmt).scalar_one()
        preference.data = data
        self.session.flush()
        logger.debug("preference_set", extra={"preference": name})
        return preference
