"""User settings requests."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from swipechef.gateway.base import BaseGateway
from swipechef.gateway.mapping import settings_from_row, settings_update_to_row_values
from swipechef.gateway.results import gateway_call
from swipechef.models.entities import MealSlot, UserSettings, UserSettingsUpdate
from swipechef.models.user_settings import UserSettingsRecord


class UserSettingsGateway(BaseGateway):

    async def _get_or_create(self, session, user_id: str) -> UserSettingsRecord:
        """The user's settings row; the first read creates it with every slot shown."""
        result = await session.execute(select(UserSettingsRecord).where(UserSettingsRecord.user_id == user_id))
        row = result.scalar_one_or_none()
        if row is not None:
            return row

        row = UserSettingsRecord(
            user_id=user_id,
            show_breakfast=True,
            show_lunch=True,
            show_dinner=True,
            show_snack=True,
        )
        session.add(row)
        try:
            await session.commit()
        except IntegrityError:
            # Created concurrently by another request
            await session.rollback()
            result = await session.execute(select(UserSettingsRecord).where(UserSettingsRecord.user_id == user_id))
            return result.scalar_one()
        await session.refresh(row)
        return row

    @gateway_call
    async def get_user_settings(self) -> UserSettings:
        user = self.require_user()
        async with self.session_factory() as session:
            row = await self._get_or_create(session, user.id)
        return settings_from_row(row)

    @gateway_call
    async def update_user_settings(self, update: UserSettingsUpdate) -> UserSettings:
        """Apply the given settings; hiding every meal slot is refused."""
        user = self.require_user()
        async with self.session_factory() as session:
            row = await self._get_or_create(session, user.id)
            update.check_against(settings_from_row(row))
            values = settings_update_to_row_values(update)
            if values:
                for column, value in values.items():
                    setattr(row, column, value)
                await session.commit()
                await session.refresh(row)
        return settings_from_row(row)

    @gateway_call
    async def toggle_meal_slot(self, slot: MealSlot) -> UserSettings:
        user = self.require_user()
        async with self.session_factory() as session:
            row = await self._get_or_create(session, user.id)
            update = UserSettingsUpdate.toggle(settings_from_row(row), MealSlot(slot))
            update.check_against(settings_from_row(row))
            for column, value in settings_update_to_row_values(update).items():
                setattr(row, column, value)
            await session.commit()
            await session.refresh(row)
        return settings_from_row(row)
