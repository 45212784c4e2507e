from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paddock.models import DriverProfile, Team, Vehicle

from .base import BaseRepository


class SubjectRepository(BaseRepository):
    """Existence lookups for the entities a conversation can be about."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_vehicle_by_id(self, vehicle_id: UUID) -> Vehicle | None:
        stmt = select(Vehicle).filter(Vehicle.id == vehicle_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_team_by_id(self, team_id: UUID) -> Team | None:
        stmt = select(Team).filter(Team.id == team_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_driver_profile_by_id(
        self, driver_profile_id: UUID
    ) -> DriverProfile | None:
        stmt = select(DriverProfile).filter(DriverProfile.id == driver_profile_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()
