from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paddock.models import Reservation

from .base import BaseRepository


class ReservationRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_reservation_by_id(self, reservation_id: UUID) -> Reservation | None:
        """Retrieves a specific reservation by its ID."""
        stmt = select(Reservation).filter(Reservation.id == reservation_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()
