"""Existence checks for the users and subjects a new conversation points at."""

from uuid import UUID

from paddock.repositories.subject_repository import SubjectRepository
from paddock.repositories.user_repository import UserRepository

from .exceptions import (
    BusinessRuleError,
    DriverProfileNotFoundError,
    TeamNotFoundError,
    UserNotFoundError,
    VehicleNotFoundError,
)


def require_distinct_participants(first_id: UUID, second_id: UUID) -> None:
    # A thread needs two parties, otherwise it can never be purged
    if first_id == second_id:
        raise BusinessRuleError("Cannot start a conversation with yourself.")


async def require_users(user_repo: UserRepository, *user_ids: UUID) -> None:
    for user_id in user_ids:
        if not await user_repo.get_user_by_id(user_id):
            raise UserNotFoundError(f"User with id '{user_id}' not found.")


async def require_vehicle(subject_repo: SubjectRepository, vehicle_id: UUID) -> None:
    if not await subject_repo.get_vehicle_by_id(vehicle_id):
        raise VehicleNotFoundError(f"Vehicle with id '{vehicle_id}' not found.")


async def require_motorsports_subject(
    subject_repo: SubjectRepository,
    team_id: UUID | None,
    driver_profile_id: UUID | None,
) -> None:
    if team_id and not await subject_repo.get_team_by_id(team_id):
        raise TeamNotFoundError(f"Team with id '{team_id}' not found.")
    if driver_profile_id and not await subject_repo.get_driver_profile_by_id(
        driver_profile_id
    ):
        raise DriverProfileNotFoundError(
            f"Driver profile with id '{driver_profile_id}' not found."
        )
