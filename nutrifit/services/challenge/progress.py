"""
Daily challenge progress.
"""

import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.challenge import ChallengeParticipant, ChallengeProgress
from nutrifit.repositories.participant_repository import ParticipantRepository
from nutrifit.repositories.progress_repository import ProgressRepository
from nutrifit.services.base_service import BaseService
from nutrifit.services.challenge.criteria import parse_progress_payload
from nutrifit.services.challenge.schemas import ProgressEntry
from nutrifit.utils.datetime_utils import utc_today
from nutrifit.utils.exceptions import (
    DuplicateProgressToday,
    InactiveParticipation,
    NotParticipating,
    Unauthenticated,
    is_unique_violation,
)


PROGRESS_UNIQUE_CONSTRAINT = "uq_progress_participant_date"


class ChallengeProgressTracker(BaseService):
    """Records daily progress and keeps the participant score current."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize progress tracker."""
        super().__init__(session)
        self.participant_repo = ParticipantRepository(session)
        self.progress_repo = ProgressRepository(session)

    async def _get_participant(
        self, user_id: uuid.UUID | None, challenge_id: uuid.UUID
    ) -> ChallengeParticipant:
        if user_id is None:
            raise Unauthenticated()

        participant = await self.participant_repo.get_for_user(
            challenge_id, user_id
        )
        if participant is None:
            raise NotParticipating()
        return participant

    async def add_progress(
        self,
        user_id: uuid.UUID | None,
        challenge_id: uuid.UUID,
        entry: ProgressEntry,
    ) -> ChallengeProgress:
        """
        Record today's progress for an active participant.

        The progress row and the participant's final_score are written in
        one transaction.

        Args:
            user_id: Authenticated user ID, or None
            challenge_id: Challenge ID
            entry: Progress data, daily score and notes

        Returns:
            Created progress entry

        Raises:
            Unauthenticated: If user_id is None
            NotParticipating: User has not joined the challenge
            InactiveParticipation: Participation already ended
            InvalidProgressData: Malformed progress_data
            DuplicateProgressToday: Progress already recorded today (UTC)
        """
        participant = await self._get_participant(user_id, challenge_id)
        if not participant.is_active:
            raise InactiveParticipation()

        parse_progress_payload(entry.progress_data)

        today = utc_today()
        if await self.progress_repo.exists_for_date(participant.id, today):
            raise DuplicateProgressToday()

        latest = await self.progress_repo.get_latest(participant.id)
        cumulative = (latest.cumulative_score if latest else 0) + entry.daily_score

        try:
            async with self.session.begin_nested():
                progress = await self.progress_repo.create(
                    participant_id=participant.id,
                    progress_date=today,
                    progress_data=entry.progress_data,
                    daily_score=entry.daily_score,
                    cumulative_score=cumulative,
                    notes=entry.notes,
                    auto_generated=False,
                )
        except IntegrityError as e:
            await self.rollback()
            if is_unique_violation(e, PROGRESS_UNIQUE_CONSTRAINT):
                raise DuplicateProgressToday() from e
            raise

        await self.participant_repo.set_final_score(participant.id, cumulative)
        await self.commit()

        participant.final_score = cumulative

        self.logger.info(
            "Challenge progress recorded",
            extra={
                "challenge_id": str(challenge_id),
                "participant_id": str(participant.id),
                "daily_score": entry.daily_score,
                "cumulative_score": cumulative,
            },
        )
        return progress

    async def get_challenge_progress(
        self, user_id: uuid.UUID | None, challenge_id: uuid.UUID
    ) -> list[ChallengeProgress]:
        """
        The user's progress history in a challenge, oldest first.

        Raises:
            NotParticipating: User has not joined the challenge
        """
        participant = await self._get_participant(user_id, challenge_id)
        return await self.progress_repo.get_history(participant.id)
