"""
Challenge membership.

Joining and withdrawing. Eligibility checks run in a fixed order so the
caller always sees the first failing rule; nothing is written unless all of
them pass.
"""

import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.challenge import ChallengeParticipant, CommunityChallenge
from nutrifit.models.enums import ParticipationStatus
from nutrifit.repositories.challenge_repository import ChallengeRepository
from nutrifit.repositories.participant_repository import ParticipantRepository
from nutrifit.repositories.user_repository import UserRepository
from nutrifit.services.base_service import BaseService
from nutrifit.services.challenge.criteria import parse_entry_requirements
from nutrifit.utils.datetime_utils import utc_now, whole_days_since
from nutrifit.utils.exceptions import (
    AlreadyParticipating,
    ChallengeFull,
    ChallengeNotFound,
    ChallengeUnavailable,
    InactiveParticipation,
    NotParticipating,
    RequirementsNotMet,
    Unauthenticated,
    is_unique_violation,
)


PARTICIPANT_UNIQUE_CONSTRAINT = "uq_participant_challenge_user"


class ChallengeMembership(BaseService):
    """Join and withdraw operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize membership service."""
        super().__init__(session)
        self.challenge_repo = ChallengeRepository(session)
        self.participant_repo = ParticipantRepository(session)
        self.user_repo = UserRepository(session)

    async def join_challenge(
        self,
        user_id: uuid.UUID | None,
        challenge_id: uuid.UUID,
        visible: bool = True,
    ) -> ChallengeParticipant:
        """
        Enroll a user in a challenge.

        Args:
            user_id: Authenticated user ID, or None
            challenge_id: Challenge to join
            visible: Show the participant on the leaderboard

        Returns:
            Active participation with a zero score

        Raises:
            Unauthenticated: If user_id is None
            ChallengeNotFound: Unknown challenge
            ChallengeUnavailable: Challenge inactive or not public
            AlreadyParticipating: User already joined
            ChallengeFull: Participant cap reached
            RequirementsNotMet: Entry requirements not satisfied
        """
        if user_id is None:
            raise Unauthenticated()

        challenge = await self.challenge_repo.get_by_id(challenge_id)
        if challenge is None:
            raise ChallengeNotFound()

        if not challenge.is_active or not challenge.is_public:
            raise ChallengeUnavailable()

        if await self.participant_repo.get_for_user(challenge_id, user_id):
            raise AlreadyParticipating()

        if challenge.max_participants is not None:
            count = await self.participant_repo.count_for_challenge(challenge_id)
            if count >= challenge.max_participants:
                raise ChallengeFull()

        await self._check_entry_requirements(user_id, challenge)

        try:
            async with self.session.begin_nested():
                participant = await self.participant_repo.create(
                    challenge_id=challenge_id,
                    user_id=user_id,
                    status=ParticipationStatus.ACTIVE.value,
                    final_score=0,
                    is_visible=visible,
                )
        except IntegrityError as e:
            await self.rollback()
            if is_unique_violation(e, PARTICIPANT_UNIQUE_CONSTRAINT):
                raise AlreadyParticipating() from e
            raise

        await self.commit()

        self.logger.info(
            "User joined challenge",
            extra={
                "challenge_id": str(challenge_id),
                "user_id": str(user_id),
                "participant_id": str(participant.id),
            },
        )
        return participant

    async def _check_entry_requirements(
        self, user_id: uuid.UUID, challenge: CommunityChallenge
    ) -> None:
        requirements = parse_entry_requirements(challenge.entry_requirements)

        if requirements.account_age_days is None:
            return

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise Unauthenticated()

        account_age = whole_days_since(user.created_at)
        if account_age < requirements.account_age_days:
            raise RequirementsNotMet(
                f"Account must be at least "
                f"{requirements.account_age_days} days old"
            )

    async def withdraw_from_challenge(
        self, user_id: uuid.UUID | None, challenge_id: uuid.UUID
    ) -> ChallengeParticipant:
        """
        Withdraw a user from a challenge they are active in.

        Raises:
            Unauthenticated: If user_id is None
            NotParticipating: User never joined
            InactiveParticipation: Participation already ended
        """
        if user_id is None:
            raise Unauthenticated()

        participant = await self.participant_repo.get_for_user(
            challenge_id, user_id
        )
        if participant is None:
            raise NotParticipating()
        if not participant.is_active:
            raise InactiveParticipation()

        withdrawn_at = utc_now()
        closed = await self.participant_repo.close_active(
            participant.id,
            ParticipationStatus.WITHDRAWN.value,
            withdrawn_at,
        )
        if not closed:
            await self.rollback()
            raise InactiveParticipation()

        await self.commit()

        participant.status = ParticipationStatus.WITHDRAWN.value
        participant.completion_date = withdrawn_at

        self.logger.info(
            "User withdrew from challenge",
            extra={
                "challenge_id": str(challenge_id),
                "user_id": str(user_id),
            },
        )
        return participant

    async def get_user_participation(
        self, user_id: uuid.UUID | None, challenge_id: uuid.UUID
    ) -> ChallengeParticipant | None:
        """The user's participation in a challenge, if any."""
        if user_id is None:
            return None
        return await self.participant_repo.get_for_user(challenge_id, user_id)

    async def get_challenge_participants(
        self, challenge_id: uuid.UUID
    ) -> list[ChallengeParticipant]:
        """Visible participants, highest score first."""
        return await self.participant_repo.get_ranked(
            challenge_id, visible_only=True
        )
