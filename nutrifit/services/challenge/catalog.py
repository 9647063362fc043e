"""
Challenge catalogue: listing, lookup, creation and recommendations.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.config.business_constants import (
    DEFAULT_RECOMMENDED_TYPES,
    FEATURED_CHALLENGES_LIMIT,
    RECOMMENDATIONS_LIMIT,
)
from nutrifit.models.challenge import CommunityChallenge
from nutrifit.models.enums import ChallengeType
from nutrifit.repositories.challenge_repository import ChallengeRepository
from nutrifit.repositories.participant_repository import ParticipantRepository
from nutrifit.services.base_service import BaseService, transaction
from nutrifit.services.challenge.criteria import (
    parse_entry_requirements,
    parse_reward_structure,
    parse_success_criteria,
)
from nutrifit.services.challenge.schemas import (
    ActiveChallenge,
    ChallengeDefinition,
)
from nutrifit.utils.exceptions import Unauthenticated


class ChallengeCatalog(BaseService):
    """Challenge catalogue."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize challenge catalogue."""
        super().__init__(session)
        self.challenge_repo = ChallengeRepository(session)
        self.participant_repo = ParticipantRepository(session)

    async def get_public_challenges(
        self,
        challenge_type: ChallengeType | None = None,
        only_active: bool = True,
    ) -> list[CommunityChallenge]:
        """Public challenges, featured first then newest start date."""
        return await self.challenge_repo.get_public(
            challenge_type.value if challenge_type else None,
            only_active=only_active,
        )

    async def get_featured_challenges(
        self, limit: int = FEATURED_CHALLENGES_LIMIT
    ) -> list[CommunityChallenge]:
        """Public active challenges with a positive featured priority."""
        return await self.challenge_repo.get_featured(limit)

    async def get_challenge(
        self, challenge_id: uuid.UUID
    ) -> CommunityChallenge | None:
        """Get challenge by ID."""
        return await self.challenge_repo.get_by_id(challenge_id)

    @transaction
    async def create_challenge(
        self,
        requester_id: uuid.UUID | None,
        data: ChallengeDefinition,
    ) -> CommunityChallenge:
        """
        Create an active, unfeatured challenge.

        Criteria, rewards and entry requirements are validated against the
        challenge type before anything is stored.

        Args:
            requester_id: Authenticated creator, or None
            data: Challenge definition

        Returns:
            Created challenge

        Raises:
            Unauthenticated: If requester_id is None
            InvalidChallengeDefinition: Malformed criteria, rewards or
                requirements
        """
        if requester_id is None:
            raise Unauthenticated()

        parse_success_criteria(data.challenge_type, data.success_criteria)
        parse_reward_structure(data.reward_structure)
        parse_entry_requirements(data.entry_requirements)

        challenge = await self.challenge_repo.create(
            name=data.name,
            description=data.description,
            challenge_type=data.challenge_type.value,
            difficulty_level=data.difficulty_level,
            duration_days=data.duration_days,
            max_participants=data.max_participants,
            entry_requirements=data.entry_requirements,
            success_criteria=data.success_criteria,
            reward_structure=data.reward_structure,
            start_date=data.start_date,
            end_date=data.end_date,
            created_by=requester_id,
            is_public=data.is_public,
            is_active=True,
            featured_priority=0,
        )

        self.logger.info(
            "Challenge created",
            extra={
                "challenge_id": str(challenge.id),
                "created_by": str(requester_id),
                "challenge_type": challenge.challenge_type,
            },
        )
        return challenge

    async def get_user_active_challenges(
        self, user_id: uuid.UUID | None
    ) -> list[ActiveChallenge]:
        """Challenges the user is active in, most recently joined first."""
        if user_id is None:
            return []

        rows = await self.participant_repo.get_active_with_challenge(user_id)
        return [
            ActiveChallenge(challenge=challenge, participation=participant)
            for participant, challenge in rows
        ]

    async def get_challenge_recommendations(
        self,
        user_id: uuid.UUID | None,
        limit: int = RECOMMENDATIONS_LIMIT,
    ) -> list[CommunityChallenge]:
        """
        Suggest public active challenges.

        Types the user has completed before are preferred; users without a
        completed challenge get consistency and variety challenges.
        """
        if user_id is None:
            return []

        types = await self.participant_repo.get_completed_types(user_id)
        if not types:
            types = list(DEFAULT_RECOMMENDED_TYPES)

        self.logger.debug(
            "Recommending challenges",
            extra={"user_id": str(user_id), "types": types},
        )
        return await self.challenge_repo.get_public_by_types(types, limit)
