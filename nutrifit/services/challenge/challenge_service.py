"""
Challenge service facade.

Single entry point for challenge operations, delegating to specialized
modules.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.config.business_constants import (
    FEATURED_CHALLENGES_LIMIT,
    LEADERBOARD_LIMIT,
    RECOMMENDATIONS_LIMIT,
)
from nutrifit.models.challenge import (
    ChallengeParticipant,
    ChallengeProgress,
    CommunityChallenge,
)
from nutrifit.models.enums import ChallengeType
from nutrifit.services.challenge.catalog import ChallengeCatalog
from nutrifit.services.challenge.completion import ChallengeCompletion
from nutrifit.services.challenge.membership import ChallengeMembership
from nutrifit.services.challenge.progress import ChallengeProgressTracker
from nutrifit.services.challenge.schemas import (
    ActiveChallenge,
    ChallengeDefinition,
    ChallengeStats,
    LeaderboardEntry,
    ProgressEntry,
)
from nutrifit.services.challenge.stats import ChallengeStatsService


class ChallengeService:
    """
    Challenge service facade.

    Delegates operations to specialized modules:
    - ChallengeCatalog: Listing, lookup, creation, recommendations
    - ChallengeMembership: Join, withdraw, participant lookups
    - ChallengeProgressTracker: Daily progress
    - ChallengeCompletion: Criteria evaluation and rewards
    - ChallengeStatsService: Statistics and leaderboard
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize challenge service facade."""
        self.session = session

        self.catalog = ChallengeCatalog(session)
        self.membership = ChallengeMembership(session)
        self.progress = ChallengeProgressTracker(session)
        self.completion = ChallengeCompletion(session)
        self.stats = ChallengeStatsService(session)

    # Catalogue

    async def get_public_challenges(
        self,
        challenge_type: ChallengeType | None = None,
        only_active: bool = True,
    ) -> list[CommunityChallenge]:
        return await self.catalog.get_public_challenges(
            challenge_type, only_active
        )

    async def get_featured_challenges(
        self, limit: int = FEATURED_CHALLENGES_LIMIT
    ) -> list[CommunityChallenge]:
        return await self.catalog.get_featured_challenges(limit)

    async def get_challenge(
        self, challenge_id: uuid.UUID
    ) -> CommunityChallenge | None:
        return await self.catalog.get_challenge(challenge_id)

    async def create_challenge(
        self, requester_id: uuid.UUID | None, data: ChallengeDefinition
    ) -> CommunityChallenge:
        """Delegates to ChallengeCatalog.create_challenge()."""
        return await self.catalog.create_challenge(requester_id, data)

    async def get_user_active_challenges(
        self, user_id: uuid.UUID | None
    ) -> list[ActiveChallenge]:
        return await self.catalog.get_user_active_challenges(user_id)

    async def get_challenge_recommendations(
        self,
        user_id: uuid.UUID | None,
        limit: int = RECOMMENDATIONS_LIMIT,
    ) -> list[CommunityChallenge]:
        return await self.catalog.get_challenge_recommendations(user_id, limit)

    # Membership

    async def join_challenge(
        self,
        user_id: uuid.UUID | None,
        challenge_id: uuid.UUID,
        visible: bool = True,
    ) -> ChallengeParticipant:
        """
        Join a challenge.

        Delegates to ChallengeMembership.join_challenge().

        Raises:
            Unauthenticated, ChallengeNotFound, ChallengeUnavailable,
            AlreadyParticipating, ChallengeFull, RequirementsNotMet
        """
        return await self.membership.join_challenge(
            user_id, challenge_id, visible
        )

    async def withdraw_from_challenge(
        self, user_id: uuid.UUID | None, challenge_id: uuid.UUID
    ) -> ChallengeParticipant:
        """Delegates to ChallengeMembership.withdraw_from_challenge()."""
        return await self.membership.withdraw_from_challenge(
            user_id, challenge_id
        )

    async def get_user_participation(
        self, user_id: uuid.UUID | None, challenge_id: uuid.UUID
    ) -> ChallengeParticipant | None:
        return await self.membership.get_user_participation(
            user_id, challenge_id
        )

    async def get_challenge_participants(
        self, challenge_id: uuid.UUID
    ) -> list[ChallengeParticipant]:
        return await self.membership.get_challenge_participants(challenge_id)

    # Progress

    async def add_progress(
        self,
        user_id: uuid.UUID | None,
        challenge_id: uuid.UUID,
        entry: ProgressEntry,
    ) -> ChallengeProgress:
        """
        Record today's progress.

        Delegates to ChallengeProgressTracker.add_progress().

        Raises:
            Unauthenticated, NotParticipating, InactiveParticipation,
            DuplicateProgressToday
        """
        return await self.progress.add_progress(user_id, challenge_id, entry)

    async def get_challenge_progress(
        self, user_id: uuid.UUID | None, challenge_id: uuid.UUID
    ) -> list[ChallengeProgress]:
        return await self.progress.get_challenge_progress(
            user_id, challenge_id
        )

    # Completion

    async def check_challenge_completion(self, challenge_id: uuid.UUID) -> int:
        """Delegates to ChallengeCompletion.check_challenge_completion()."""
        return await self.completion.check_challenge_completion(challenge_id)

    async def complete_participation(
        self,
        participant: ChallengeParticipant,
        challenge: CommunityChallenge,
    ) -> bool:
        return await self.completion.complete_participation(
            participant, challenge
        )

    # Statistics

    async def get_challenge_stats(
        self,
        challenge_id: uuid.UUID,
        requester_id: uuid.UUID | None = None,
    ) -> ChallengeStats:
        return await self.stats.get_challenge_stats(challenge_id, requester_id)

    async def get_challenge_leaderboard(
        self, challenge_id: uuid.UUID, limit: int = LEADERBOARD_LIMIT
    ) -> list[LeaderboardEntry]:
        return await self.stats.get_challenge_leaderboard(challenge_id, limit)
