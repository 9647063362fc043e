"""
Challenge completion and reward distribution.

Completing a participation is committed before any reward is applied.
Credits and the completion achievement go through the side effect queue, so
a reward failure is retried later and never reverts the completion.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.config.business_constants import CREDIT_REASON_CHALLENGE_REWARD
from nutrifit.models.challenge import ChallengeParticipant, CommunityChallenge
from nutrifit.models.enums import ParticipationStatus
from nutrifit.models.side_effect import PendingSideEffect
from nutrifit.repositories.challenge_repository import ChallengeRepository
from nutrifit.repositories.participant_repository import ParticipantRepository
from nutrifit.repositories.progress_repository import ProgressRepository
from nutrifit.services.base_service import BaseService, log_operation
from nutrifit.services.challenge.criteria import (
    evaluate_success_criteria,
    parse_reward_structure,
    parse_success_criteria,
)
from nutrifit.services.side_effects import SideEffectService
from nutrifit.utils.datetime_utils import utc_now
from nutrifit.utils.exceptions import InvalidProgressData


CHALLENGE_ACHIEVEMENT_TYPE = "challenge_completion"


class ChallengeCompletion(BaseService):
    """Evaluates active participants and completes the successful ones."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize completion service."""
        super().__init__(session)
        self.challenge_repo = ChallengeRepository(session)
        self.participant_repo = ParticipantRepository(session)
        self.progress_repo = ProgressRepository(session)
        self.side_effects = SideEffectService(session)

    @log_operation
    async def check_challenge_completion(self, challenge_id: uuid.UUID) -> int:
        """
        Complete every active participant whose progress meets the criteria.

        Args:
            challenge_id: Challenge ID

        Returns:
            Number of participations completed (0 for unknown challenges)
        """
        challenge = await self.challenge_repo.get_by_id(challenge_id)
        if challenge is None:
            self.logger.debug(
                "Completion check for unknown challenge",
                extra={"challenge_id": str(challenge_id)},
            )
            return 0

        criteria = parse_success_criteria(
            challenge.challenge_type, challenge.success_criteria
        )
        participants = await self.participant_repo.get_active_for_challenge(
            challenge_id
        )

        completed = 0
        for participant in participants:
            history = await self.progress_repo.get_history(participant.id)
            try:
                met = evaluate_success_criteria(
                    criteria, history, challenge.challenge_type
                )
            except InvalidProgressData as e:
                self.logger.warning(
                    "Skipping participant with unreadable progress",
                    extra={
                        "challenge_id": str(challenge_id),
                        "participant_id": str(participant.id),
                        "error": e.message,
                    },
                )
                continue
            if not met:
                continue
            if await self.complete_participation(participant, challenge):
                completed += 1

        return completed

    async def complete_participation(
        self,
        participant: ChallengeParticipant,
        challenge: CommunityChallenge,
    ) -> bool:
        """
        Mark a participation completed and queue its rewards.

        Args:
            participant: Active participation
            challenge: Its challenge

        Returns:
            False if the participation was no longer active
        """
        rewards = parse_reward_structure(challenge.reward_structure)
        completed_at = utc_now()

        closed = await self.participant_repo.close_active(
            participant.id,
            ParticipationStatus.COMPLETED.value,
            completed_at,
            rewards_earned=dict(challenge.reward_structure or {}),
        )
        if not closed:
            self.logger.info(
                "Participation already closed",
                extra={"participant_id": str(participant.id)},
            )
            return False

        effects: list[PendingSideEffect] = []
        if rewards.credits:
            effects.append(
                await self.side_effects.enqueue_credit(
                    participant.user_id,
                    rewards.credits,
                    CREDIT_REASON_CHALLENGE_REWARD,
                    reference_id=participant.id,
                )
            )
        if rewards.badges:
            effects.append(
                await self.side_effects.enqueue_achievement(
                    participant.user_id,
                    achievement_type=CHALLENGE_ACHIEVEMENT_TYPE,
                    achievement_name=f"{challenge.name} Champion",
                    description=(
                        f"Successfully completed the {challenge.name} challenge"
                    ),
                    related_entity_id=str(challenge.id),
                    related_entity_type="challenge",
                    points_awarded=rewards.completion_points,
                    badge_awarded=rewards.badges[0],
                    special_reward=rewards.bonus_items,
                )
            )

        await self.commit()

        participant.status = ParticipationStatus.COMPLETED.value
        participant.completion_date = completed_at

        self.logger.info(
            "Challenge participation completed",
            extra={
                "challenge_id": str(challenge.id),
                "participant_id": str(participant.id),
                "user_id": str(participant.user_id),
                "final_score": participant.final_score,
                "rewards_queued": len(effects),
            },
        )

        if effects:
            await self.side_effects.dispatch_all(effects)
        return True
