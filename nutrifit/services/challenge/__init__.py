"""
Challenge services package.

Contains modular services for community challenges:
- criteria: Typed payloads and success-criteria evaluation
- catalog: Listing, creation and recommendations
- membership: Join and withdraw
- progress: Daily progress
- completion: Completion and rewards
- stats: Statistics and leaderboard
- challenge_service: ChallengeService facade
"""

from nutrifit.services.challenge.catalog import ChallengeCatalog
from nutrifit.services.challenge.challenge_service import ChallengeService
from nutrifit.services.challenge.completion import ChallengeCompletion
from nutrifit.services.challenge.criteria import (
    evaluate_success_criteria,
    longest_consecutive_streak,
    parse_success_criteria,
)
from nutrifit.services.challenge.membership import ChallengeMembership
from nutrifit.services.challenge.progress import ChallengeProgressTracker
from nutrifit.services.challenge.schemas import (
    ActiveChallenge,
    ChallengeDefinition,
    ChallengeStats,
    LeaderboardEntry,
    ProgressEntry,
)
from nutrifit.services.challenge.stats import (
    ChallengeStatsService,
    build_challenge_stats,
)


__all__ = [
    # Facade
    "ChallengeService",
    # Modules
    "ChallengeCatalog",
    "ChallengeCompletion",
    "ChallengeMembership",
    "ChallengeProgressTracker",
    "ChallengeStatsService",
    # Pure helpers
    "build_challenge_stats",
    "evaluate_success_criteria",
    "longest_consecutive_streak",
    "parse_success_criteria",
    # Types
    "ActiveChallenge",
    "ChallengeDefinition",
    "ChallengeStats",
    "LeaderboardEntry",
    "ProgressEntry",
]
