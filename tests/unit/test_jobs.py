"""Unit tests for background job bodies."""

import uuid
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from jobs.tasks import challenge_completion


class TestChallengeCompletionJob:
    """Test the hourly completion sweep."""

    @pytest.mark.asyncio
    async def test_failing_challenge_does_not_stop_the_sweep(self, monkeypatch):
        """Test a challenge that raises is counted and the rest still run."""
        healthy, broken, other = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        sessions = []
        checked = []

        @asynccontextmanager
        async def session_maker():
            session = AsyncMock()
            sessions.append(session)
            yield session

        repo = MagicMock()
        repo.get_active_ids = AsyncMock(return_value=[healthy, broken, other])

        class Service:
            def __init__(self, session):
                self.session = session

            async def check_challenge_completion(self, challenge_id):
                checked.append(challenge_id)
                if challenge_id == broken:
                    raise RuntimeError("criteria unreadable")
                return 2

        monkeypatch.setattr(challenge_completion, "task_session_maker", session_maker)
        monkeypatch.setattr(
            challenge_completion, "ChallengeRepository", lambda session: repo
        )
        monkeypatch.setattr(challenge_completion, "ChallengeService", Service)

        result = await challenge_completion._check_completions_async()

        assert result == {"checked": 2, "completed": 4, "failed": 1}
        assert checked == [healthy, broken, other]
        # One session to list challenges, then one per challenge
        assert len(sessions) == 4
        assert [s.rollback.await_count for s in sessions] == [0, 0, 1, 0]
