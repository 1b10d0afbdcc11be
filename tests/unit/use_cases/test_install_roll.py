"""Unit tests for InstallRoll / ResetRoll use cases"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.rolls import InstallRoll, InstallRollCommandDTO, ResetRoll, ResetRollCommandDTO
from src.domain.roll import Roll
from src.domain.roll_usage_event import UsageEventKind


def make_roll(available: str, total: str = "105.00", active: bool = True) -> Roll:
    return Roll(
        id=3,
        roll_number=2,
        material_type="DTF",
        total_length=Decimal(total),
        available_length=Decimal(available),
        used_length=Decimal(total) - Decimal(available),
        is_active=active,
        version=8,
    )


@pytest.fixture
def mock_roll_repo():
    return MagicMock()


@pytest.fixture
def mock_usage_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda event: event)
    return repo


@pytest.mark.asyncio
class TestInstallRoll:

    async def test_creates_missing_roll_with_default_length(self, mock_uow, mock_roll_repo, mock_usage_repo):
        mock_roll_repo.get = AsyncMock(return_value=None)

        def _create(roll):
            roll.id = 3
            return roll

        mock_roll_repo.create = AsyncMock(side_effect=_create)
        use_case = InstallRoll(mock_uow, mock_roll_repo, mock_usage_repo, default_length=Decimal("105.00"))

        result = await use_case.execute(InstallRollCommandDTO(roll_number=2, material_type="DTF"))

        assert result.is_ok()
        assert result.value.total_length == Decimal("105.00")
        assert result.value.available_length == Decimal("105.00")
        assert result.value.used_length == Decimal("0.00")
        assert result.value.is_active is True

        event = mock_usage_repo.create.call_args.args[0]
        assert event.event_kind == UsageEventKind.INSTALL
        assert event.available_after == Decimal("105.00")
        mock_uow.commit.assert_called_once()

    async def test_reinstall_overwrites_depleted_roll(self, mock_uow, mock_roll_repo, mock_usage_repo):
        mock_roll_repo.get = AsyncMock(return_value=make_roll("3.00", active=False))
        mock_roll_repo.update_if_version = AsyncMock(return_value=True)
        mock_roll_repo.get_by_id = AsyncMock(return_value=make_roll("50.00", total="50.00"))
        use_case = InstallRoll(mock_uow, mock_roll_repo, mock_usage_repo)

        result = await use_case.execute(
            InstallRollCommandDTO(roll_number=2, material_type="DTF", total_length=Decimal("50.00"), notes="new spool")
        )

        assert result.is_ok()
        roll_id, version, values = mock_roll_repo.update_if_version.call_args.args
        assert (roll_id, version) == (3, 8)
        assert values["total_length"] == Decimal("50.00")
        assert values["available_length"] == Decimal("50.00")
        assert values["used_length"] == Decimal("0.00")
        assert values["is_active"] is True
        assert values["notes"] == "new spool"
        assert mock_usage_repo.create.await_count == 1

    async def test_lost_race_is_retried(self, mock_uow, mock_roll_repo, mock_usage_repo):
        mock_roll_repo.get = AsyncMock(return_value=make_roll("3.00"))
        mock_roll_repo.update_if_version = AsyncMock(side_effect=[False, True])
        mock_roll_repo.get_by_id = AsyncMock(return_value=make_roll("105.00"))
        use_case = InstallRoll(mock_uow, mock_roll_repo, mock_usage_repo)

        result = await use_case.execute(InstallRollCommandDTO(roll_number=2, material_type="DTF"))

        assert result.is_ok()
        assert mock_roll_repo.update_if_version.await_count == 2
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
class TestResetRoll:

    async def test_reset_keeps_capacity_and_active_flag(self, mock_uow, mock_roll_repo, mock_usage_repo):
        mock_roll_repo.get = AsyncMock(return_value=make_roll("12.00", active=False))
        mock_roll_repo.update_if_version = AsyncMock(return_value=True)
        mock_roll_repo.get_by_id = AsyncMock(return_value=make_roll("105.00", active=False))
        use_case = ResetRoll(mock_uow, mock_roll_repo, mock_usage_repo)

        result = await use_case.execute(ResetRollCommandDTO(roll_number=2, material_type="DTF"))

        assert result.is_ok()
        values = mock_roll_repo.update_if_version.call_args.args[2]
        assert values["available_length"] == Decimal("105.00")
        assert "is_active" not in values
        event = mock_usage_repo.create.call_args.args[0]
        assert event.event_kind == UsageEventKind.RESET

    async def test_reset_unknown_roll(self, mock_uow, mock_roll_repo, mock_usage_repo):
        mock_roll_repo.get = AsyncMock(return_value=None)
        use_case = ResetRoll(mock_uow, mock_roll_repo, mock_usage_repo)

        result = await use_case.execute(ResetRollCommandDTO(roll_number=2, material_type="DTF"))

        assert result.is_err()
        assert result.error.code == "NOT_FOUND"
        mock_usage_repo.create.assert_not_called()
