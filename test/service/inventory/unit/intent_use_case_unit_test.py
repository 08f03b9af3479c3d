"""
Unit tests for CreateIntentUseCase / ReleaseIntentUseCase / SetBoardingStateUseCase

Focus:
1. Pre-checks before touching the hold store (run, boarding, segment, seat type)
2. Store conflicts propagate untouched (SEAT_HELD / SEAT_TAKEN)
3. The run room is notified only when something changed
"""

from unittest.mock import AsyncMock

import attrs
import pytest

from src.platform.exception.exceptions import ConflictError, NotFoundError, ValidationError
from src.service.inventory.app.command.create_intent_use_case import CreateIntentUseCase
from src.service.inventory.app.command.release_intent_use_case import ReleaseIntentUseCase
from src.service.inventory.app.command.set_boarding_state_use_case import (
    SetBoardingStateUseCase,
)
from src.service.inventory.app.interface.i_intent_command_repo import IntentWriteResult
from src.service.inventory.domain.enum.seat_status import SeatType
from src.service.inventory.domain.value_object.seat_map import SeatRecord
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType
from src.service.shared_kernel.domain.value_object.segment import Segment


SEATS = [
    SeatRecord(id=101, vehicle_id=3, label='1', row=1, col=1),
    SeatRecord(id=102, vehicle_id=3, label='D', row=0, col=1, seat_type=SeatType.DRIVER),
    SeatRecord(id=103, vehicle_id=3, label='3', row=1, col=3, blocked_online=True),
]


class TestCreateIntent:
    @pytest.fixture
    def query_repo(self, run_info):
        repo = AsyncMock()
        repo.get_run = AsyncMock(return_value=run_info)
        repo.list_seats = AsyncMock(return_value=SEATS)
        return repo

    @pytest.fixture
    def command_repo(self):
        repo = AsyncMock()

        async def _create(*, intent, ttl_seconds):
            return IntentWriteResult(intent=attrs.evolve(intent, id=1))

        repo.create = AsyncMock(side_effect=_create)
        return repo

    @pytest.fixture
    def use_case(self, query_repo, command_repo, broadcaster):
        return CreateIntentUseCase(
            seat_inventory_query_repo=query_repo,
            intent_command_repo=command_repo,
            run_event_broadcaster=broadcaster,
            ttl_seconds=90,
        )

    async def test_creates_hold_for_resolved_segment(
        self, use_case, command_repo, broadcaster, requester
    ):
        result = await use_case.execute(
            run_id=7, seat_id=101, board_station_id=12, exit_station_id=14, requester=requester
        )

        intent = command_repo.create.call_args.kwargs['intent']
        assert intent.segment == Segment(board_pos=1, exit_pos=3)
        assert intent.owner_key == requester.owner_key
        assert intent.order_id is None
        assert result.intent.id == 1
        assert result.renewed is False
        broadcaster.publish.assert_awaited_once_with(
            run_id=7, event=RunEventType.INTENTS_UPDATE
        )

    async def test_unknown_run(self, use_case, query_repo, command_repo, requester):
        query_repo.get_run.return_value = None

        with pytest.raises(NotFoundError):
            await use_case.execute(
                run_id=7, seat_id=101, board_station_id=11, exit_station_id=12, requester=requester
            )
        command_repo.create.assert_not_awaited()

    async def test_boarding_started(self, use_case, query_repo, run_info, requester):
        query_repo.get_run.return_value = attrs.evolve(run_info, boarding_started=True)

        with pytest.raises(ConflictError) as exc_info:
            await use_case.execute(
                run_id=7, seat_id=101, board_station_id=11, exit_station_id=12, requester=requester
            )
        assert exc_info.value.code == 'BOARDING_STARTED'

    async def test_invalid_segment(self, use_case, command_repo, requester):
        with pytest.raises(ValidationError):
            await use_case.execute(
                run_id=7, seat_id=101, board_station_id=13, exit_station_id=12, requester=requester
            )
        command_repo.create.assert_not_awaited()

    async def test_seat_not_on_run(self, use_case, requester):
        with pytest.raises(NotFoundError):
            await use_case.execute(
                run_id=7, seat_id=999, board_station_id=11, exit_station_id=12, requester=requester
            )

    async def test_driver_seat_rejected(self, use_case, requester):
        with pytest.raises(ValidationError):
            await use_case.execute(
                run_id=7, seat_id=102, board_station_id=11, exit_station_id=12, requester=requester
            )

    async def test_blocked_seat_rejected(self, use_case, requester):
        with pytest.raises(ConflictError) as exc_info:
            await use_case.execute(
                run_id=7, seat_id=103, board_station_id=11, exit_station_id=12, requester=requester
            )
        assert exc_info.value.code == 'SEAT_BLOCKED'

    async def test_store_conflict_propagates_without_broadcast(
        self, use_case, command_repo, broadcaster, requester
    ):
        command_repo.create.side_effect = ConflictError(
            'Seat is held', code='SEAT_HELD', hold_status='other'
        )

        with pytest.raises(ConflictError) as exc_info:
            await use_case.execute(
                run_id=7, seat_id=101, board_station_id=11, exit_station_id=12, requester=requester
            )

        assert exc_info.value.extra == {'hold_status': 'other'}
        broadcaster.publish.assert_not_awaited()


class TestReleaseIntent:
    @pytest.fixture
    def command_repo(self):
        repo = AsyncMock()
        repo.release = AsyncMock(return_value=1)
        return repo

    @pytest.fixture
    def use_case(self, command_repo, broadcaster):
        return ReleaseIntentUseCase(
            intent_command_repo=command_repo, run_event_broadcaster=broadcaster
        )

    async def test_release_own_hold(self, use_case, command_repo, broadcaster, requester):
        released = await use_case.execute(run_id=7, seat_id=101, requester=requester)

        assert released is True
        command_repo.release.assert_awaited_once_with(
            run_id=7, seat_id=101, owner_key=requester.owner_key
        )
        broadcaster.publish.assert_awaited_once()

    async def test_release_nothing_is_noop(self, use_case, command_repo, broadcaster, requester):
        command_repo.release.return_value = 0

        released = await use_case.execute(run_id=7, seat_id=101, requester=requester)

        assert released is False
        broadcaster.publish.assert_not_awaited()


class TestSetBoardingState:
    async def test_toggle_publishes_trip_update(self, broadcaster):
        repo = AsyncMock()
        repo.set_boarding_started = AsyncMock(return_value=True)
        use_case = SetBoardingStateUseCase(run_command_repo=repo, run_event_broadcaster=broadcaster)

        await use_case.execute(run_id=7, started=True)

        repo.set_boarding_started.assert_awaited_once_with(run_id=7, started=True)
        broadcaster.publish.assert_awaited_once_with(run_id=7, event=RunEventType.TRIP_UPDATE)

    async def test_unknown_run(self, broadcaster):
        repo = AsyncMock()
        repo.set_boarding_started = AsyncMock(return_value=False)
        use_case = SetBoardingStateUseCase(run_command_repo=repo, run_event_broadcaster=broadcaster)

        with pytest.raises(NotFoundError):
            await use_case.execute(run_id=7, started=True)
        broadcaster.publish.assert_not_awaited()
