from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_run_command_repo import IRunCommandRepo
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType


class SetBoardingStateUseCase:
    """Operator toggle: once boarding starts, new holds and orders are refused"""

    def __init__(
        self,
        *,
        run_command_repo: IRunCommandRepo,
        run_event_broadcaster: IRunEventBroadcaster,
    ) -> None:
        self.run_command_repo = run_command_repo
        self.run_event_broadcaster = run_event_broadcaster

    @classmethod
    @inject
    def depends(
        cls,
        run_command_repo: IRunCommandRepo = Depends(Provide[Container.run_command_repo]),
        run_event_broadcaster: IRunEventBroadcaster = Depends(
            Provide[Container.run_event_broadcaster]
        ),
    ) -> Self:
        return cls(run_command_repo=run_command_repo, run_event_broadcaster=run_event_broadcaster)

    @Logger.io
    async def execute(self, *, run_id: int, started: bool) -> None:
        updated = await self.run_command_repo.set_boarding_started(run_id=run_id, started=started)
        if not updated:
            raise NotFoundError('Run not found')

        Logger.base.info(f'🚌 [RUN] run={run_id} boarding_started={started}')
        await self.run_event_broadcaster.publish(run_id=run_id, event=RunEventType.TRIP_UPDATE)
