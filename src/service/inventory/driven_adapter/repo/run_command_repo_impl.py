from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_run_command_repo import IRunCommandRepo


class RunCommandRepoImpl(IRunCommandRepo):
    @Logger.io
    async def set_boarding_started(self, *, run_id: int, started: bool) -> bool:
        async with (await get_asyncpg_pool()).acquire() as conn:
            updated = await conn.fetchval(
                'UPDATE run SET boarding_started = $2 WHERE id = $1 RETURNING id',
                run_id,
                started,
            )
        return updated is not None
