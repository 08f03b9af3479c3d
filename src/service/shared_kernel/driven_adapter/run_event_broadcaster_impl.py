"""
Redis Pub/Sub Run Event Broadcaster

Cross-instance refresh hints for seat maps.
Channel format: run_events:{run_id}
"""

from collections.abc import AsyncGenerator
import time
from typing import Any

import orjson

from src.platform.logging.loguru_io import Logger
from src.platform.state.redis_client import RedisClient
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType


def run_channel(run_id: int) -> str:
    return f'run_events:{run_id}'


class RunEventBroadcasterImpl(IRunEventBroadcaster):
    """
    Redis pub/sub broadcaster for run rooms.

    Publishing is fire-and-forget: a Redis outage degrades seat maps to polling,
    it never fails the hold or order operation that triggered it.
    """

    def __init__(self, *, redis_client: RedisClient) -> None:
        self._redis_client = redis_client

    async def publish(self, *, run_id: int, event: RunEventType) -> None:
        channel = run_channel(run_id)
        try:
            message = orjson.dumps(
                {'event': str(event), 'run_id': run_id, 'timestamp': time.time()}
            )
            subscribers = await self._redis_client.get_client().publish(channel, message)
            Logger.base.debug(f'📡 [NOTIFY] {event} → {channel}: subscribers={subscribers}')
        except Exception as e:
            Logger.base.warning(f'⚠️ [NOTIFY] Publish failed for {channel}: {e}')

    async def subscribe(self, *, run_id: int) -> AsyncGenerator[dict[str, Any], None]:
        channel = run_channel(run_id)
        pubsub_client = await self._redis_client.create_pubsub_client()
        pubsub = pubsub_client.pubsub()

        try:
            await pubsub.subscribe(channel)
            Logger.base.info(f'📡 [NOTIFY] Joined room: {channel}')

            async for message in pubsub.listen():
                if message['type'] != 'message':
                    continue
                data = message['data']
                try:
                    yield orjson.loads(data if isinstance(data, bytes) else data.encode())
                except orjson.JSONDecodeError as e:
                    Logger.base.error(f'❌ [NOTIFY] Failed to decode message on {channel}: {e}')

        finally:
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()
            await pubsub_client.aclose()
            Logger.base.info(f'📡 [NOTIFY] Left room: {channel}')
