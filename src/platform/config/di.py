"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings, settings
from src.platform.database.orm_db_setting import Database
from src.platform.state.advisory_lock import AdvisoryLock
from src.platform.state.redis_client import redis_client
from src.service.inventory.driven_adapter.repo.intent_command_repo_impl import (
    IntentCommandRepoImpl,
)
from src.service.inventory.driven_adapter.repo.run_command_repo_impl import RunCommandRepoImpl
from src.service.inventory.driven_adapter.repo.seat_inventory_query_repo_impl import (
    SeatInventoryQueryRepoImpl,
)
from src.service.ordering.driven_adapter.payment.ipay_gateway_impl import IPayGatewayImpl
from src.service.ordering.driven_adapter.repo.expiry_reaper_repo_impl import (
    ExpiryReaperRepoImpl,
)
from src.service.ordering.driven_adapter.repo.order_command_repo_impl import (
    OrderCommandRepoImpl,
)
from src.service.promotion.driven_adapter.repo.fare_query_repo_impl import FareQueryRepoImpl
from src.service.shared_kernel.driven_adapter.run_event_broadcaster_impl import (
    RunEventBroadcasterImpl,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (ORM sessions for catalog/promotion reads)
    database = providers.Singleton(Database)

    # Run rooms (Redis Pub/Sub)
    run_event_broadcaster = providers.Singleton(RunEventBroadcasterImpl, redis_client=redis_client)

    # Inventory (asyncpg hot path)
    seat_inventory_query_repo = providers.Singleton(SeatInventoryQueryRepoImpl)
    intent_command_repo = providers.Singleton(IntentCommandRepoImpl)
    run_command_repo = providers.Singleton(RunCommandRepoImpl)

    # Promotion
    fare_query_repo = providers.Singleton(
        FareQueryRepoImpl, session_factory=database.provided.session
    )

    # Ordering (order writes share the intent transaction helpers)
    order_command_repo = providers.Singleton(
        OrderCommandRepoImpl, intent_command_repo=intent_command_repo
    )
    payment_gateway = providers.Singleton(
        IPayGatewayImpl,
        base_url=settings.PAYMENT_BASE_URL,
        user=settings.PAYMENT_USER,
        password=settings.PAYMENT_PASSWORD.get_secret_value(),
        return_url=settings.PAYMENT_RETURN_URL,
        currency_numeric=settings.PAYMENT_CURRENCY_NUMERIC,
        timeout=settings.PAYMENT_TIMEOUT_SECONDS,
    )

    # Expiry reaper (one instance per cluster via advisory lock)
    reaper_lock = providers.Singleton(AdvisoryLock, name=settings.REAPER_LOCK_NAME)
    expiry_reaper_repo = providers.Singleton(ExpiryReaperRepoImpl, lock=reaper_lock)


container = Container()


def cleanup() -> None:
    container.reset_singletons()
