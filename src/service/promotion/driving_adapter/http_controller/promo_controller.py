from fastapi import APIRouter, Depends
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.promotion.app.query.quote_fare_use_case import (
    PassengerRequest,
    QuoteFareUseCase,
)
from src.service.promotion.driving_adapter.http_controller.schema.promo_schema import (
    PromoValidateRequest,
    PromoValidateResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/validate')
@Logger.io
async def validate_promo(
    request: PromoValidateRequest,
    use_case: QuoteFareUseCase = Depends(QuoteFareUseCase.depends),
) -> PromoValidateResponse:
    """An inapplicable code is a normal answer (valid=false with a reason), not an error."""
    with tracer.start_as_current_span('controller.validate_promo') as span:
        span.set_attribute('run.id', request.run_id)

        discount_type_ids = list(request.discount_type_ids)[: request.seat_count]
        discount_type_ids += [None] * (request.seat_count - len(discount_type_ids))

        run = await use_case.get_run(run_id=request.run_id)
        quote = await use_case.quote(
            run=run,
            board_station_id=request.board_station_id,
            exit_station_id=request.exit_station_id,
            passengers=[
                PassengerRequest(seat_id=index, discount_type_id=type_id)
                for index, type_id in enumerate(discount_type_ids, start=1)
            ],
            promo_code=request.code,
            phone=request.phone,
        )
        promo = quote.promo
        assert promo is not None
        return PromoValidateResponse(
            valid=promo.valid,
            code=promo.code,
            reason=str(promo.reason) if promo.reason else None,
            message=promo.message,
            promo_code_id=promo.promo_code_id,
            discount_amount=promo.discount_amount,
            combinable=promo.combinable,
            base_amount=quote.amount_after_types,
            amount_due=quote.amount_due,
        )
