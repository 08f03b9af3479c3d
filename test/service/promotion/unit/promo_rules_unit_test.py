"""
Promo code rule pipeline

Each scope rule is checked in isolation, then ordering (first failing rule wins) and
determinism of the whole evaluation.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal

import attrs
import pytest

from src.platform.exception.exceptions import ScopeError
from src.service.promotion.domain.entity.promo_code_entity import HourWindow, PromoCode
from src.service.promotion.domain.enum.discount_kind import DiscountKind
from src.service.promotion.domain.enum.promo_reason import PromoReason
from src.service.promotion.domain.promo_rules import (
    PromoContext,
    evaluate_promo,
    normalize_code,
    sunday_based_weekday,
)


NOW = datetime(2026, 6, 20, 10, 0, tzinfo=timezone.utc)
WEDNESDAY = date(2026, 7, 1)


@pytest.fixture
def promo() -> PromoCode:
    return PromoCode(
        id=9,
        code='SUMMER10',
        kind=DiscountKind.PERCENT,
        value_off=Decimal('10'),
        channels=frozenset({'online'}),
        valid_from=datetime(2026, 6, 1, tzinfo=timezone.utc),
        valid_to=datetime(2026, 8, 31, tzinfo=timezone.utc),
    )


@pytest.fixture
def context() -> PromoContext:
    return PromoContext(
        code=' summer10 ',
        now=NOW,
        channel='online',
        route_id=3,
        route_schedule_id=21,
        departure_time=time(7, 30),
        travel_date=WEDNESDAY,
        phone='+40722000111',
    )


class TestHelpers:
    def test_normalize_code(self):
        assert normalize_code('  summer10 ') == 'SUMMER10'
        assert normalize_code(None) == ''

    @pytest.mark.parametrize(
        'day, expected',
        [(date(2026, 7, 5), 0), (date(2026, 7, 1), 3), (date(2026, 7, 4), 6)],
    )
    def test_sunday_based_weekday(self, day, expected):
        assert sunday_based_weekday(day) == expected

    def test_hour_window_is_inclusive_at_minute_precision(self):
        window = HourWindow(start=time(6, 0), end=time(8, 0))

        assert window.contains(time(6, 0))
        assert window.contains(time(8, 0, 59))
        assert not window.contains(time(8, 1))


class TestEvaluatePromo:
    def test_valid_percent_code(self, promo, context):
        result = evaluate_promo(promo, context, base_amount=Decimal('150.00'))

        assert result.valid is True
        assert result.code == 'SUMMER10'
        assert result.discount_amount == Decimal('15.00')
        assert result.promo_code_id == 9
        assert result.reason is None

    def test_missing_code(self, promo, context):
        result = evaluate_promo(promo, attrs.evolve(context, code='  '), base_amount=Decimal('10'))

        assert result.reason == PromoReason.MISSING

    @pytest.mark.parametrize(
        'changes',
        [
            {'active': False},
            {'valid_from': datetime(2026, 7, 1, tzinfo=timezone.utc)},
            {'valid_to': datetime(2026, 6, 1, tzinfo=timezone.utc)},
        ],
    )
    def test_unavailable_code_reads_as_not_found(self, promo, context, changes):
        result = evaluate_promo(
            attrs.evolve(promo, **changes), context, base_amount=Decimal('100')
        )

        assert result.reason == PromoReason.NOT_FOUND

    def test_unknown_code(self, context):
        assert evaluate_promo(None, context, base_amount=Decimal('100')).reason == (
            PromoReason.NOT_FOUND
        )

    @pytest.mark.parametrize(
        'changes, reason',
        [
            ({'channels': frozenset({'agency'})}, PromoReason.CHANNEL),
            ({'channels': frozenset()}, PromoReason.CHANNEL),
            ({'route_ids': frozenset({4})}, PromoReason.ROUTE),
            ({'schedule_ids': frozenset({22})}, PromoReason.SCHEDULE),
            ({'hour_windows': (HourWindow(time(12, 0), time(18, 0)),)}, PromoReason.HOUR),
            ({'weekdays': frozenset({0, 6})}, PromoReason.WEEKDAY),
            ({'max_total_uses': 100, 'total_uses': 100}, PromoReason.TOTAL_USES),
            ({'max_uses_per_person': 1, 'phone_uses': 1}, PromoReason.PER_PERSON_USES),
            ({'min_price': Decimal('200')}, PromoReason.MIN_PRICE),
        ],
    )
    def test_each_scope_rule(self, promo, context, changes, reason):
        result = evaluate_promo(attrs.evolve(promo, **changes), context, base_amount=Decimal('150'))

        assert result.valid is False
        assert result.reason == reason
        assert result.discount_amount == Decimal('0.00')

    @pytest.mark.parametrize(
        'changes',
        [
            {'channels': frozenset({'online', 'agency'})},
            {'route_ids': frozenset({3})},
            {'schedule_ids': frozenset({21, 22})},
            {'hour_windows': (HourWindow(time(7, 0), time(7, 30)),)},
            {'weekdays': frozenset({3})},
            {'max_total_uses': 100, 'total_uses': 99},
            {'max_uses_per_person': 2, 'phone_uses': 1},
            {'min_price': Decimal('150')},
        ],
    )
    def test_scope_rules_pass_when_matched(self, promo, context, changes):
        result = evaluate_promo(attrs.evolve(promo, **changes), context, base_amount=Decimal('150'))

        assert result.valid is True

    def test_channel_defaults_to_online(self, promo, context):
        scoped = attrs.evolve(promo, channels=frozenset({'online'}))

        result = evaluate_promo(scoped, attrs.evolve(context, channel=''), base_amount=Decimal('50'))

        assert result.valid is True

    def test_per_person_limit_skipped_without_phone(self, promo, context):
        used_up = attrs.evolve(promo, max_uses_per_person=1, phone_uses=1)

        result = evaluate_promo(used_up, attrs.evolve(context, phone=None), base_amount=Decimal('50'))

        assert result.valid is True

    def test_first_failing_rule_wins(self, promo, context):
        failing_twice = attrs.evolve(
            promo, route_ids=frozenset({4}), min_price=Decimal('1000')
        )

        result = evaluate_promo(failing_twice, context, base_amount=Decimal('150'))

        assert result.reason == PromoReason.ROUTE

    def test_fixed_discount_capped_by_max_discount_and_base(self, promo, context):
        fixed = attrs.evolve(
            promo, kind=DiscountKind.FIXED, value_off=Decimal('80'), max_discount=Decimal('50')
        )

        assert evaluate_promo(fixed, context, base_amount=Decimal('150')).discount_amount == (
            Decimal('50.00')
        )
        assert evaluate_promo(fixed, context, base_amount=Decimal('30')).discount_amount == (
            Decimal('30.00')
        )

    def test_zero_base_means_no_discount(self, promo, context):
        result = evaluate_promo(promo, context, base_amount=Decimal('0'))

        assert result.reason == PromoReason.NO_DISCOUNT

    def test_percent_rounds_half_up(self, promo, context):
        result = evaluate_promo(promo, context, base_amount=Decimal('0.25'))

        assert result.discount_amount == Decimal('0.03')

    def test_deterministic(self, promo, context):
        results = {evaluate_promo(promo, context, base_amount=Decimal('99.99')) for _ in range(5)}

        assert len(results) == 1

    def test_raise_if_invalid(self, promo, context):
        result = evaluate_promo(
            attrs.evolve(promo, route_ids=frozenset({4})), context, base_amount=Decimal('10')
        )

        with pytest.raises(ScopeError) as exc_info:
            result.raise_if_invalid()
        assert exc_info.value.reason == 'route'
        assert exc_info.value.message == 'Route not in scope'
