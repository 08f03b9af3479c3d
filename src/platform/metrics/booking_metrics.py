from prometheus_client import Counter, Histogram


class BookingMetrics:
    """
    Booking subsystem metrics collector

    Tracks hold outcomes, order transitions, payment gateway latency and reaper cycles.
    """

    def __init__(self) -> None:
        # ========== Seat Holds ==========
        self.intent_requests = Counter(
            'seat_intent_requests_total',
            'Seat intent create/release requests',
            ['action', 'result'],  # result: created/renewed/seat_held/seat_taken/released
        )

        # ========== Orders ==========
        self.order_transitions = Counter(
            'order_transitions_total',
            'Order state transitions',
            ['status'],
        )

        self.payment_gateway_duration = Histogram(
            'payment_gateway_duration_seconds',
            'Payment gateway call duration',
            ['operation', 'result'],
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 15.0],
        )

        # ========== Reaper ==========
        self.reaper_cycles = Counter(
            'expiry_reaper_cycles_total',
            'Expiry reaper cycles',
            ['result'],  # ran/skipped/error
        )

        self.reaper_removed = Counter(
            'expiry_reaper_removed_total',
            'Rows expired or purged by the reaper',
            ['kind'],  # expired_orders/expired_intents/orphan_intents
        )

    # ========== Helper Methods ==========

    def record_intent(self, *, action: str, result: str) -> None:
        self.intent_requests.labels(action=action, result=result).inc()

    def record_order_transition(self, *, status: str, count: int = 1) -> None:
        self.order_transitions.labels(status=status).inc(count)

    def record_gateway_call(self, *, operation: str, result: str, duration: float) -> None:
        self.payment_gateway_duration.labels(operation=operation, result=result).observe(duration)

    def record_reaper_cycle(
        self,
        *,
        result: str,
        expired_orders: int = 0,
        expired_intents: int = 0,
        orphan_intents: int = 0,
    ) -> None:
        self.reaper_cycles.labels(result=result).inc()
        self.reaper_removed.labels(kind='expired_orders').inc(expired_orders)
        self.reaper_removed.labels(kind='expired_intents').inc(expired_intents)
        self.reaper_removed.labels(kind='orphan_intents').inc(orphan_intents)


# Global metrics instance
metrics = BookingMetrics()
