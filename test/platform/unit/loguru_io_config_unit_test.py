import pytest

from src.platform.logging.loguru_io_config import access_log_level
from src.platform.logging.loguru_io_utils import mask_sensitive, should_mask_keyword


class TestAccessLogLevel:
    @pytest.mark.parametrize(
        'message, level',
        [
            ('127.0.0.1 - "POST /api/order HTTP/1.1" 201 0.031', 'SUCCESS'),
            ('127.0.0.1 - "GET /api/payment/return HTTP/1.1" 307', 'WARNING'),
            ('127.0.0.1 - "POST /api/run/7/intents HTTP/1.1" 409 0.004', 'ERROR'),
            ('127.0.0.1 - "POST /api/order HTTP/1.1" 502', 'CRITICAL'),
        ],
    )
    def test_level_follows_status(self, message, level):
        assert access_log_level(message) == level

    def test_ordinary_message(self):
        assert access_log_level('🧹 [REAPER] Started, interval=60s') is None


class TestMasking:
    def test_contact_fields_masked(self):
        assert should_mask_keyword('contact_phone', '+40722000111') == '********'
        assert should_mask_keyword('seat_id', 101) == 101

    def test_inline_secret_masked(self):
        assert mask_sensitive("password='hunter2'") == "password='********'"
