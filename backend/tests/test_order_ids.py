"""
Tests for order id generation strategies.
"""
import re

import pytest

from services.order_ids import (
    SecureOrderIdGenerator,
    TimestampOrderIdGenerator,
    make_order_id_generator,
)


class TestTimestampOrderIds:

    @pytest.mark.unit
    def test_format(self):
        generate = TimestampOrderIdGenerator(clock=lambda: 1700000000.123)
        order_id = generate()
        assert re.fullmatch(r"ORDER-1700000000123-\d{1,6}", order_id)

    @pytest.mark.unit
    def test_ids_differ_within_same_millisecond(self):
        generate = TimestampOrderIdGenerator(clock=lambda: 1700000000.0)
        ids = {generate() for _ in range(50)}
        # 50 draws from 1e6 suffixes; a collision here is astronomically unlikely
        assert len(ids) == 50


class TestSecureOrderIds:

    @pytest.mark.unit
    def test_format_and_uniqueness(self):
        generate = SecureOrderIdGenerator()
        ids = {generate() for _ in range(100)}
        assert len(ids) == 100
        for order_id in ids:
            assert re.fullmatch(r"ORDER-[A-Za-z0-9_-]{22}", order_id)


class TestFactory:

    @pytest.mark.unit
    def test_known_strategies(self):
        assert isinstance(make_order_id_generator("timestamp"), TimestampOrderIdGenerator)
        assert isinstance(make_order_id_generator(" Secure "), SecureOrderIdGenerator)

    @pytest.mark.unit
    def test_unknown_strategy_raises(self):
        with pytest.raises(ValueError, match="ORDER_ID_STRATEGY"):
            make_order_id_generator("uuid7")
