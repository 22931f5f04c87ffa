"""
Tests for webhook signature verification.

Tests: sign(), verify() determinism, single-field tampering, fail-closed behavior
"""
import hashlib

import pytest

from services.signature_service import SignatureVerifier
from tests.conftest import TEST_SERVER_KEY

ORDER_ID = "ORDER-1700000000000-42"


class TestSign:

    @pytest.mark.unit
    def test_matches_midtrans_formula(self, verifier):
        expected = hashlib.sha512(
            (ORDER_ID + "200" + "90000.00" + TEST_SERVER_KEY).encode()
        ).hexdigest()
        assert verifier.sign(ORDER_ID, "200", "90000.00") == expected

    @pytest.mark.unit
    def test_deterministic(self, verifier):
        assert verifier.sign(ORDER_ID, "200", "90000.00") == verifier.sign(ORDER_ID, "200", "90000.00")

    @pytest.mark.unit
    def test_numbers_use_plain_string_form(self, verifier):
        assert verifier.sign(ORDER_ID, 200, 90000) == verifier.sign(ORDER_ID, "200", "90000")

    @pytest.mark.unit
    def test_key_changes_digest(self):
        a = SignatureVerifier("key-a").sign(ORDER_ID, "200", "90000.00")
        b = SignatureVerifier("key-b").sign(ORDER_ID, "200", "90000.00")
        assert a != b


class TestVerify:

    @pytest.mark.unit
    def test_valid_signature(self, verifier):
        sig = verifier.sign(ORDER_ID, "200", "90000.00")
        assert verifier.verify(ORDER_ID, "200", "90000.00", sig) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("order_id,status_code,gross_amount", [
        ("ORDER-1700000000000-43", "200", "90000.00"),
        (ORDER_ID, "201", "90000.00"),
        (ORDER_ID, "200", "90000.01"),
        (ORDER_ID, "200", "90000"),
    ])
    def test_changing_any_field_fails(self, verifier, order_id, status_code, gross_amount):
        sig = verifier.sign(ORDER_ID, "200", "90000.00")
        assert verifier.verify(order_id, status_code, gross_amount, sig) is False

    @pytest.mark.unit
    def test_flipped_signature_character_fails(self, verifier):
        sig = verifier.sign(ORDER_ID, "200", "90000.00")
        tampered = ("0" if sig[-1] != "0" else "1")
        assert verifier.verify(ORDER_ID, "200", "90000.00", sig[:-1] + tampered) is False

    @pytest.mark.unit
    @pytest.mark.parametrize("signature", [None, "", 12345, ["abc"], "zz" * 64, "é" * 128])
    def test_malformed_signature_returns_false(self, verifier, signature):
        assert verifier.verify(ORDER_ID, "200", "90000.00", signature) is False

    @pytest.mark.unit
    @pytest.mark.parametrize("order_id,status_code,gross_amount", [
        (None, "200", "90000.00"),
        (ORDER_ID, None, "90000.00"),
        (ORDER_ID, "200", {"value": 90000}),
        (ORDER_ID, True, "90000.00"),
    ])
    def test_malformed_fields_return_false(self, verifier, order_id, status_code, gross_amount):
        sig = verifier.sign(ORDER_ID, "200", "90000.00")
        assert verifier.verify(order_id, status_code, gross_amount, sig) is False

    @pytest.mark.unit
    def test_numeric_fields_sign_like_their_json_text(self, verifier):
        """200 and 90000.0 decoded from JSON numbers sign as "200" and "90000"."""
        expected = hashlib.sha512(f"{ORDER_ID}20090000{TEST_SERVER_KEY}".encode()).hexdigest()
        assert verifier.verify(ORDER_ID, 200, 90000.0, expected) is True
        assert verifier.verify(ORDER_ID, "200", "90000", expected) is True

    @pytest.mark.unit
    def test_fractional_float_amount_keeps_decimals(self, verifier):
        assert verifier.sign(ORDER_ID, "200", 90000.5) == verifier.sign(ORDER_ID, "200", "90000.5")

    @pytest.mark.unit
    def test_missing_server_key_fails_closed(self):
        """An unconfigured verifier accepts nothing, not even its own digest."""
        verifier = SignatureVerifier("")
        sig = verifier.sign(ORDER_ID, "200", "90000.00")
        assert verifier.configured is False
        assert verifier.verify(ORDER_ID, "200", "90000.00", sig) is False
