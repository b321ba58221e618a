"""
Tests for ITNValidator.

Collaborators are mocks so each gate can be forced independently; the
assertions check gate order and that later gates are not consulted
after a rejection.
"""

from unittest.mock import MagicMock

import pytest

from payments.payfast import ITNNotification, ITNRejectionReason, ITNValidator

MERCHANT_ID = "10000100"


@pytest.fixture
def notification():
    return ITNNotification(
        fields={
            "merchant_id": MERCHANT_ID,
            "pf_payment_id": "1089250",
            "payment_status": "COMPLETE",
            "signature": "abc",
        }
    )


@pytest.fixture
def codec():
    codec = MagicMock()
    codec.verify.return_value = True
    return codec


@pytest.fixture
def authenticator():
    authenticator = MagicMock()
    authenticator.is_allowed.return_value = True
    return authenticator


@pytest.fixture
def remote_client():
    client = MagicMock()
    client.confirm.return_value = True
    return client


def make_validator(codec, authenticator, remote_client, sandbox=False):
    return ITNValidator(
        codec=codec,
        authenticator=authenticator,
        remote_client=remote_client,
        merchant_id=MERCHANT_ID,
        sandbox=sandbox,
    )


class TestITNValidator:
    """Tests for ITNValidator.validate()."""

    def test_all_gates_pass(self, notification, codec, authenticator, remote_client):
        result = make_validator(codec, authenticator, remote_client).validate(
            notification, "197.97.145.150"
        )

        assert result.accepted is True
        assert result.reason is None
        codec.verify.assert_called_once_with(notification.fields)
        authenticator.is_allowed.assert_called_once_with("197.97.145.150")
        remote_client.confirm.assert_called_once_with(notification.as_dict())

    def test_bad_signature_stops_first(self, notification, codec, authenticator, remote_client):
        codec.verify.return_value = False
        authenticator.is_allowed.return_value = False

        result = make_validator(codec, authenticator, remote_client).validate(notification, "8.8.8.8")

        assert not result
        assert result.reason == ITNRejectionReason.INVALID_SIGNATURE
        authenticator.is_allowed.assert_not_called()
        remote_client.confirm.assert_not_called()

    def test_bad_source_checked_before_merchant(self, codec, authenticator, remote_client):
        authenticator.is_allowed.return_value = False
        notification = ITNNotification(fields={"merchant_id": "other", "signature": "abc"})

        result = make_validator(codec, authenticator, remote_client).validate(notification, "8.8.8.8")

        assert result.reason == ITNRejectionReason.INVALID_SOURCE
        remote_client.confirm.assert_not_called()

    def test_merchant_mismatch(self, codec, authenticator, remote_client):
        notification = ITNNotification(fields={"merchant_id": "99999999", "signature": "abc"})

        result = make_validator(codec, authenticator, remote_client).validate(notification, "127.0.0.1")

        assert result.reason == ITNRejectionReason.MERCHANT_MISMATCH
        remote_client.confirm.assert_not_called()

    def test_missing_merchant_id_is_a_mismatch(self, codec, authenticator, remote_client):
        notification = ITNNotification(fields={"signature": "abc"})

        result = make_validator(codec, authenticator, remote_client).validate(notification, "127.0.0.1")

        assert result.reason == ITNRejectionReason.MERCHANT_MISMATCH

    def test_remote_validation_failure(self, notification, codec, authenticator, remote_client):
        remote_client.confirm.return_value = False

        result = make_validator(codec, authenticator, remote_client).validate(notification, "127.0.0.1")

        assert result.reason == ITNRejectionReason.REMOTE_VALIDATION_FAILED

    def test_sandbox_skips_remote_validation(self, notification, codec, authenticator, remote_client):
        remote_client.confirm.return_value = False

        result = make_validator(codec, authenticator, remote_client, sandbox=True).validate(
            notification, "127.0.0.1"
        )

        assert result.accepted is True
        remote_client.confirm.assert_not_called()

    def test_rejection_is_logged_as_warning(self, notification, codec, authenticator, remote_client, caplog):
        codec.verify.return_value = False

        with caplog.at_level("WARNING", logger="payments.payfast.validator"):
            make_validator(codec, authenticator, remote_client).validate(notification, "8.8.8.8")

        [record] = caplog.records
        assert record.levelname == "WARNING"
        assert record.reason == "invalid_signature"
        assert record.pf_payment_id == "1089250"
