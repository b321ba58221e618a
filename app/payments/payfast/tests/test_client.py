"""
Tests for RemoteAttestationClient.

requests.post is mocked; no network access.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from payments.payfast import RemoteAttestationClient

VALIDATE_URL = "https://www.payfast.co.za/eng/query/validate"
FIELDS = {"pf_payment_id": "1089250", "payment_status": "COMPLETE", "signature": "abc"}


def mock_response(text: str, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.text = text
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Server Error"
        )
    return response


class TestConfirm:
    """Tests for RemoteAttestationClient.confirm()."""

    @patch("payments.payfast.client.requests.post")
    def test_valid_response_confirms(self, mock_post):
        mock_post.return_value = mock_response("VALID")

        assert RemoteAttestationClient(VALIDATE_URL).confirm(FIELDS) is True

    @patch("payments.payfast.client.requests.post")
    def test_posts_all_fields_form_encoded(self, mock_post):
        mock_post.return_value = mock_response("VALID")

        RemoteAttestationClient(VALIDATE_URL, timeout=5.0).confirm(FIELDS)

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == VALIDATE_URL
        assert kwargs["data"] == FIELDS
        assert kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
        assert kwargs["timeout"] == 5.0

    @pytest.mark.parametrize("body", ["INVALID", "", "valid", "VALID\n"])
    @patch("payments.payfast.client.requests.post")
    def test_anything_but_valid_rejects(self, mock_post, body):
        mock_post.return_value = mock_response(body)

        assert RemoteAttestationClient(VALIDATE_URL).confirm(FIELDS) is False

    @pytest.mark.parametrize(
        "error",
        [
            requests.exceptions.ConnectionError("refused"),
            requests.exceptions.Timeout("timed out"),
        ],
    )
    @patch("payments.payfast.client.requests.post")
    def test_transport_error_rejects(self, mock_post, error):
        mock_post.side_effect = error

        assert RemoteAttestationClient(VALIDATE_URL).confirm(FIELDS) is False

    @patch("payments.payfast.client.requests.post")
    def test_http_error_rejects(self, mock_post):
        mock_post.return_value = mock_response("VALID", status_code=503)

        assert RemoteAttestationClient(VALIDATE_URL).confirm(FIELDS) is False
