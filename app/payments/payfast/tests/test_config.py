"""
Tests for PayFastSettings.from_django_settings().
"""

from payments.payfast import PAYFAST_NETWORKS, PayFastSettings
from payments.payfast.config import PRODUCTION_VALIDATE_URL, SANDBOX_VALIDATE_URL


class TestFromDjangoSettings:
    def test_reads_payfast_block(self, settings):
        settings.DEBUG = False
        settings.PAYFAST_MERCHANT_ID = "10000100"
        settings.PAYFAST_MERCHANT_KEY = "46f0cd694581a"
        settings.PAYFAST_PASSPHRASE = "jt7NOE43FZPn"
        settings.PAYFAST_SANDBOX = False
        settings.PAYFAST_VALIDATE_URL = "https://validate.example.com"
        settings.PAYFAST_VALIDATE_TIMEOUT = 7.5
        settings.PAYFAST_VALID_SOURCE_NETWORKS = ["203.0.113.0/24"]

        config = PayFastSettings.from_django_settings()

        assert config.merchant_id == "10000100"
        assert config.passphrase == "jt7NOE43FZPn"
        assert config.validate_url == "https://validate.example.com"
        assert config.validate_timeout == 7.5
        assert config.source_networks == ("203.0.113.0/24",)
        assert config.trust_any_source is False

    def test_validate_url_follows_sandbox_flag(self, settings):
        settings.PAYFAST_VALIDATE_URL = ""

        settings.PAYFAST_SANDBOX = True
        assert PayFastSettings.from_django_settings().validate_url == SANDBOX_VALIDATE_URL

        settings.PAYFAST_SANDBOX = False
        assert PayFastSettings.from_django_settings().validate_url == PRODUCTION_VALIDATE_URL

    def test_debug_trusts_any_source(self, settings):
        settings.DEBUG = True
        settings.PAYFAST_SANDBOX = False

        assert PayFastSettings.from_django_settings().trust_any_source is True

    def test_default_networks(self, settings):
        settings.PAYFAST_VALID_SOURCE_NETWORKS = []

        assert PayFastSettings.from_django_settings().source_networks == PAYFAST_NETWORKS
