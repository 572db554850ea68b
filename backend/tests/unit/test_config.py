"""Unit tests for environment-driven settings and the clinic clock."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from wellness_clinic.core import config


@pytest.mark.unit
class TestWellnessTaxRate:
    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("WELLNESS_TAX_RATE", raising=False)

        assert config.get_wellness_tax_rate() == Decimal("0.08")

    def test_reads_valid_rate(self, monkeypatch):
        monkeypatch.setenv("WELLNESS_TAX_RATE", "0.2")

        assert config.get_wellness_tax_rate() == Decimal("0.2")

    @pytest.mark.parametrize(
        "raw", ["NaN", "sNaN", "Infinity", "-Infinity", "1", "-0.01", "eight"]
    )
    def test_unusable_rate_falls_back_to_default(self, monkeypatch, raw):
        monkeypatch.setenv("WELLNESS_TAX_RATE", raw)

        assert config.get_wellness_tax_rate() == config.DEFAULT_WELLNESS_TAX_RATE


@pytest.mark.unit
class TestClinicClock:
    def test_local_now_follows_app_timezone(self, monkeypatch):
        monkeypatch.setattr(config, "APP_TZ", timezone(timedelta(hours=14)))

        expected = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(hours=14)
        now = config.local_now()

        assert now.tzinfo is None
        assert abs(now - expected) < timedelta(minutes=1)

    def test_local_today_is_date_of_local_now(self, monkeypatch):
        monkeypatch.setattr(config, "APP_TZ", timezone(timedelta(hours=-11)))

        before = config.local_now().date()
        today = config.local_today()

        assert today in (before, before + timedelta(days=1))
