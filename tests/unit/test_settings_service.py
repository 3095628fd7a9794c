"""
Unit tests for settings and currency helpers.
"""

import pytest
from decimal import Decimal

from cafepos.exceptions import ValidationError
from cafepos.services import settings_service
from cafepos.utils.formatters import convert_to_local, money_usd, parse_amount, whole_number, SQL_INT_MAX


class TestSettingsService:

    def test_default_exchange_rate_seeded(self, session):
        assert settings_service.get_settings(session) == {'exchangeRate': 89500}

    def test_update_exchange_rate(self, session):
        settings = settings_service.update_settings(session, {'exchangeRate': 90000})

        assert settings['exchangeRate'] == 90000
        assert settings_service.get_exchange_rate(session) == Decimal('90000')

    def test_other_keys_kept_as_text(self, session):
        settings = settings_service.update_settings(session, {'shopName': 'Bean There'})

        assert settings['shopName'] == 'Bean There'
        assert settings['exchangeRate'] == 89500

    @pytest.mark.parametrize('rate', [0, -5, 'abc', None])
    def test_invalid_exchange_rate(self, session, rate):
        with pytest.raises(ValidationError):
            settings_service.update_settings(session, {'exchangeRate': rate})

        assert settings_service.get_settings(session)['exchangeRate'] == 89500

    def test_empty_payload(self, session):
        with pytest.raises(ValidationError):
            settings_service.update_settings(session, {})


class TestFormatters:

    def test_convert_to_local(self):
        assert convert_to_local(2, 89500) == Decimal('179000')
        assert convert_to_local('1.5', 89500) == Decimal('134250')

    def test_money_usd(self):
        assert money_usd(13) == '$13.00'
        assert money_usd(Decimal('1500.5')) == '$1,500.50'

    def test_parse_amount(self):
        assert parse_amount('2.50', 'price') == Decimal('2.50')
        with pytest.raises(ValueError):
            parse_amount(-1, 'price')
        with pytest.raises(ValueError):
            parse_amount('', 'price')

    @pytest.mark.parametrize('value, expected', [
        (3, 3),
        ('3', 3),
        (' 12 ', 12),
        (2.0, 2),
        (-4, -4),
        (SQL_INT_MAX, SQL_INT_MAX),
    ])
    def test_whole_number(self, value, expected):
        assert whole_number(value) == expected

    @pytest.mark.parametrize('value', [2.7, '7.5', True, None, 'abc', '', 'nan', 'inf', SQL_INT_MAX + 1, 10 ** 30])
    def test_whole_number_rejects(self, value):
        assert whole_number(value) is None
