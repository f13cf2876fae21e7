import pytest
import sys
import os
from decimal import Decimal

import pandas as pd

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from storefront_pricing.config.settings import Settings, load_store_settings, parse_bool
from storefront_pricing.engine import InvalidConfiguration, PricingConfiguration


def write_settings(path, body):
    path.write_text(body, encoding='utf-8')
    return path


def test_values_cast_by_type(tmp_path):
    path = write_settings(tmp_path / 'settings.csv', (
        "key,value,type\n"
        "site_name, Ecommerce Store ,string\n"
        "prices_include_tax,true,boolean\n"
        "shipping_enabled,0,boolean\n"
        'allowed_countries,"[""US"", ""CA""]",json\n'
    ))

    values = load_store_settings(path)

    assert values['site_name'] == 'Ecommerce Store'
    assert values['prices_include_tax'] is True
    assert values['shipping_enabled'] is False
    assert values['allowed_countries'] == ['US', 'CA']


def test_type_column_optional(tmp_path):
    path = write_settings(tmp_path / 'settings.csv', "key,value\ntax_rate,8.75\n")
    assert load_store_settings(path) == {'tax_rate': '8.75'}


def test_later_rows_win_and_blank_keys_skipped(tmp_path):
    path = write_settings(tmp_path / 'settings.csv', (
        "key,value,type\n"
        "tax_rate,5,string\n"
        ",ignored,string\n"
        "tax_rate,7,string\n"
    ))
    assert load_store_settings(path) == {'tax_rate': '7'}


def test_bad_json_reports_row(tmp_path):
    path = write_settings(tmp_path / 'settings.csv', (
        "key,value,type\n"
        "tax_rate,5,string\n"
        "meta,{broken,json\n"
    ))
    with pytest.raises(ValueError, match="Row 3: setting 'meta'"):
        load_store_settings(path)


def test_missing_columns(tmp_path):
    path = write_settings(tmp_path / 'settings.csv', "name,setting\ntax_rate,5\n")
    with pytest.raises(ValueError, match="missing columns: key, value"):
        load_store_settings(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_store_settings(tmp_path / 'nope.csv')


def test_excel_workbook(tmp_path):
    path = tmp_path / 'store_settings.xlsx'
    pd.DataFrame([
        {'key': 'tax_rate', 'value': '20', 'type': 'string'},
        {'key': 'prices_include_tax', 'value': '1', 'type': 'boolean'},
    ]).to_excel(path, sheet_name='Settings', index=False)

    config = PricingConfiguration.from_store_settings(load_store_settings(path))

    assert config.tax_rate == Decimal('0.2')
    assert config.prices_include_tax is True


@pytest.mark.parametrize("value,expected", [
    ('true', True), ('1', True), ('Yes', True), ('on', True),
    ('false', False), ('0', False), ('', False), ('off', False),
])
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


def test_parse_bool_shared_with_models():
    from storefront_pricing.config import parsers
    from storefront_pricing.config import settings
    from storefront_pricing.engine import models

    assert settings.parse_bool is parsers.parse_bool
    assert models.TRUE_VALUES is parsers.TRUE_VALUES
    assert 'pd' not in vars(parsers)
    assert 'settings' not in vars(models)


class TestConfigurationFromStore:
    def test_defaults(self):
        config = PricingConfiguration.from_store_settings({})

        assert config.tax_rate == Decimal('0')
        assert config.prices_include_tax is False
        assert config.flat_shipping_cost == Decimal('10.00')
        assert config.free_shipping_threshold == Decimal('100.00')

    def test_percentage_converted_to_fraction(self):
        config = PricingConfiguration.from_store_settings({'tax_rate': '8.75'})
        assert config.tax_rate == Decimal('0.0875')

    def test_untyped_flag_parsed(self):
        config = PricingConfiguration.from_store_settings({'prices_include_tax': 'false'})
        assert config.prices_include_tax is False

    def test_blank_values_use_defaults(self):
        config = PricingConfiguration.from_store_settings({
            'tax_rate': '',
            'flat_shipping_cost': ' ',
            'free_shipping_threshold': '50',
        })
        assert config.tax_rate == Decimal('0')
        assert config.flat_shipping_cost == Decimal('10.00')
        assert config.free_shipping_threshold == Decimal('50')

    @pytest.mark.parametrize("values", [
        {'tax_rate': '-1'},
        {'tax_rate': 'lots'},
        {'free_shipping_threshold': '-100'},
    ])
    def test_invalid_values(self, values):
        with pytest.raises(InvalidConfiguration):
            PricingConfiguration.from_store_settings(values)

    @pytest.mark.parametrize("value,expected", [('0', False), ('off', False), ('yes', True)])
    def test_untyped_flag_text(self, value, expected):
        config = PricingConfiguration.from_store_settings({'prices_include_tax': value})
        assert config.prices_include_tax is expected

    def test_unreadable_flag_rejected(self):
        with pytest.raises(InvalidConfiguration):
            PricingConfiguration.from_store_settings({'prices_include_tax': 'sometimes'})


def test_settings_load_paths(tmp_path):
    settings = Settings.load(project_root=tmp_path)

    assert settings.project_root == tmp_path
    assert settings.store_settings == tmp_path / 'src' / 'storefront_pricing' / 'data' / 'store_settings.csv'
    assert settings.golden_cases == tmp_path / 'tests' / 'golden_cases.csv'


def test_settings_prefer_workbook(tmp_path):
    (tmp_path / 'store_settings.xlsx').touch()
    assert Settings.load(project_root=tmp_path).store_settings == tmp_path / 'store_settings.xlsx'


def test_bundled_store_settings():
    """The shipped settings export carries the storefront's 8.75% exclusive tax."""
    settings = Settings.load()
    config = PricingConfiguration.from_store_settings(load_store_settings(settings.store_settings))

    assert config.tax_rate == Decimal('0.0875')
    assert config.prices_include_tax is False
