import pytest

from config import Settings, load_settings
from errors import ConfigurationError


def test_defaults():
    settings = load_settings({})
    assert settings == Settings()
    assert settings.starting_balance == 1000
    assert settings.win_multiplier == 5
    assert settings.dice_source == 'system'


def test_reads_environment():
    settings = load_settings({
        'DATABASE_URL': 'postgresql://u:p@db/dice',
        'STARTING_BALANCE': '500',
        'ROLL_DELAY_SECONDS': '0.5',
        'DICE_SOURCE': 'Provably_Fair',
        'CORS_ORIGINS': 'http://localhost:3000, https://dice.example',
        'LOG_LEVEL': 'debug',
        'PORT': '8080',
    })
    assert settings.database_url == 'postgresql://u:p@db/dice'
    assert settings.starting_balance == 500
    assert settings.roll_delay == 0.5
    assert settings.dice_source == 'provably_fair'
    assert settings.cors_origins == ('http://localhost:3000', 'https://dice.example')
    assert settings.log_level == 'DEBUG'
    assert settings.port == 8080


@pytest.mark.parametrize('env', [
    {'STARTING_BALANCE': 'lots'},
    {'STARTING_BALANCE': '-1'},
    {'WIN_MULTIPLIER': '0'},
    {'ROLL_DELAY_SECONDS': 'soon'},
    {'DICE_SOURCE': 'loaded'},
    {'LOG_LEVEL': 'verbose'},
])
def test_invalid_values(env):
    with pytest.raises(ConfigurationError):
        load_settings(env)


def test_log_level_is_normalised():
    assert load_settings({'LOG_LEVEL': ' warning '}).log_level == 'WARNING'
