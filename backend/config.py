import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from errors import ConfigurationError

DICE_SOURCES = ('system', 'provably_fair')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass(frozen=True)
class Settings:
    database_url: str = 'sqlite:///database.db'
    starting_balance: int = 1000
    win_multiplier: int = 5
    roll_delay: float = 3.0
    dice_source: str = 'system'
    client_seed: str = 'client-seed'
    cors_origins: Tuple[str, ...] = field(default=('*',))
    log_level: str = 'INFO'
    host: str = '0.0.0.0'
    port: int = 5001


def _int(env: Mapping[str, str], key: str, default: int, minimum: int = 0) -> int:
    raw = env.get(key)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f'{key} must be an integer, got {raw!r}')
    if value < minimum:
        raise ConfigurationError(f'{key} must be >= {minimum}, got {value}')
    return value


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == '':
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f'{key} must be a number, got {raw!r}')
    if value < 0:
        raise ConfigurationError(f'{key} must be >= 0, got {value}')
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    if env is None:
        # .env só é lido quando usamos o ambiente real
        load_dotenv()
        env = os.environ

    dice_source = env.get('DICE_SOURCE', 'system').strip().lower()
    if dice_source not in DICE_SOURCES:
        raise ConfigurationError(
            f'DICE_SOURCE must be one of {", ".join(DICE_SOURCES)}, got {dice_source!r}')

    log_level = env.get('LOG_LEVEL', Settings.log_level).strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(
            f'LOG_LEVEL must be one of {", ".join(LOG_LEVELS)}, got {log_level!r}')

    origins = tuple(o.strip() for o in env.get('CORS_ORIGINS', '*').split(',') if o.strip())

    return Settings(
        database_url=env.get('DATABASE_URL', Settings.database_url),
        starting_balance=_int(env, 'STARTING_BALANCE', Settings.starting_balance),
        win_multiplier=_int(env, 'WIN_MULTIPLIER', Settings.win_multiplier, minimum=1),
        roll_delay=_float(env, 'ROLL_DELAY_SECONDS', Settings.roll_delay),
        dice_source=dice_source,
        client_seed=env.get('CLIENT_SEED', Settings.client_seed),
        cors_origins=origins or ('*',),
        log_level=log_level,
        host=env.get('HOST', Settings.host),
        port=_int(env, 'PORT', Settings.port, minimum=1),
    )
