from datetime import datetime, timezone

import pytest

from app import create_app
from config import Settings
from game_logic import AccountState, GameEngine
from store import AccountStore

FIXED_NOW = datetime(2024, 8, 7, 12, 34, 56, tzinfo=timezone.utc)


class MemoryStore(AccountStore):
    def __init__(self, state=None):
        self.state = state
        self.saves = 0

    def load(self):
        return self.state

    def create(self, state):
        self.state = state
        return state

    def save(self, state):
        self.saves += 1
        self.state = state


class ScriptedDice:
    name = 'scripted'

    def __init__(self, *rolls):
        self.rolls = list(rolls)

    def roll(self, account):
        return self.rolls.pop(0)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def dice():
    return ScriptedDice()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def engine(store, dice, sleeps):
    game = GameEngine(store, dice, clock=lambda: FIXED_NOW, sleep=sleeps.append, roll_delay=3.0)
    game.ensure_account()
    return game


def with_balance(engine, balance, history=()):
    engine.store.state = AccountState(balance=balance, history=tuple(history),
                                      server_seed='s', server_seed_hash='h')


@pytest.fixture
def settings(tmp_path):
    return Settings(database_url=f"sqlite:///{tmp_path / 'test.db'}", roll_delay=0,
                    log_level='WARNING')


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return app.test_client()
