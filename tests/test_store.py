from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from errors import StoreUnavailable
from game_logic import AccountState, BetRecord, Outcome
from models import init_db, make_engine, make_session_factory
from store import AccountStore, SqlAccountStore

WHEN = datetime(2024, 8, 7, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sql_store(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'store.db'}")
    init_db(engine)
    return SqlAccountStore(make_session_factory(engine))


def fresh(balance=1000, history=()):
    return AccountState(balance=balance, history=tuple(history), server_seed='seed',
                        server_seed_hash='hash', client_seed='client', nonce=len(history))


def test_load_without_account(sql_store):
    assert sql_store.load() is None


def test_create_then_load(sql_store):
    created = sql_store.create(fresh())
    assert created == fresh()
    assert sql_store.load() == fresh()


def test_save_round_trips_history(sql_store):
    sql_store.create(fresh())
    history = [
        BetRecord(100, 3, 3, Outcome.WIN, WHEN, nonce=0),
        BetRecord(50, 2, 6, Outcome.LOSE, WHEN, nonce=1),
    ]
    sql_store.save(fresh(balance=1450, history=history))

    loaded = sql_store.load()
    assert loaded.balance == 1450
    assert list(loaded.history) == history
    assert loaded.nonce == 2


def test_save_clears_history(sql_store):
    sql_store.create(fresh(history=[BetRecord(10, 1, 1, Outcome.WIN, WHEN)]))
    sql_store.save(fresh())
    assert sql_store.load().history == ()


def test_save_without_account(sql_store):
    with pytest.raises(StoreUnavailable):
        sql_store.save(fresh())


def test_database_errors_are_wrapped(sql_store):
    def broken():
        raise OperationalError('SELECT 1', {}, Exception('database is locked'))

    sql_store.SessionLocal = broken
    with pytest.raises(StoreUnavailable) as excinfo:
        sql_store.load()
    assert isinstance(excinfo.value.__cause__, OperationalError)


def test_reads_history_written_by_javascript_clients():
    record = BetRecord.from_dict({'amount': 50, 'number': 3, 'diceRoll': 2,
                                  'result': 'lose', 'date': '2024-08-07T12:34:56.789Z'})
    assert record.nonce == 0
    assert record.outcome is Outcome.LOSE
    assert record.timestamp.tzinfo is not None


def test_account_store_is_abstract():
    with pytest.raises(TypeError):
        AccountStore()

    class LoadOnly(AccountStore):
        def load(self):
            return None

    with pytest.raises(TypeError):
        LoadOnly()
