from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from errors import StoreUnavailable
from game_logic import AccountState, BetRecord
from models import Account


# acesso de leitura/escrita à conta única
class AccountStore(ABC):
    @abstractmethod
    def load(self) -> Optional[AccountState]:
        pass

    @abstractmethod
    def create(self, state: AccountState) -> AccountState:
        pass

    @abstractmethod
    def save(self, state: AccountState) -> None:
        pass


def _to_state(row: Account) -> AccountState:
    return AccountState(
        balance=row.balance,
        history=tuple(BetRecord.from_dict(entry) for entry in (row.history or [])),
        server_seed=row.server_seed,
        server_seed_hash=row.server_seed_hash,
        client_seed=row.client_seed,
        nonce=row.nonce or 0,
    )


def _apply(row: Account, state: AccountState):
    row.balance = state.balance
    # lista nova para o SQLAlchemy detectar a mudança no JSON
    row.history = [r.to_dict() for r in state.history]
    row.server_seed = state.server_seed
    row.server_seed_hash = state.server_seed_hash
    row.client_seed = state.client_seed
    row.nonce = state.nonce


class SqlAccountStore(AccountStore):
    def __init__(self, session_factory, account_id: int = 1):
        self.SessionLocal = session_factory
        self.account_id = account_id

    def load(self) -> Optional[AccountState]:
        try:
            with self.SessionLocal() as db:
                row = db.query(Account).filter_by(id=self.account_id).first()
                return _to_state(row) if row else None
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"could not load account {self.account_id}") from exc

    def create(self, state: AccountState) -> AccountState:
        try:
            with self.SessionLocal() as db:
                row = Account(id=self.account_id)
                _apply(row, state)
                db.add(row)
                db.commit()
                return _to_state(row)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"could not create account {self.account_id}") from exc

    def save(self, state: AccountState) -> None:
        try:
            with self.SessionLocal() as db:
                # FOR UPDATE é ignorado no SQLite
                row = (db.query(Account).filter_by(id=self.account_id)
                       .with_for_update().first())
                if not row:
                    raise StoreUnavailable(f"account {self.account_id} not found")
                _apply(row, state)
                db.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"could not save account {self.account_id}") from exc
