import logging
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Tuple, Union

from errors import StoreUnavailable
from provably_fair import DIE_FACES, generate_server_seed

logger = logging.getLogger(__name__)

# Motivos de rejeição (o cliente mostra o texto como veio)
REASON_AMOUNT_NOT_POSITIVE = "bet amount must be greater than zero"
REASON_AMOUNT_OVER_BALANCE = "cannot bet more than balance"
REASON_NUMBER_OUT_OF_RANGE = "number must be 1–6"
REASON_NO_WINS = "no wins to withdraw"
REASON_CANNOT_RESET = "cannot reset"


class Outcome(str, Enum):
    WIN = "win"
    LOSE = "lose"


def _parse_date(raw: str) -> datetime:
    # registros antigos vêm no formato do JS ("...Z")
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


@dataclass(frozen=True)
class BetRecord:
    amount: int
    chosen_number: int
    rolled_number: int
    outcome: Outcome
    timestamp: datetime
    nonce: int = 0

    def to_dict(self):
        return {
            "amount": self.amount,
            "number": self.chosen_number,
            "diceRoll": self.rolled_number,
            "result": self.outcome.value,
            "date": self.timestamp.isoformat(),
            "nonce": self.nonce,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            amount=data["amount"],
            chosen_number=data["number"],
            rolled_number=data["diceRoll"],
            outcome=Outcome(data["result"]),
            timestamp=_parse_date(data["date"]),
            nonce=data.get("nonce", 0),
        )


@dataclass(frozen=True)
class AccountState:
    balance: int
    history: Tuple[BetRecord, ...] = ()
    server_seed: str = ""
    server_seed_hash: str = ""
    client_seed: str = "client-seed"
    nonce: int = 0

    @property
    def has_win(self) -> bool:
        return any(r.outcome is Outcome.WIN for r in self.history)


@dataclass(frozen=True)
class Rejected:
    reason: str


@dataclass(frozen=True)
class BetResult:
    balance: int
    rolled_number: int
    outcome: Outcome
    record: BetRecord


@dataclass(frozen=True)
class BalanceResult:
    balance: int


@dataclass(frozen=True)
class SeedRotation:
    old_server_seed: str
    old_server_seed_hash: str
    server_seed_hash: str
    client_seed: str
    nonce: int = 0


def validate_bet(amount, chosen_number, balance) -> Optional[Rejected]:
    # ordem importa: a primeira falha vence
    if amount <= 0:
        return Rejected(REASON_AMOUNT_NOT_POSITIVE)
    if amount > balance:
        return Rejected(REASON_AMOUNT_OVER_BALANCE)
    if not 1 <= chosen_number <= DIE_FACES:
        return Rejected(REASON_NUMBER_OUT_OF_RANGE)
    return None


def apply_payout(balance: int, amount: int, outcome: Outcome, win_multiplier: int = 5) -> int:
    if outcome is Outcome.WIN:
        return balance + win_multiplier * amount
    return max(balance - amount, 0)


def _utcnow():
    return datetime.now(timezone.utc)


class GameEngine:
    def __init__(self, store, dice, clock: Optional[Callable[[], datetime]] = None,
                 sleep: Optional[Callable[[float], None]] = None,
                 starting_balance: int = 1000, win_multiplier: int = 5,
                 roll_delay: float = 3.0, client_seed: str = "client-seed"):
        self.store = store
        self.dice = dice
        self.clock = clock or _utcnow
        self.sleep = sleep or time.sleep
        self.starting_balance = starting_balance
        self.win_multiplier = win_multiplier
        self.roll_delay = roll_delay
        self.client_seed = client_seed
        # um único escritor por vez na conta
        self._lock = threading.Lock()

    def _new_account(self) -> AccountState:
        server_seed, server_seed_hash = generate_server_seed()
        return AccountState(balance=self.starting_balance, server_seed=server_seed,
                            server_seed_hash=server_seed_hash, client_seed=self.client_seed)

    def _require_account(self) -> AccountState:
        account = self.store.load()
        if account is None:
            raise StoreUnavailable("account not initialized")
        return account

    def ensure_account(self) -> AccountState:
        with self._lock:
            account = self.store.load()
            if account is None:
                account = self.store.create(self._new_account())
                logger.info("Default account created with balance %s", account.balance)
            else:
                logger.info("Account already exists with balance %s", account.balance)
            return account

    def place_bet(self, amount: int, chosen_number: int) -> Union[BetResult, Rejected]:
        with self._lock:
            account = self._require_account()
            rejected = validate_bet(amount, chosen_number, account.balance)
            if rejected:
                logger.debug("Bet rejected (amount=%s, number=%s): %s",
                             amount, chosen_number, rejected.reason)
                return rejected

            rolled = self.dice.roll(account)
            outcome = Outcome.WIN if rolled == chosen_number else Outcome.LOSE
            balance = apply_payout(account.balance, amount, outcome, self.win_multiplier)
            record = BetRecord(amount=amount, chosen_number=chosen_number, rolled_number=rolled,
                               outcome=outcome, timestamp=self.clock(), nonce=account.nonce)
            self.store.save(replace(account, balance=balance,
                                    history=account.history + (record,),
                                    nonce=account.nonce + 1))

        logger.info("Bet %s on %s rolled %s: %s, balance %s",
                    amount, chosen_number, rolled, outcome.value, balance)
        # animação do dado, fora do lock e depois de persistir
        self.present_roll()
        return BetResult(balance=balance, rolled_number=rolled, outcome=outcome, record=record)

    def present_roll(self):
        if self.roll_delay > 0:
            self.sleep(self.roll_delay)

    def get_history(self) -> AccountState:
        return self._require_account()

    def withdraw(self) -> Union[BalanceResult, Rejected]:
        with self._lock:
            account = self.store.load()
            if account is None or not account.has_win:
                return Rejected(REASON_NO_WINS)
            # nonce continua: o mesmo seed não pode repetir rolagens
            self.store.save(replace(account, balance=self.starting_balance, history=()))
        logger.info("Withdraw: balance reset to %s", self.starting_balance)
        return BalanceResult(self.starting_balance)

    def reset(self) -> Union[BalanceResult, Rejected]:
        with self._lock:
            account = self.store.load()
            if account is None:
                return Rejected(REASON_CANNOT_RESET)
            self.store.save(replace(account, balance=self.starting_balance, history=()))
        logger.info("Reset: balance set to %s", self.starting_balance)
        return BalanceResult(self.starting_balance)

    def rotate_seed(self) -> SeedRotation:
        # opcional: troca o server_seed e revela o antigo para verificação
        with self._lock:
            account = self._require_account()
            new_seed, new_hash = generate_server_seed()
            self.store.save(replace(account, server_seed=new_seed,
                                    server_seed_hash=new_hash, nonce=0))
        logger.info("Server seed rotated")
        return SeedRotation(old_server_seed=account.server_seed,
                            old_server_seed_hash=account.server_seed_hash,
                            server_seed_hash=new_hash, client_seed=account.client_seed)

    def fairness(self):
        account = self._require_account()
        return {
            "server_seed_hash": account.server_seed_hash,
            "client_seed": account.client_seed,
            "nonce": account.nonce,
            "dice": getattr(self.dice, "name", type(self.dice).__name__),
        }
