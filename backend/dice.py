import secrets

from errors import ConfigurationError
from provably_fair import DIE_FACES, roll_die


# sorteio uniforme 1..6 com entropia do SO
class SystemDice:
    name = 'system'

    def roll(self, account) -> int:
        return secrets.randbelow(DIE_FACES) + 1


# rolagem derivada de server_seed, client_seed e nonce da conta
class ProvablyFairDice:
    name = 'provably_fair'

    def roll(self, account) -> int:
        return roll_die(account.server_seed, account.client_seed, account.nonce)


def make_dice(source: str):
    if source == SystemDice.name:
        return SystemDice()
    if source == ProvablyFairDice.name:
        return ProvablyFairDice()
    raise ConfigurationError(f'unknown dice source {source!r}')
