import hmac, hashlib, os, binascii
from math import floor

DIE_FACES = 6


# Gera seed do servidor e o hash publicado antes das apostas
def generate_server_seed():
    seed = binascii.hexlify(os.urandom(32)).decode()
    return seed, hash_server_seed(seed)


def hash_server_seed(seed: str) -> str:
    return hashlib.sha256(seed.encode()).hexdigest()


def derive_float_0_1(server_seed: str, client_seed: str, nonce: int, cursor: int = 0):
    # HMAC(server_seed, f"{client_seed}:{nonce}:{cursor}") -> bytes -> número [0,1)
    msg = f"{client_seed}:{nonce}:{cursor}".encode()
    digest = hmac.new(server_seed.encode(), msg, hashlib.sha256).digest()
    # usa 8 bytes para formar inteiro
    val = int.from_bytes(digest[:8], 'big')
    return val / (1 << 64)


def pick_index(n: int, **kw):
    r = derive_float_0_1(**kw)
    return floor(r * n)


def roll_die(server_seed: str, client_seed: str, nonce: int) -> int:
    return pick_index(DIE_FACES, server_seed=server_seed, client_seed=client_seed,
                      nonce=nonce, cursor=0) + 1


def verify_roll(server_seed: str, server_seed_hash: str, client_seed: str,
                nonce: int, rolled_number: int) -> bool:
    # só faz sentido depois do rotate-seed revelar o server_seed
    if not hmac.compare_digest(hash_server_seed(server_seed), server_seed_hash):
        return False
    return roll_die(server_seed, client_seed, nonce) == rolled_number
