class DiceBetError(Exception):
    pass


class StoreUnavailable(DiceBetError):
    # banco inacessível ou conta ausente quando deveria existir
    pass


class ConfigurationError(DiceBetError):
    pass
