import logging
import sys

_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'


def setup_logging(level: str = 'INFO') -> logging.Logger:
    # idempotente: chamar de novo só muda o nível
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    if not any(getattr(h, '_dicebet_handler', False) for h in logger.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler._dicebet_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(handler)

    # werkzeug loga cada request em INFO
    if logger.level > logging.DEBUG:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)
    return logger
