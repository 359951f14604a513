import logging
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config import Settings, load_settings
from dice import make_dice
from errors import ConfigurationError, StoreUnavailable
from game_logic import GameEngine, Rejected
from logging_utils import setup_logging
from models import init_db, make_engine, make_session_factory
from store import SqlAccountStore

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')


def _game() -> GameEngine:
    return current_app.extensions['dice_game']


def _whole_number(value, name):
    if value is None:
        raise ValueError(f'{name} is required')
    if isinstance(value, bool):
        raise ValueError(f'{name} must be a number')
    # inteiros passam direto, sem arredondar via float
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f'{name} must be a number')
    if not number.is_integer():
        raise ValueError(f'{name} must be a whole number')
    return int(number)


@api.post('/bet')
def bet():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'message': 'Invalid bet', 'reason': 'request body must be a JSON object'}), 400
    try:
        amount = _whole_number(data.get('amount'), 'amount')
        number = _whole_number(data.get('number'), 'number')
    except ValueError as exc:
        return jsonify({'message': 'Invalid bet', 'reason': str(exc)}), 400

    result = _game().place_bet(amount, number)
    if isinstance(result, Rejected):
        return jsonify({'message': 'Invalid bet', 'reason': result.reason}), 400

    return jsonify({
        'balance': result.balance,
        'diceRoll': result.rolled_number,
        'result': result.outcome.value,
    })


@api.get('/history')
def history():
    account = _game().get_history()
    return jsonify({
        'balance': account.balance,
        'history': [r.to_dict() for r in account.history],
    })


@api.post('/withdraw')
def withdraw():
    result = _game().withdraw()
    if isinstance(result, Rejected):
        return jsonify({'message': 'No wins to withdraw', 'reason': result.reason}), 400
    return jsonify({'balance': result.balance})


@api.post('/reset')
def reset():
    result = _game().reset()
    if isinstance(result, Rejected):
        return jsonify({'message': 'Cannot reset', 'reason': result.reason}), 400
    return jsonify({'balance': result.balance})


@api.get('/balance')
def get_balance():
    game = _game()
    account = game.get_history()
    return jsonify({'balance': account.balance, **game.fairness()})


@api.post('/rotate-seed')
def rotate_seed():
    rotation = _game().rotate_seed()
    return jsonify({
        'old_server_seed': rotation.old_server_seed,
        'old_server_seed_hash': rotation.old_server_seed_hash,
        'server_seed_hash': rotation.server_seed_hash,
        'client_seed': rotation.client_seed,
        'nonce': rotation.nonce,
    })


@api.get('/health')
def health():
    return jsonify({'status': 'ok'})


def handle_error(exc):
    if isinstance(exc, HTTPException):
        return jsonify({'message': exc.description}), exc.code
    # detalhes internos ficam só no log
    logger.exception('Unhandled error on %s %s', request.method, request.path)
    return jsonify({'message': 'Internal server error'}), 500


def build_engine(settings: Settings) -> GameEngine:
    db_engine = make_engine(settings.database_url)
    init_db(db_engine)
    store = SqlAccountStore(make_session_factory(db_engine))
    return GameEngine(store, make_dice(settings.dice_source),
                      starting_balance=settings.starting_balance,
                      win_multiplier=settings.win_multiplier,
                      roll_delay=settings.roll_delay,
                      client_seed=settings.client_seed)


def create_app(settings: Optional[Settings] = None, game: Optional[GameEngine] = None) -> Flask:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = Flask(__name__)
    CORS(app, origins=list(settings.cors_origins))

    try:
        if game is None:
            game = build_engine(settings)
        # cria a conta padrão no primeiro run
        game.ensure_account()
    except (StoreUnavailable, SQLAlchemyError) as exc:
        logger.critical('Could not initialize the account: %s', exc)
        raise ConfigurationError('account could not be initialized') from exc

    app.extensions['dice_game'] = game
    app.register_blueprint(api)
    app.register_error_handler(Exception, handle_error)
    return app


if __name__ == '__main__':
    settings = load_settings()
    create_app(settings).run(host=settings.host, port=settings.port, threaded=True)
