from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import atexit
import click
from config import Config

socketio = SocketIO(async_mode='threading')

def create_app(config_class=Config, scheduler=None, clock=None):
    """Build the Flask app and its single game session.

    ``scheduler`` and ``clock`` default to the Socket.IO background-task
    runner and ``time.monotonic``; tests pass deterministic stand-ins.
    A missing or empty question bank raises ``QuestionBankError`` here so the
    server never starts without questions.
    """
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(
        flask_app,
        cors_allowed_origins=allowed_origins,
        max_http_buffer_size=flask_app.config.get('MAX_FRAME_BYTES', 16384),
    )

    from trivia.services.game import GameSession, QuestionBank
    from trivia.transport import SocketIOTransport

    bank = QuestionBank.from_file(flask_app.config['QUESTIONS_FILE'])
    flask_app.logger.info(f"Loaded {len(bank)} trivia items.")
    session_kwargs = {'clock': clock} if clock is not None else {}
    session = GameSession(
        bank,
        SocketIOTransport(socketio, namespace='/ws', logger=flask_app.logger),
        scheduler or socketio,
        config=flask_app.config,
        logger=flask_app.logger,
        **session_kwargs,
    )
    flask_app.extensions['trivia'] = session
    if not flask_app.config.get('TESTING'):
        atexit.register(session.shutdown)

    # Import and register blueprints here
    from trivia.routes import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from trivia.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('check-questions')
    @click.option('--path', default=None, help='Question file to check (defaults to QUESTIONS_FILE).')
    def check_questions_command(path):
        """Loads the question bank and reports how many items it holds."""
        from trivia.errors import QuestionBankError
        target = path or flask_app.config['QUESTIONS_FILE']
        try:
            checked = QuestionBank.from_file(target)
        except QuestionBankError as exc:
            raise click.ClickException(exc.message)
        click.echo(f'{target}: {len(checked)} questions OK')

    flask_app.cli.add_command(check_questions_command)

    return flask_app
