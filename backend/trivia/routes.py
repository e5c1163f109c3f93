from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the emoji trivia server!'})

@main.route('/health')
def health():
    session = current_app.extensions['trivia']
    state = session.snapshot()
    return jsonify({
        'status': 'ok',
        'players': state['playerCount'],
        'gameState': state['gameState'],
    })

@main.route('/api/state')
def get_state():
    """Public session snapshot, the same payload clients receive as updateState."""
    return jsonify(current_app.extensions['trivia'].snapshot())
