import os

_BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Question bank: JSON array of {title, emojis, type}
    QUESTIONS_FILE = os.environ.get('QUESTIONS_FILE') or os.path.join(_BASE_DIR, 'trivia', 'data', 'questions.json')
    # Round timers (seconds)
    QUESTION_TIME_LIMIT_SEC = int(os.environ.get('QUESTION_TIME_LIMIT_SEC', '20'))
    REVEAL_DURATION_SEC = int(os.environ.get('REVEAL_DURATION_SEC', '5'))
    JOIN_GRACE_SEC = int(os.environ.get('JOIN_GRACE_SEC', '3'))
    # Scoring
    POINTS_CORRECT = int(os.environ.get('POINTS_CORRECT', '100'))
    POINTS_TIME_BONUS_PER_SEC = int(os.environ.get('POINTS_TIME_BONUS_PER_SEC', '5'))
    # Nicknames and chat
    NICKNAME_MIN_LEN = int(os.environ.get('NICKNAME_MIN_LEN', '2'))
    NICKNAME_MAX_LEN = int(os.environ.get('NICKNAME_MAX_LEN', '15'))
    CHAT_MAX_LEN = int(os.environ.get('CHAT_MAX_LEN', '100'))
    # Inbound size limits: serialized payload (chars) and raw Socket.IO frame (bytes)
    MAX_PAYLOAD_CHARS = int(os.environ.get('MAX_PAYLOAD_CHARS', '2048'))
    MAX_FRAME_BYTES = int(os.environ.get('MAX_FRAME_BYTES', '16384'))
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
        ).split(',') if o.strip()
    ]
    HOST = os.environ.get('HOST', '127.0.0.1')
    PORT = int(os.environ.get('PORT', '3000'))
