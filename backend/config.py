import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///stuffhappens.sqlite'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', '12'))
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173').split(',')
    # Round timer (seconds), enforced against the server clock
    ROUND_TIME_LIMIT_SEC = int(os.environ.get('ROUND_TIME_LIMIT_SEC', '30'))
    # Win/loss thresholds
    INITIAL_HAND_SIZE = int(os.environ.get('INITIAL_HAND_SIZE', '3'))
    CARDS_TO_WIN = int(os.environ.get('CARDS_TO_WIN', '6'))
    MAX_WRONG_GUESSES = int(os.environ.get('MAX_WRONG_GUESSES', '3'))
    DEFAULT_THEME = os.environ.get('DEFAULT_THEME', 'university_life')
    THEMES = ('university_life', 'travel', 'sports', 'love_life', 'work_life')
    # Playing games older than this are removed by cleanup-games
    STALE_GAME_DAYS = int(os.environ.get('STALE_GAME_DAYS', '7'))
    # Optional: background cleanup interval (sec). 0 disables.
    CLEANUP_INTERVAL_SEC = int(os.environ.get('CLEANUP_INTERVAL_SEC', '0'))
