import os

from dotenv import load_dotenv

load_dotenv()

_ROOT = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")

    # Defaults to a sqlite file under instance/ next to this module
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL", f"sqlite:///{os.path.join(_ROOT, 'instance', 'whiteboard.db')}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = os.getenv("SQLALCHEMY_ECHO", "false").lower() == "true"

    # Uploaded images live in redis
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Comma-separated list of origins; '*' allows all
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # How many fresh room codes to try before giving up on a collision streak
    ROOM_ID_ATTEMPTS = int(os.getenv("ROOM_ID_ATTEMPTS", "5"))
