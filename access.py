"""Password gate for room entry and deletion."""
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db
from models import RoomSettings


def hash_password(password):
    return generate_password_hash(str(password))


def password_matches(password_hash, candidate):
    if candidate is None:
        return False
    return check_password_hash(password_hash, str(candidate))


def room_password_hash(room_id):
    settings = db.session.get(RoomSettings, room_id)
    if not settings:
        return None
    return settings.password_hash


def check_room_password(room_id, candidate):
    """True when the room has no password or ``candidate`` matches it.

    A room with no settings row, including a room that does not exist at
    all, counts as unprotected. Callers check existence separately.
    """
    password_hash = room_password_hash(room_id)
    if not password_hash:
        return True
    return password_matches(password_hash, candidate)
