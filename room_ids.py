import logging
import secrets

from errors import RoomIdExhausted

logger = logging.getLogger(__name__)

# No 0/O or 1/I so codes can be read aloud and typed back
ROOM_ID_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_ID_LENGTH = 6


def generate_room_id():
    return "".join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(ROOM_ID_LENGTH))


def generate_unique_room_id(exists, attempts=5):
    """Draw codes until one is not taken according to ``exists``."""
    for attempt in range(attempts):
        room_id = generate_room_id()
        if not exists(room_id):
            return room_id
        logger.warning(f"Room code collision on {room_id} (attempt {attempt + 1})")
    raise RoomIdExhausted("Could not allocate a unique room code")
