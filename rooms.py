"""Room and content lifecycle on top of the relational store and blob store."""
import json
import logging
from datetime import datetime, timezone

from flask import current_app

import blob_store
from access import check_room_password, hash_password
from errors import Forbidden, NotFound, ValidationError
from extensions import db
from models import (
    BOARD_ITEM_TYPES,
    BoardItem,
    ChatMessage,
    Drawing,
    Room,
    RoomSettings,
    utcnow,
)
from room_ids import generate_unique_room_id

DEFAULT_ROOM_NAME = "New Whiteboard"
DEFAULT_AUTHOR_NAME = "Anonymous"
IMAGE_URL_PREFIX = "/api/images/"

logger = logging.getLogger(__name__)


def _room_exists(room_id):
    return db.session.get(Room, room_id) is not None


def _require_room(room_id):
    room = db.session.get(Room, room_id)
    if room is None:
        raise NotFound("Room not found")
    return room


def _touch_room(room_id):
    # Separate commit from the content insert; a failure here leaves last_activity stale
    Room.query.filter_by(id=room_id).update({"last_activity": utcnow()})
    db.session.commit()


def parse_expires_at(value):
    """Accept a datetime or ISO-8601 string and return naive UTC."""
    if value is None or value == "":
        return None
    if not isinstance(value, (str, datetime)):
        raise ValidationError("expires_at must be an ISO-8601 timestamp")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError("expires_at must be an ISO-8601 timestamp")
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# Room lifecycle


def create_room(name=None, creator_name=None, password=None, expires_at=None):
    attempts = current_app.config.get("ROOM_ID_ATTEMPTS", 5)
    room_id = generate_unique_room_id(_room_exists, attempts=attempts)
    room = Room(
        id=room_id,
        name=name or DEFAULT_ROOM_NAME,
        creator_name=creator_name or DEFAULT_AUTHOR_NAME,
    )
    db.session.add(room)

    expires_at = parse_expires_at(expires_at)
    if password or expires_at:
        room.settings = RoomSettings(
            password_hash=hash_password(password) if password else None,
            expires_at=expires_at,
            is_active=True,
        )
    db.session.commit()
    logger.info(f"Created room {room_id} (password={'yes' if password else 'no'})")
    return {
        "room_id": room.id,
        "name": room.name,
        "creator_name": room.creator_name,
        "has_password": room.has_password,
    }


def get_room(room_id):
    return _require_room(room_id).to_dict()


def verify_password(room_id, password):
    return check_room_password(room_id, password)


def delete_room(room_id, password=None):
    if not check_room_password(room_id, password):
        logger.warning(f"Rejected delete for room {room_id}: password mismatch")
        raise Forbidden("Invalid password")

    room = db.session.get(Room, room_id)
    if room is None:
        return
    db.session.delete(room)
    db.session.commit()
    logger.info(f"Deleted room {room_id}")
    blob_store.delete_room_blobs(room.id)


# Board items


def add_board_item(room_id, type, content, author_name=None, image_url=None):
    if type not in BOARD_ITEM_TYPES:
        raise ValidationError(
            f"type must be one of: {', '.join(BOARD_ITEM_TYPES)}"
        )
    if type == "image" and not image_url:
        raise ValidationError("image items require image_url")
    _require_room(room_id)

    item = BoardItem(
        room_id=room_id,
        type=type,
        content=content,
        author_name=author_name or DEFAULT_AUTHOR_NAME,
        image_url=image_url or None,
    )
    db.session.add(item)
    db.session.commit()
    _touch_room(room_id)
    return item.to_dict()


def list_board_items(room_id):
    items = (
        BoardItem.query.filter_by(room_id=room_id)
        .order_by(BoardItem.created_at.asc(), BoardItem.id.asc())
        .all()
    )
    return [item.to_dict() for item in items]


def delete_board_item(room_id, item_id):
    """Delete by (room, id); a missing pair is not an error."""
    deleted = BoardItem.query.filter_by(id=item_id, room_id=room_id).delete()
    db.session.commit()
    return deleted


# Chat


def add_chat_message(room_id, author_name, message):
    if message is None or str(message).strip() == "":
        raise ValidationError("message is required")
    _require_room(room_id)

    chat_message = ChatMessage(
        room_id=room_id,
        author_name=author_name or DEFAULT_AUTHOR_NAME,
        message=str(message),
    )
    db.session.add(chat_message)
    db.session.commit()
    _touch_room(room_id)
    return chat_message.to_dict()


def list_chat_messages(room_id):
    messages = (
        ChatMessage.query.filter_by(room_id=room_id)
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        .all()
    )
    return [m.to_dict() for m in messages]


# Drawings


def save_drawing(room_id, drawing_data, author_name=None):
    """Store a new snapshot; earlier snapshots are kept but never read."""
    if drawing_data is None:
        raise ValidationError("drawing_data is required")
    _require_room(room_id)

    if not isinstance(drawing_data, str):
        drawing_data = json.dumps(drawing_data, separators=(",", ":"))
    drawing = Drawing(
        room_id=room_id,
        drawing_data=drawing_data,
        author_name=author_name or DEFAULT_AUTHOR_NAME,
    )
    db.session.add(drawing)
    db.session.commit()
    return drawing.to_dict()


def get_latest_drawing(room_id):
    drawing = (
        Drawing.query.filter_by(room_id=room_id)
        .order_by(Drawing.created_at.desc(), Drawing.id.desc())
        .first()
    )
    return drawing.to_dict() if drawing else None


# Images


def upload_image(room_id, file_bytes, original_filename, content_type):
    _require_room(room_id)
    path = blob_store.generate_image_key(room_id, original_filename)
    blob_store.put_blob(path, file_bytes, content_type)
    logger.info(f"Uploaded image {path} for room {room_id}")
    return IMAGE_URL_PREFIX + path


def fetch_image(path):
    """Return ``(bytes, content_type)`` for a stored image path."""
    if path.startswith(IMAGE_URL_PREFIX):
        path = path[len(IMAGE_URL_PREFIX):]
    blob = blob_store.get_blob(path)
    if blob is None:
        raise NotFound("Image not found")
    return blob
