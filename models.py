from datetime import datetime, timezone

from extensions import db

BOARD_ITEM_TYPES = ("text", "url", "image", "drawing")


def utcnow():
    """Naive UTC timestamp, the form sqlite stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    # Stored values are naive UTC
    return value.isoformat() + "Z" if value else None


class Room(db.Model):
    id = db.Column(db.String(16), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    creator_name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    last_activity = db.Column(db.DateTime, default=utcnow)

    settings = db.relationship(
        "RoomSettings", backref="room", uselist=False, cascade="all, delete-orphan"
    )
    board_items = db.relationship(
        "BoardItem", backref="room", lazy=True, cascade="all, delete-orphan"
    )
    chat_messages = db.relationship(
        "ChatMessage", backref="room", lazy=True, cascade="all, delete-orphan"
    )
    drawings = db.relationship(
        "Drawing", backref="room", lazy=True, cascade="all, delete-orphan"
    )

    @property
    def has_password(self):
        return bool(self.settings and self.settings.password_hash)

    @property
    def is_active(self):
        # No settings row means active and non-expiring
        if not self.settings:
            return True
        return self.settings.is_open(utcnow())

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "creator_name": self.creator_name,
            "created_at": _iso(self.created_at),
            "last_activity": _iso(self.last_activity),
            "has_password": self.has_password,
            "is_active": self.is_active,
        }


class RoomSettings(db.Model):
    __tablename__ = "room_settings"

    room_id = db.Column(
        db.String(16), db.ForeignKey("room.id", ondelete="CASCADE"), primary_key=True
    )
    # Salted werkzeug hash, never the raw password
    password_hash = db.Column(db.String(255), nullable=True)
    expires_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def is_open(self, now):
        if not self.is_active:
            return False
        return not (self.expires_at and self.expires_at < now)


class BoardItem(db.Model):
    __tablename__ = "board_item"

    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(
        db.String(16),
        db.ForeignKey("room.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = db.Column(db.String(16), nullable=False)
    content = db.Column(db.Text)
    author_name = db.Column(db.String(255), nullable=False)
    image_url = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "room_id": self.room_id,
            "type": self.type,
            "content": self.content,
            "author_name": self.author_name,
            "image_url": self.image_url,
            "created_at": _iso(self.created_at),
        }


class ChatMessage(db.Model):
    __tablename__ = "chat_message"

    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(
        db.String(16),
        db.ForeignKey("room.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_name = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "room_id": self.room_id,
            "author_name": self.author_name,
            "message": self.message,
            "created_at": _iso(self.created_at),
        }


class Drawing(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(
        db.String(16),
        db.ForeignKey("room.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Serialized stroke list, stored and returned untouched
    drawing_data = db.Column(db.Text, nullable=False)
    author_name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "room_id": self.room_id,
            "drawing_data": self.drawing_data,
            "author_name": self.author_name,
            "created_at": _iso(self.created_at),
        }
