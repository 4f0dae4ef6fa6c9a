from flask import Blueprint, Response, jsonify, request

import rooms
from blob_store import IMAGE_CACHE_MAX_AGE
from errors import ValidationError, api_action

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _json_body():
    return request.get_json(silent=True) or {}


@api_bp.post("/rooms")
@api_action("create room")
def create_room():
    data = _json_body()
    result = rooms.create_room(
        name=data.get("name"),
        creator_name=data.get("creator_name"),
        password=data.get("password"),
        expires_at=data.get("expires_at"),
    )
    return jsonify(result)


@api_bp.get("/rooms/<room_id>")
@api_action("fetch room")
def get_room(room_id):
    return jsonify(rooms.get_room(room_id))


@api_bp.post("/rooms/<room_id>/verify")
@api_action("verify password")
def verify_room_password(room_id):
    data = _json_body()
    return jsonify({"valid": rooms.verify_password(room_id, data.get("password"))})


@api_bp.delete("/rooms/<room_id>")
@api_action("delete room")
def delete_room(room_id):
    data = _json_body()
    rooms.delete_room(room_id, data.get("password"))
    return jsonify({"success": True})


@api_bp.get("/rooms/<room_id>/board")
@api_action("fetch board items")
def list_board_items(room_id):
    return jsonify({"items": rooms.list_board_items(room_id)})


@api_bp.post("/rooms/<room_id>/board")
@api_action("add board item")
def add_board_item(room_id):
    data = _json_body()
    item = rooms.add_board_item(
        room_id,
        data.get("type"),
        data.get("content"),
        author_name=data.get("author_name"),
        image_url=data.get("image_url"),
    )
    return jsonify(item)


@api_bp.delete("/rooms/<room_id>/board/<int:item_id>")
@api_action("delete item")
def delete_board_item(room_id, item_id):
    rooms.delete_board_item(room_id, item_id)
    return jsonify({"success": True})


@api_bp.post("/rooms/<room_id>/upload")
@api_action("upload image")
def upload_image(room_id):
    file = request.files.get("image")
    if file is None:
        raise ValidationError("No file provided")
    image_url = rooms.upload_image(
        room_id, file.read(), file.filename, file.mimetype
    )
    return jsonify({"image_url": image_url})


@api_bp.get("/images/<path:path>")
@api_action("fetch image")
def fetch_image(path):
    data, content_type = rooms.fetch_image(path)
    return Response(
        data,
        content_type=content_type,
        headers={"Cache-Control": f"public, max-age={IMAGE_CACHE_MAX_AGE}"},
    )


@api_bp.get("/rooms/<room_id>/chat")
@api_action("fetch messages")
def list_chat_messages(room_id):
    return jsonify({"messages": rooms.list_chat_messages(room_id)})


@api_bp.post("/rooms/<room_id>/chat")
@api_action("send message")
def add_chat_message(room_id):
    data = _json_body()
    message = rooms.add_chat_message(
        room_id, data.get("author_name"), data.get("message")
    )
    return jsonify(message)


@api_bp.get("/rooms/<room_id>/drawings")
@api_action("fetch drawings")
def get_drawings(room_id):
    latest = rooms.get_latest_drawing(room_id)
    return jsonify({"drawings": [latest] if latest else []})


@api_bp.post("/rooms/<room_id>/drawings")
@api_action("save drawing")
def save_drawing(room_id):
    data = _json_body()
    drawing = rooms.save_drawing(
        room_id, data.get("drawing_data"), author_name=data.get("author_name")
    )
    return jsonify(drawing)
