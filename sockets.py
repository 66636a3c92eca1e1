from flask_socketio import SocketIO, join_room, leave_room, emit

from store import ChangeEvent

BOARD_ROOM = "board"

socketio = SocketIO(cors_allowed_origins="*")

@socketio.on("join_board")
def handle_join(data=None):
    join_room(BOARD_ROOM)
    emit("system", {"message": "joined mood board"})

@socketio.on("leave_board")
def handle_leave(data=None):
    leave_room(BOARD_ROOM)

def make_broadcaster(schema):
    """Change-feed listener relaying every event to the board room."""
    def broadcast_change(event: ChangeEvent):
        socketio.emit(
            "mood_change",
            {
                "eventType": event.kind,
                "new": schema.to_row(event.entry) if event.entry else None,
            },
            room=BOARD_ROOM,
        )
    return broadcast_change
