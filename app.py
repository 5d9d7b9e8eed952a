from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from chat_user import ChatUser
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL
from errors import DeliveryFailure, MalformedEnvelope
from logging_config import get_logger, setup_logging
from registry import RoomRegistry, get_registry
from routers.rooms import rooms_router

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

# 1003: endpoint received data it cannot accept
CLOSE_UNSUPPORTED_DATA = 1003
MAX_CLOSE_REASON = 120

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms_router)

logger.info("FastAPI application initialized")


def close_reason(error: Exception) -> str:
    # close frames carry at most 123 bytes of reason
    return str(error).encode("utf-8")[:MAX_CLOSE_REASON].decode("utf-8", errors="ignore")


def make_sender(websocket: WebSocket):
    """Wrap websocket.send_text so an unreachable peer surfaces as DeliveryFailure."""
    async def send(data: str):
        try:
            await websocket.send_text(data)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            raise DeliveryFailure(f"send failed: {e!r}") from e
    return send


async def receive_frame(websocket: WebSocket):
    """Next inbound frame as str or bytes; raises WebSocketDisconnect when the peer goes away."""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
    data = message.get("text")
    if data is None:
        data = message.get("bytes")
    return data


@app.websocket("/chat/{room_name}")
async def chat_endpoint(room_name: str, websocket: WebSocket, registry: RoomRegistry = Depends(get_registry)):
    """One chat connection: every frame, text or binary, is an envelope for the room `room_name`.

    A frame that is not a valid envelope closes the connection with 1003.
    """
    await websocket.accept()
    user = ChatUser(make_sender(websocket), room_name, registry)
    logger.info(f"WebSocket connection accepted for user {user.id} in room {room_name}")

    message_count = 0
    try:
        while True:
            data = await receive_frame(websocket)
            message_count += 1
            logger.debug(f"Received message #{message_count} from user {user.id} in room {room_name}")
            try:
                await user.handle_message(data)
            except MalformedEnvelope as e:
                logger.warning(f"Closing connection for user {user.id} in room {room_name}: {e}")
                await websocket.close(code=CLOSE_UNSUPPORTED_DATA, reason=close_reason(e))
                break
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected normally for user {user.id} in room {room_name}")
    finally:
        await user.handle_close()
        logger.info(f"User {user.id} ({user.name}) left room {room_name} after {message_count} messages")
