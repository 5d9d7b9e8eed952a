import json
from typing import Literal, Optional, Union

from pydantic import BaseModel, ValidationError

from constants import SERVER_NAME, UNKNOWN_NAME
from errors import MalformedEnvelope, UnknownEnvelopeType


# Inbound (client -> server)

class JoinEnvelope(BaseModel):
    type: Literal["join"]
    name: str

class ChatEnvelope(BaseModel):
    type: Literal["chat"]
    text: str

class CommandEnvelope(BaseModel):
    type: Literal["command"]
    text: str

InboundEnvelope = Union[JoinEnvelope, ChatEnvelope, CommandEnvelope]

INBOUND_MODELS = {
    "join": JoinEnvelope,
    "chat": ChatEnvelope,
    "command": CommandEnvelope,
}


# Outbound (server -> client)

class OutboundEnvelope(BaseModel):
    name: Optional[str] = None
    type: Literal["chat", "note"]
    text: str
    header: Optional[str] = None

    def to_wire(self) -> str:
        return self.model_dump_json(exclude_none=True)


def note(text: str) -> OutboundEnvelope:
    return OutboundEnvelope(type="note", text=text)


def chat(name: Optional[str], text: str) -> OutboundEnvelope:
    return OutboundEnvelope(name=name, type="chat", text=text)


def server_reply(text: str) -> OutboundEnvelope:
    return chat(SERVER_NAME, text)


def private_message(sender: Optional[str], target: str, text: str) -> OutboundEnvelope:
    return OutboundEnvelope(
        name=sender,
        type="chat",
        text=text,
        header=f"Private message from {sender if sender is not None else UNKNOWN_NAME} to {target}",
    )


def decode_envelope(raw: Union[str, bytes]) -> InboundEnvelope:
    """Parse one raw frame into a typed inbound envelope.

    Raises MalformedEnvelope when the frame is not a JSON object with a string
    `type` and the payload field that type requires, and UnknownEnvelopeType
    when `type` is not one of join/chat/command.
    """
    try:
        data = json.loads(raw)
    except (ValueError, TypeError) as e:
        raise MalformedEnvelope(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedEnvelope(f"expected a JSON object, got {type(data).__name__}")

    envelope_type = data.get("type")
    if not isinstance(envelope_type, str):
        raise MalformedEnvelope("missing or non-string 'type' field")

    model = INBOUND_MODELS.get(envelope_type)
    if model is None:
        raise UnknownEnvelopeType(envelope_type)

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedEnvelope(f"invalid '{envelope_type}' envelope: {e.errors()}") from e
