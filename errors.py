class ChatError(Exception):
    """Base class for chat relay errors."""


class MalformedEnvelope(ChatError):
    """Inbound payload is not a well-formed envelope."""


class UnknownEnvelopeType(MalformedEnvelope):
    """Inbound envelope carries a `type` the relay does not handle."""

    def __init__(self, envelope_type: str):
        self.envelope_type = envelope_type
        super().__init__(f"bad message: {envelope_type}")


class DeliveryFailure(ChatError):
    """A single recipient could not be reached."""
