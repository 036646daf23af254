"""Connection state enumeration for the live feed."""
from enum import Enum


class ConnectionState(Enum):
    """Enumeration of all possible live feed connection states."""
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class SubscriptionStatus(Enum):
    """Status reported by an insert subscription."""
    SUBSCRIBED = "SUBSCRIBED"
    CHANNEL_ERROR = "CHANNEL_ERROR"
    CLOSED = "CLOSED"
