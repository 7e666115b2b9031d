"""Redis hash transporter.

Lets a data-fetching framework read records stored in Redis hashes,
addressed by type and id or enumerated by key pattern:
- connection: lazy connect, idle expiry, reconnect on demand
- dispatch: GET by id, ids or pattern
- codec: hash fields <-> records, null sentinel
- keys: key and pattern layout
"""

from .codec import NULL_SENTINEL, decode, encode
from .connection import Connection, ConnectionStatus, connect
from .disconnect import disconnect
from .dispatch import send
from .models import Action, Response, ResponseStatus, TransporterOptions
from .transporter import Transporter, transporter

__version__ = "0.1.0"

__all__ = [
    "NULL_SENTINEL",
    "decode",
    "encode",
    "Connection",
    "ConnectionStatus",
    "connect",
    "disconnect",
    "send",
    "Action",
    "Response",
    "ResponseStatus",
    "TransporterOptions",
    "Transporter",
    "transporter",
]
