"""Identity-lookup collaborators and the record stores behind them."""

from .bridge import AsyncLoopBridge
from .in_memory import InMemoryRecordStore
from .keys import RecordKeyMapper
from .nats import NatsRecordStore
from .postgres import PostgresRecordStore
from .protocol import RecordStore
from .redis import RedisRecordStore
from .repository import InMemoryRepository, StoreBackedRepository


__all__ = [
    "AsyncLoopBridge",
    "InMemoryRecordStore",
    "InMemoryRepository",
    "NatsRecordStore",
    "PostgresRecordStore",
    "RecordKeyMapper",
    "RecordStore",
    "RedisRecordStore",
    "StoreBackedRepository",
]
