import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional


@dataclass
class Message:
    type: str
    data: Any = None
    source: Optional[str] = None
    uuid: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MessageMaker:
    """Stamps every message it makes with the name of the plugin that sent it."""

    def __init__(self, source: str) -> None:
        self.source = source

    def make(self, type: str, data: Any = None) -> Message:
        return Message(type=type, data=data, source=self.source)


class MessageQueue:
    def __init__(self) -> None:
        self.messages: list[Message] = []
        self._subscribers: list[Callable[[Message], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[Message], None]) -> None:
        self._subscribers.append(callback)

    def post_message(self, message: Message) -> None:
        with self._lock:
            self.messages.append(message)

        for callback in self._subscribers:
            callback(message)

    def messages_of_type(self, type: str) -> list[Message]:
        with self._lock:
            return [message for message in self.messages if message.type == type]
