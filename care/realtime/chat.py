"""
Global staff chat.

Only the most recent messages are kept, in process memory.  The room is
shared by every connection served by this process.
"""
from __future__ import annotations

import threading
import uuid
from collections import deque
from typing import List

from django.conf import settings
from django.utils import timezone


class ChatRoom:
    def __init__(self, limit: int = 50):
        self.limit = limit
        self._messages = deque(maxlen=limit)
        self._lock = threading.Lock()

    def post(self, sender: str, role, text: str) -> dict:
        msg = {
            'id': uuid.uuid4().hex,
            'sender': sender or 'Anonymous',
            'role': role,
            'text': text,
            'timestamp': timezone.now().isoformat(),
        }
        with self._lock:
            self._messages.append(msg)
        return dict(msg)

    def history(self) -> List[dict]:
        with self._lock:
            return [dict(m) for m in self._messages]

    def reset(self) -> None:
        with self._lock:
            self._messages.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)


room = ChatRoom(getattr(settings, 'CHAT_HISTORY_LIMIT', 50))
