import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer
from django.contrib.auth.models import AnonymousUser
from django.core.serializers.json import DjangoJSONEncoder

from . import chat, rooms
from .intents import IntentRouter
from .session import resolve_session

logger = logging.getLogger(__name__)


async def _ws_error(ws, code: int, message: str, *, close: bool = False):
    """
    Uniform error frame.
    4xxx: client errors, 5xxx: server errors.
    """
    payload = {"event": "error", "data": {"code": code, "message": message}}
    try:
        await ws.send(json.dumps(payload))
    finally:
        if close:
            await ws.close(code=code)


class ClinicConsumer(AsyncWebsocketConsumer):
    """One staff console or patient display.

    Every connection joins the global room on connect and receives the
    chat history; role and hospital rooms are joined through the ``join``
    intent.
    """

    async def connect(self):
        self.joined_groups = set()
        self.session = None

        user = self.scope.get("user") or AnonymousUser()
        if user.is_authenticated and not user.is_active:
            await self.close(code=4003)
            return

        self.session = resolve_session(user)
        self.router = IntentRouter(self)

        await rooms.add(self, rooms.EVERYONE)
        await self.accept()
        await self.send_event("chat-history", chat.room.history())

    async def disconnect(self, close_code):
        if hasattr(self, "joined_groups"):
            await rooms.leave_all(self)

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return

        try:
            frame = json.loads(text_data)
        except ValueError:
            await _ws_error(self, 4000, "invalid_json")
            return

        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            await _ws_error(self, 4001, "invalid_payload")
            return

        intent = frame["event"]
        if not self.router.handles(intent):
            await _ws_error(self, 4002, "unsupported_event")
            return

        data = frame.get("data")
        try:
            await self.router.dispatch(intent, {} if data is None else data)
        except Exception:
            # don't leak internals to the client
            logger.exception("intent %s failed", intent)
            await _ws_error(self, 5000, "server_error")

    async def send_event(self, event: str, data):
        await self.send(text_data=json.dumps({"event": event, "data": data}, cls=DjangoJSONEncoder))

    # group_send handler:
    # await channel_layer.group_send(group, {"type": "clinic.event", "event": ..., "data": {...}})
    async def clinic_event(self, event):
        await self.send_event(event["event"], event.get("data"))
