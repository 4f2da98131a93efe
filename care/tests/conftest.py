import pytest
from channels.layers import channel_layers

from care.models import Hospital, User
from care.realtime import chat


@pytest.fixture(autouse=True)
def clinic_settings(settings):
    settings.CHANNEL_LAYERS = {"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}
    settings.PATIENT_ROOM_TRUST_CLAIMED_TENANT = True
    settings.PUBLIC_BASE_URL = "https://medflow.test"
    settings.TWILIO_ACCOUNT_SID = ""
    settings.TWILIO_AUTH_TOKEN = ""
    settings.TWILIO_PHONE_NUMBER = ""
    channel_layers.backends = {}
    chat.room.reset()
    yield settings
    channel_layers.backends = {}
    chat.room.reset()


@pytest.fixture
def hospital_a(transactional_db):
    return Hospital.objects.create(name="City Hospital", email="city@example.com", phone="0201", address="1 Main St")


@pytest.fixture
def hospital_b(transactional_db):
    return Hospital.objects.create(name="Lake Clinic", email="lake@example.com")


@pytest.fixture
def make_user(transactional_db):
    def _make(username, role, hospital, **extra):
        return User.objects.create_user(username=username, password="pass1234", role=role, hospital=hospital, **extra)
    return _make
