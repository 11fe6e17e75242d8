import io
import threading

import pytest
from PIL import Image

from waiver_intake.app import create_app
from waiver_intake.embedded import EmbeddedImage
from waiver_intake.errors import PersistenceError
from waiver_intake.models import CONSENT_ITEMS, MEDICAL_CONDITIONS


class FakeStorage:
    def __init__(self):
        self.objects = {}
        self.calls = []
        self._lock = threading.Lock()

    def upload(self, path, data, content_type):
        with self._lock:
            self.calls.append(path)
            self.objects[path] = (data, content_type)
        return path


class FailingStorage:
    def __init__(self):
        self.calls = []

    def upload(self, path, data, content_type):
        self.calls.append(path)
        raise ConnectionError("storage unreachable")


class FakeStore:
    def __init__(self):
        self.records = []

    def insert(self, record):
        self.records.append(dict(record))
        return record


class FailingStore:
    def insert(self, record):
        raise PersistenceError(
            'null value in column "dob" violates not-null constraint',
            details="Failing row contains (...)",
            hint="Check the waivers table schema",
        )


def make_image_bytes(fmt='PNG', color='red'):
    buf = io.BytesIO()
    Image.new('RGB', (20, 10), color=color).save(buf, fmt)
    return buf.getvalue()


def data_url(data, mime='image/png'):
    return EmbeddedImage(data, mime).to_data_url()


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SUPABASE_URL': None,
        'SUPABASE_KEY': None,
        'SUPABASE_SERVICE_ROLE_KEY': None,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'waivers.db'}",
        'WAIVER_UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'RESEND_API_KEY': 'test-key',
        'FROM_EMAIL': 'Broken Art Tattoo <no-reply@brokenarttattoo.com>',
        'REPLY_TO': None,
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_storage(app):
    storage = FakeStorage()
    app.waiver_storage = storage
    return storage


@pytest.fixture
def sent_emails(monkeypatch):
    """Captures resend.Emails.send calls."""
    import resend
    sent = []

    def fake_send(params):
        sent.append(params)
        return {'id': f"msg-{len(sent)}"}

    monkeypatch.setattr(resend.Emails, 'send', fake_send)
    return sent


@pytest.fixture
def payload():
    body = {
        'waiver_id': 'BAT-LOCAL-1234',
        'client_name': 'Ana Maria Souza',
        'email': 'ana@example.com',
        'phone': '555-0100',
        'address': '1 Main St',
        'dob': '1990-04-02',
        'emergency_contact': 'Jo Souza',
        'emergency_phone': '555-0101',
        'id_type': 'Passport',
        'practitioner': 'Josh Ojeda',
        'procedure_type': 'Tattoo',
        'procedure_site': 'Left forearm',
        'procedure_desc': 'Fine line rose',
        'signature_png': data_url(make_image_bytes('PNG')),
        'id_photo_front': data_url(make_image_bytes('JPEG'), 'image/jpeg'),
        'medical_notes': 'Last ate: 2 hours',
        'opt_photo': True,
        'opt_email': True,
        'send_aftercare': False,
        'user_agent': 'pytest',
        'timestamp_iso': '2026-10-18T10:00:00.000Z',
    }
    for key, _ in MEDICAL_CONDITIONS:
        body[f"mh_{key}"] = False
    body['mh_diabetes'] = True
    for key, _ in CONSENT_ITEMS:
        body[key] = True
    return body
