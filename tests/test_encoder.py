"""
Client-side validation, payload encoding and submission
"""
import pytest
import requests

from conftest import make_image_bytes
from waiver_intake.client import WaiverClient, MSG_NETWORK, MSG_SAVE_FAILED
from waiver_intake.embedded import EmbeddedImage
from waiver_intake.encoder import (
    WaiverForm, SubmissionEncoder, MSG_REQUIRED, MSG_CONSENTS, MSG_SIGN,
)
from waiver_intake.errors import SubmissionRejected, SubmissionFailed
from waiver_intake.models import CONSENT_ITEMS, MEDICAL_CONDITIONS
from waiver_intake.signature_pad import SignaturePad


def signed_pad():
    pad = SignaturePad(container_width=300)
    pad.draw_stroke([(10, 10), (60, 40), (120, 80)])
    return pad


def complete_form(**overrides):
    fields = dict(client_name='Ana Souza', email='ana@example.com')
    fields.update(overrides)
    form = WaiverForm(**fields)
    form.acknowledge_all()
    return form


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        if self.error:
            raise self.error
        return self.response


# --- Validation ---

@pytest.mark.parametrize('field', ['client_name', 'email'])
def test_required_fields(field):
    form = complete_form(**{field: '  '})
    with pytest.raises(SubmissionRejected, match=r"Name, Email"):
        SubmissionEncoder.validate(form, signed_pad())


def test_every_consent_must_be_acknowledged():
    form = complete_form()
    form.consents[5] = False
    with pytest.raises(SubmissionRejected) as exc:
        SubmissionEncoder.validate(form, signed_pad())
    assert str(exc.value) == MSG_CONSENTS


def test_signature_required():
    with pytest.raises(SubmissionRejected) as exc:
        SubmissionEncoder.validate(complete_form(), SignaturePad(container_width=300))
    assert str(exc.value) == MSG_SIGN


def test_complete_form_passes():
    SubmissionEncoder.validate(complete_form(), signed_pad())


# --- Payload ---

def test_payload_uses_database_naming_and_embeds_images():
    form = complete_form(emergency_name='Jo', medical={'diabetes': True})
    id_photo = EmbeddedImage(make_image_bytes('JPEG'), 'image/jpeg')

    payload = SubmissionEncoder.build_payload(form, signed_pad(), id_photo=id_photo)

    assert payload['waiver_id'].startswith('BAT-LOCAL-')
    assert payload['client_name'] == 'Ana Souza'
    assert payload['emergency_contact'] == 'Jo'
    assert payload['signature_png'].startswith('data:image/png;base64,')
    assert EmbeddedImage.from_data_url(payload['id_photo_front']) == id_photo
    assert payload['mh_diabetes'] is True
    assert payload['mh_hiv'] is False
    assert len([k for k in payload if k.startswith('mh_')]) == len(MEDICAL_CONDITIONS)
    assert all(payload[key] is True for key, _ in CONSENT_ITEMS)
    assert payload['timestamp_iso'].endswith('Z')


def test_payload_without_id_photo():
    payload = SubmissionEncoder.build_payload(complete_form(), signed_pad())
    assert payload['id_photo_front'] is None


def test_each_payload_gets_a_fresh_client_id():
    a = SubmissionEncoder.build_payload(complete_form(), signed_pad())
    b = SubmissionEncoder.build_payload(complete_form(), signed_pad())
    assert a['waiver_id'] != b['waiver_id']


def test_medical_notes_fold_non_empty_answers_in_order():
    notes = SubmissionEncoder.medical_notes({
        'extra_info': 'Nervous with needles',
        'last_ate': '2 hours ago',
        'allergies': '   ',
    })
    assert notes == "Last ate: 2 hours ago\nExtra info: Nervous with needles"


def test_encode_file_guesses_mime(tmp_path):
    path = tmp_path / 'id.jpg'
    path.write_bytes(make_image_bytes('JPEG'))

    image = SubmissionEncoder.encode_file(str(path))
    assert image.mime_type == 'image/jpeg'
    assert image.extension == 'jpeg'
    assert SubmissionEncoder.encode_file(None) is None


# --- Client ---

def test_rejected_form_never_hits_the_network():
    session = FakeSession(FakeResponse(200, {'ok': True, 'waiver_id': 'x'}))
    client = WaiverClient('http://localhost:5001', session=session)

    with pytest.raises(SubmissionRejected) as exc:
        client.submit(complete_form(client_name=''), signed_pad())

    assert str(exc.value) == MSG_REQUIRED
    assert session.posts == []


def test_submit_posts_once_and_returns_server_id():
    session = FakeSession(FakeResponse(200, {'ok': True, 'waiver_id': 'BAT-LOCAL-abc'}))
    client = WaiverClient('http://localhost:5001/', session=session)

    waiver_id = client.submit(complete_form(), signed_pad())

    assert waiver_id == 'BAT-LOCAL-abc'
    assert len(session.posts) == 1
    url, body = session.posts[0]
    assert url == 'http://localhost:5001/api/waiver'
    assert body['email'] == 'ana@example.com'


def test_server_error_surfaces_generic_message_and_keeps_form():
    session = FakeSession(FakeResponse(500, {'ok': False, 'error': 'Server error'}))
    client = WaiverClient('http://localhost:5001', session=session)
    form = complete_form(phone='555-0100')

    with pytest.raises(SubmissionFailed) as exc:
        client.submit(form, signed_pad())

    assert str(exc.value) == MSG_SAVE_FAILED
    assert len(session.posts) == 1
    assert form.client_name == 'Ana Souza'
    assert form.phone == '555-0100'
    assert all(form.consents)


def test_non_json_response_is_a_failure():
    session = FakeSession(FakeResponse(200, ValueError("no json")))
    client = WaiverClient('http://localhost:5001', session=session)
    with pytest.raises(SubmissionFailed):
        client.submit(complete_form(), signed_pad())


def test_network_error_is_not_retried():
    session = FakeSession(error=requests.ConnectionError("refused"))
    client = WaiverClient('http://localhost:5001', session=session)

    with pytest.raises(SubmissionFailed) as exc:
        client.submit(complete_form(), signed_pad())

    assert str(exc.value) == MSG_NETWORK
    assert len(session.posts) == 1
