import secrets
from datetime import datetime, timezone

from waiver_intake.embedded import EmbeddedImage
from waiver_intake.errors import SubmissionRejected
from waiver_intake.models import (
    CONSENT_ITEMS, MEDICAL_CONDITIONS, MEDICAL_QUESTIONS, PRACTITIONERS,
)

MSG_REQUIRED = "Please fill required fields (Name, Email)."
MSG_CONSENTS = "Please check all informed consent items."
MSG_SIGN = "Please sign in the signature box."


class WaiverForm:
    """Field values as typed on the waiver form. Never mutated by submission."""

    def __init__(self, client_name='', email='', phone='', address='', dob='',
                 emergency_name='', emergency_phone='',
                 id_type='Driver License',
                 procedure_type='Tattoo', procedure_site='', procedure_desc='',
                 practitioner=PRACTITIONERS[0],
                 medical=None, answers=None, consents=None,
                 opt_photo=False, send_aftercare=True, user_agent=''):
        self.client_name = client_name
        self.email = email
        self.phone = phone
        self.address = address
        self.dob = dob
        self.emergency_name = emergency_name
        self.emergency_phone = emergency_phone

        self.id_type = id_type

        self.procedure_type = procedure_type
        self.procedure_site = procedure_site
        self.procedure_desc = procedure_desc
        self.practitioner = practitioner

        self.medical = {key: False for key, _ in MEDICAL_CONDITIONS}
        self.medical.update(medical or {})
        self.answers = {key: '' for key, _ in MEDICAL_QUESTIONS}
        self.answers.update(answers or {})

        self.consents = list(consents) if consents is not None else [False] * len(CONSENT_ITEMS)

        self.opt_photo = opt_photo
        self.send_aftercare = send_aftercare
        self.user_agent = user_agent

    def acknowledge_all(self):
        self.consents = [True] * len(CONSENT_ITEMS)


class SubmissionEncoder:

    @staticmethod
    def new_waiver_id():
        return f"BAT-LOCAL-{secrets.token_hex(4)}"

    @staticmethod
    def validate(form, pad):
        """Raises SubmissionRejected with the prompt to show the user."""
        if not (form.client_name or '').strip() or not (form.email or '').strip():
            raise SubmissionRejected(MSG_REQUIRED)

        if len(form.consents) != len(CONSENT_ITEMS) or not all(form.consents):
            raise SubmissionRejected(MSG_CONSENTS)

        if not pad.has_ink():
            raise SubmissionRejected(MSG_SIGN)

    @staticmethod
    def medical_notes(answers):
        lines = []
        for key, label in MEDICAL_QUESTIONS:
            value = (answers.get(key) or '').strip()
            if value:
                lines.append(f"{label}: {value}")
        return "\n".join(lines)

    @staticmethod
    def encode_file(path):
        if not path:
            return None
        return EmbeddedImage.from_file(path)

    @staticmethod
    def build_payload(form, pad, id_photo=None, waiver_id=None):
        """
        Flat JSON-ready dict in the database naming scheme.
        Images travel as data URLs under signature_png / id_photo_front.
        """
        payload = {
            'waiver_id': waiver_id or SubmissionEncoder.new_waiver_id(),

            # Client
            'client_name': form.client_name,
            'email': form.email,
            'phone': form.phone,
            'address': form.address,
            'dob': form.dob,
            'emergency_contact': form.emergency_name,
            'emergency_phone': form.emergency_phone,

            # ID
            'id_type': form.id_type,

            # Procedure
            'practitioner': form.practitioner,
            'procedure_type': form.procedure_type,
            'procedure_site': form.procedure_site,
            'procedure_desc': form.procedure_desc,

            # Images (server swaps these for storage paths)
            'signature_png': pad.export().to_data_url(),
            'id_photo_front': id_photo.to_data_url() if id_photo else None,

            'medical_notes': SubmissionEncoder.medical_notes(form.answers),

            # Optional
            'opt_photo': bool(form.opt_photo),
            'opt_email': bool(form.send_aftercare),
            'send_aftercare': bool(form.send_aftercare),

            # Meta
            'user_agent': form.user_agent,
            'timestamp_iso': datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
        }

        for key, _ in MEDICAL_CONDITIONS:
            payload[f"mh_{key}"] = bool(form.medical.get(key))

        for (key, _), acknowledged in zip(CONSENT_ITEMS, form.consents):
            payload[key] = bool(acknowledged)

        return payload
