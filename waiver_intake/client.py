import logging

import requests

from waiver_intake.encoder import SubmissionEncoder
from waiver_intake.errors import SubmissionFailed

logger = logging.getLogger(__name__)

MSG_SAVE_FAILED = "Something went wrong saving your waiver. Please try again."
MSG_NETWORK = "Network error. Please try again."


class WaiverClient:
    """
    Sends a completed form to POST /api/waiver.
    One request per call, no retries; the caller decides whether to try again.
    """

    def __init__(self, base_url, session=None, timeout=30):
        self.url = f"{base_url.rstrip('/')}/api/waiver"
        self.session = session or requests.Session()
        self.timeout = timeout

    def submit(self, form, pad, id_photo_path=None):
        """
        Returns the waiver_id confirmed by the server.
        Raises SubmissionRejected before any network call when the form is
        incomplete, SubmissionFailed when the request does not succeed.
        """
        SubmissionEncoder.validate(form, pad)

        id_photo = SubmissionEncoder.encode_file(id_photo_path)
        payload = SubmissionEncoder.build_payload(form, pad, id_photo=id_photo)

        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Waiver submit network error: {e}")
            raise SubmissionFailed(MSG_NETWORK) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok or not isinstance(body, dict) or not body.get('ok'):
            logger.error(f"Waiver submit error ({response.status_code}): {body}")
            raise SubmissionFailed(MSG_SAVE_FAILED)

        return body.get('waiver_id') or payload['waiver_id']
