import time
from flask import current_app

from waiver_intake.embedded import EmbeddedImage
from waiver_intake.errors import ValidationError, PersistenceError, NotificationError
from waiver_intake.services.email_service import EmailService
from waiver_intake.services.record_service import build_record
from waiver_intake.services.storage_service import StorageService


class WaiverService:

    @staticmethod
    def resolve_waiver_id(payload):
        waiver_id = payload.get('waiver_id')
        if waiver_id:
            return str(waiver_id)
        return f"BAT-{int(time.time() * 1000)}"

    @staticmethod
    def validate(payload):
        if not isinstance(payload, dict):
            raise ValidationError("Missing client_name or email")
        if not payload.get('client_name') or not payload.get('email'):
            raise ValidationError("Missing client_name or email")

    @staticmethod
    def process_submission(payload, storage=None, store=None):
        """
        Ingest one waiver:
        1. Validate required fields (no side effects on failure)
        2. Resolve waiver_id
        3. Decode embedded images (malformed = not provided)
        4. Upload them in parallel, replace semantics
        5. Swap images for storage paths
        6. Insert one record
        7. Aftercare email (failure logged only)

        Returns the waiver_id.
        """
        if storage is None:
            storage = current_app.waiver_storage
        if store is None:
            store = current_app.waiver_store

        # 1. Validate
        WaiverService.validate(payload)

        # 2. Identity
        waiver_id = WaiverService.resolve_waiver_id(payload)
        working = dict(payload)

        # 3. Decode
        uploads = []
        signature = EmbeddedImage.from_data_url(working.pop('signature_png', None))
        if signature:
            path = StorageService.signature_path(waiver_id)
            uploads.append((path, signature.data, 'image/png'))
            working['signature_path'] = path

        id_front = EmbeddedImage.from_data_url(working.pop('id_photo_front', None))
        if id_front:
            path = StorageService.id_front_path(waiver_id, id_front)
            uploads.append((path, id_front.data, id_front.mime_type))
            working['id_photo_front_path'] = path

        # 4. Upload (StorageError aborts before anything is persisted)
        uploaded = StorageService.upload_all(storage, uploads)

        # 5 + 6. Persist
        record = build_record(working, waiver_id)
        try:
            store.insert(record)
        except PersistenceError as e:
            current_app.logger.error(f"DB insert error for {waiver_id}: {e.message} | {e.details} | {e.hint}")
            if uploaded:
                current_app.logger.warning(f"Orphaned uploads for {waiver_id}: {', '.join(uploaded)}")
            raise

        current_app.logger.info(f"Waiver {waiver_id} saved ({len(uploaded)} attachments)")

        # 7. Notify
        if record['send_aftercare'] and record['email']:
            try:
                EmailService.send_aftercare_email(record['email'], record['client_name'])
            except NotificationError as e:
                current_app.logger.error(f"Aftercare email failed for {waiver_id}: {e}")

        return waiver_id
