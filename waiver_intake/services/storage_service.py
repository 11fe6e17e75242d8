import os
import logging
from concurrent.futures import ThreadPoolExecutor

from waiver_intake.errors import StorageError

logger = logging.getLogger(__name__)


class SupabaseBlobStorage:
    """Supabase Storage bucket. Uploads replace any existing object."""

    def __init__(self, client, bucket='waivers'):
        self.client = client
        self.bucket = bucket

    def upload(self, path, data, content_type):
        self.client.storage.from_(self.bucket).upload(
            path, data, {"content-type": content_type, "upsert": "true"}
        )
        return path


class LocalBlobStorage:
    """Folder on disk, used when Supabase is not configured."""

    def __init__(self, root):
        self.root = os.path.realpath(root)

    def upload(self, path, data, content_type):
        full_path = os.path.realpath(os.path.join(self.root, path))
        if os.path.commonpath([self.root, full_path]) != self.root:
            raise ValueError(f"Path escapes upload folder: {path}")

        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, 'wb') as f:
            f.write(data)
        return path


class StorageService:
    MAX_PARALLEL_UPLOADS = 2

    @staticmethod
    def signature_path(waiver_id):
        return f"waivers/{waiver_id}/signature.png"

    @staticmethod
    def id_front_path(waiver_id, image):
        return f"waivers/{waiver_id}/id_front.{image.extension}"

    @staticmethod
    def upload_all(storage, uploads):
        """
        Uploads [(path, bytes, content_type), ...] in parallel and waits for all.

        Results are joined in submission order; the first failure raises
        StorageError without waiting on the uploads still in flight.
        """
        if not uploads:
            return []

        executor = ThreadPoolExecutor(max_workers=min(len(uploads), StorageService.MAX_PARALLEL_UPLOADS))
        try:
            futures = [
                (path, executor.submit(storage.upload, path, data, content_type))
                for path, data, content_type in uploads
            ]
            paths = []
            for path, future in futures:
                try:
                    future.result()
                except Exception as e:
                    logger.error(f"Upload failed for {path}: {e}")
                    raise StorageError(f"Upload failed for {path}: {e}") from e
                paths.append(path)
            return paths
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
