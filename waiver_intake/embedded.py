import base64
import binascii
import mimetypes
import re

# MIME subtype safe to use as a file extension (no path separators)
SAFE_SUBTYPE = re.compile(r"^[a-z0-9][a-z0-9.+-]*$")


class EmbeddedImage:
    """
    Binary attachment carried inside the JSON payload.

    On the wire it is a data URL: ``data:<mime>;base64,<payload>``.
    Inside the app it is always raw bytes plus the MIME type.
    """

    DEFAULT_MIME = 'image/png'

    def __init__(self, data, mime_type=DEFAULT_MIME):
        self.data = bytes(data)
        self.mime_type = mime_type or self.DEFAULT_MIME

    def __eq__(self, other):
        if not isinstance(other, EmbeddedImage):
            return NotImplemented
        return self.data == other.data and self.mime_type == other.mime_type

    def __repr__(self):
        return f"<EmbeddedImage {self.mime_type} {len(self.data)} bytes>"

    @property
    def extension(self):
        """File extension from the MIME subtype (image/jpeg -> jpeg)."""
        parts = self.mime_type.lower().split('/', 1)
        if len(parts) == 2 and SAFE_SUBTYPE.match(parts[1]) and '..' not in parts[1]:
            return parts[1]
        return 'png'

    def to_data_url(self):
        b64 = base64.b64encode(self.data).decode('ascii')
        return f"data:{self.mime_type};base64,{b64}"

    @classmethod
    def from_data_url(cls, value):
        """
        Decodes a data URL. Returns None when the value is absent or malformed,
        callers treat that as "not provided".
        """
        if not value or not isinstance(value, str) or not value.startswith('data:'):
            return None

        meta, sep, b64 = value.partition(',')
        if not sep:
            return None

        # meta looks like "data:image/png;base64"
        header = meta[5:]
        mime, _, encoding = header.partition(';')
        if encoding and encoding != 'base64':
            return None

        # Line-wrapped or unpadded base64 is accepted
        b64 = ''.join(b64.split())
        b64 += '=' * (-len(b64) % 4)
        try:
            data = base64.b64decode(b64, validate=True)
        except (binascii.Error, ValueError):
            return None

        return cls(data, mime or cls.DEFAULT_MIME)

    @classmethod
    def from_file(cls, path):
        """Reads an image file from disk, MIME type guessed from the name."""
        mime, _ = mimetypes.guess_type(str(path))
        with open(path, 'rb') as f:
            return cls(f.read(), mime or 'application/octet-stream')
