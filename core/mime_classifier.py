import logging
import threading
from typing import Optional

from core.exceptions import ClassificationError

logger = logging.getLogger(__name__)


class MimeClassifier:
    """Best-guess MIME type of a byte buffer using libmagic.

    The libmagic handle is opened once and reused for every call. It is not
    safe for concurrent use, so all access goes through a lock.
    """

    def __init__(self, mime: bool = True, magic_file: Optional[str] = None):
        try:
            import magic
        except ImportError as e:
            raise ClassificationError(f"libmagic is not available: {e}") from e

        self._magic_module = magic
        self._lock = threading.Lock()
        try:
            self._magic = magic.Magic(mime=mime, magic_file=magic_file)
        except magic.MagicException as e:
            raise ClassificationError(f"Cannot open libmagic: {e}") from e
        logger.info("Opened libmagic decoder")

    def classify(self, data: bytes) -> str:
        with self._lock:
            if self._magic is None:
                raise ClassificationError("MIME classifier is closed")
            try:
                mime_type = self._magic.from_buffer(data)
            except self._magic_module.MagicException as e:
                logger.error(f"libmagic failed to classify buffer: {e}")
                raise ClassificationError(f"Cannot classify buffer: {e}") from e

        if not mime_type:
            raise ClassificationError("libmagic returned no MIME type")
        logger.debug(f"Classified {len(data)} bytes as {mime_type}")
        return mime_type

    def close(self):
        with self._lock:
            if self._magic is not None:
                # the handle is released when the Magic object is collected
                self._magic = None
                logger.info("Closed libmagic decoder")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
