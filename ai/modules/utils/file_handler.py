import os
import pathlib
import tempfile
import mimetypes
import logging

LOG = logging.getLogger(__name__)

TEMP_DIR = os.getenv('UPLOAD_TEMP_DIR', os.path.join(tempfile.gettempdir(), 'smart_summary_uploads'))
MAX_UPLOAD_SIZE_MB = int(os.getenv('MAX_UPLOAD_SIZE_MB', '25'))
MAX_UPLOAD_SIZE_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024
SUPPORTED_DOCUMENT_FORMATS = os.getenv('SUPPORTED_DOCUMENT_FORMATS', 'pdf').split(',')
SUPPORTED_MEDIA_FORMATS = os.getenv('SUPPORTED_MEDIA_FORMATS', 'mp3,mp4,mpeg,mpga,m4a,wav,webm,ogg,mov').split(',')


class UploadValidationError(Exception):
    """Raised when an uploaded file is missing, too large or of the wrong type."""


class FileHandler:
    def __init__(self, temp_dir: str = None):
        self.temp_dir = temp_dir or TEMP_DIR
        pathlib.Path(self.temp_dir).mkdir(parents=True, exist_ok=True)
        LOG.info('FileHandler initialized', extra={'temp_dir': self.temp_dir})

    def _formats_for(self, kind: str):
        if kind == 'document':
            return SUPPORTED_DOCUMENT_FORMATS
        if kind == 'media':
            return SUPPORTED_MEDIA_FORMATS
        raise ValueError(f'Unknown upload kind: {kind}')

    def save_upload(self, data: bytes, filename: str, kind: str) -> str:
        """Write uploaded bytes to a temp file and validate it.

        Returns the local path; the caller owns cleanup via ``cleanup_temp_file``.
        """
        if not data:
            raise UploadValidationError('Uploaded file is empty')
        # keep the extension so validation and downstream SDKs can sniff the type
        suffix = pathlib.Path(filename or '').suffix or ''
        tmp = tempfile.NamedTemporaryFile(delete=False, suffix=suffix, dir=self.temp_dir)
        try:
            tmp.write(data)
        finally:
            tmp.close()
        local_path = tmp.name
        info = self.get_file_info(local_path)
        LOG.info('Saved upload', extra={'upload_name': filename, 'kind': kind, 'size_bytes': info['size_bytes'], 'mime_type': info['mime_type']})
        valid, err = self.validate_file(local_path, kind)
        if not valid:
            self.cleanup_temp_file(local_path)
            raise UploadValidationError(err)
        return local_path

    def validate_file(self, file_path: str, kind: str):
        if not os.path.exists(file_path):
            return False, 'File does not exist'
        size = os.path.getsize(file_path)
        if size > MAX_UPLOAD_SIZE_BYTES:
            return False, f'File too large (max {MAX_UPLOAD_SIZE_MB} MB)'
        formats = self._formats_for(kind)
        ext = pathlib.Path(file_path).suffix.lstrip('.').lower()
        if ext not in formats:
            return False, 'Unsupported file extension'
        mime, _ = mimetypes.guess_type(file_path)
        if kind == 'document' and mime and mime != 'application/pdf':
            return False, 'Unsupported MIME type'
        if kind == 'media' and mime and mime.split('/')[0] not in ('audio', 'video'):
            return False, 'Unsupported MIME type'
        return True, None

    def get_file_info(self, file_path: str):
        if not os.path.exists(file_path):
            raise FileNotFoundError(file_path)
        size = os.path.getsize(file_path)
        ext = pathlib.Path(file_path).suffix.lower()
        mime, _ = mimetypes.guess_type(file_path)
        return {
            'size_bytes': size,
            'size_mb': size / (1024 * 1024),
            'extension': ext,
            'mime_type': mime,
            'filename': pathlib.Path(file_path).name
        }

    def cleanup_temp_file(self, file_path: str):
        try:
            if file_path and os.path.exists(file_path) and os.path.commonpath([os.path.abspath(file_path), os.path.abspath(self.temp_dir)]) == os.path.abspath(self.temp_dir):
                os.remove(file_path)
                LOG.info('Removed temp file', extra={'file': file_path})
        except OSError:
            LOG.exception('Failed to cleanup temp file', exc_info=True)
