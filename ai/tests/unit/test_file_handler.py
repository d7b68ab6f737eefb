import os
import logging
import pytest

from modules.utils import FileHandler, UploadValidationError


@pytest.mark.unit
def test_save_and_cleanup_pdf(upload_dir):
    fh = FileHandler()
    path = fh.save_upload(b'%PDF-1.4 data', 'notes.pdf', 'document')
    assert path.endswith('.pdf')
    assert os.path.dirname(path) == str(upload_dir)
    info = fh.get_file_info(path)
    assert info['mime_type'] == 'application/pdf'
    fh.cleanup_temp_file(path)
    assert not os.path.exists(path)


@pytest.mark.unit
def test_rejects_wrong_extension(upload_dir):
    fh = FileHandler()
    with pytest.raises(UploadValidationError):
        fh.save_upload(b'hello', 'notes.txt', 'document')
    # rejected uploads are not left behind
    assert os.listdir(upload_dir) == []


@pytest.mark.unit
def test_rejects_empty_upload(upload_dir):
    with pytest.raises(UploadValidationError):
        FileHandler().save_upload(b'', 'clip.mp3', 'media')


@pytest.mark.unit
def test_accepts_media(upload_dir):
    fh = FileHandler()
    path = fh.save_upload(b'ID3fake', 'clip.mp3', 'media')
    assert fh.validate_file(path, 'media') == (True, None)
    fh.cleanup_temp_file(path)


@pytest.mark.unit
def test_size_limit(upload_dir, monkeypatch):
    monkeypatch.setattr('modules.utils.file_handler.MAX_UPLOAD_SIZE_BYTES', 4)
    with pytest.raises(UploadValidationError):
        FileHandler().save_upload(b'%PDF-1.4', 'notes.pdf', 'document')


@pytest.mark.unit
def test_cleanup_ignores_files_outside_temp_dir(upload_dir, tmp_path):
    outside = tmp_path / 'keep.pdf'
    outside.write_bytes(b'x')
    FileHandler().cleanup_temp_file(str(outside))
    assert outside.exists()


@pytest.mark.unit
def test_save_logs_upload_metadata(upload_dir, caplog):
    caplog.set_level(logging.INFO, logger='modules.utils.file_handler')
    fh = FileHandler()
    path = fh.save_upload(b'%PDF-1.4 data', 'notes.pdf', 'document')
    saved = [r for r in caplog.records if r.getMessage() == 'Saved upload']
    assert saved[0].size_bytes == len(b'%PDF-1.4 data')
    assert saved[0].mime_type == 'application/pdf'
    assert saved[0].upload_name == 'notes.pdf'
    fh.cleanup_temp_file(path)
