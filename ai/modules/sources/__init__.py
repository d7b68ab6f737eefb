"""
Text sources: PDF text extraction and audio/video transcription.
"""
from .pdf_extractor import extract_document, extract_text_from_pdf, ExtractedDocument, PDFExtractionError
from .transcriber import Transcriber, transcribe_media, TranscriptionError, TranscriptionAPIError

__all__ = [
	'extract_document', 'extract_text_from_pdf', 'ExtractedDocument', 'PDFExtractionError',
	'Transcriber', 'transcribe_media', 'TranscriptionError', 'TranscriptionAPIError',
]
