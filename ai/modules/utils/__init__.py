"""Utility subpackage for the summary service"""

from .logger import (
	get_logger,
	log_request,
	log_error,
	log_notice,
	log_llm_call,
	set_request_context,
	get_request_context,
	log_summary_generation,
	log_transcription,
	log_pdf_extraction,
	log_storage_operation,
)
from .file_handler import FileHandler, UploadValidationError

__all__ = [
	'get_logger',
	'log_request',
	'log_error',
	'log_notice',
	'log_llm_call',
	'set_request_context',
	'get_request_context',
	'log_summary_generation',
	'log_transcription',
	'log_pdf_extraction',
	'log_storage_operation',
	'FileHandler',
	'UploadValidationError',
]
