from __future__ import annotations

import io
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from PyPDF2 import PdfReader

from modules.utils import get_logger, log_pdf_extraction

LOG = get_logger()


class PDFExtractionError(RuntimeError):
    pass


@dataclass
class ExtractedDocument:
    page_count: int
    pages: List[List[str]] = field(default_factory=list)

    @property
    def text(self) -> str:
        # fragments joined by spaces, pages by newlines, whole result trimmed
        return ''.join(' '.join(fragments) + '\n' for fragments in self.pages).strip()


def _page_fragments(page) -> List[str]:
    fragments: List[str] = []

    def _visit(text, *_args):
        fragments.append(text)

    page.extract_text(visitor_text=_visit)
    return fragments


def extract_document(source: Union[str, Path, bytes], max_pages: Optional[int] = None) -> ExtractedDocument:
    """Read every page's text fragments in order."""
    try:
        if isinstance(source, (bytes, bytearray)):
            reader = PdfReader(io.BytesIO(source))
        else:
            path = Path(source)
            if not path.exists():
                raise FileNotFoundError(str(path))
            reader = PdfReader(str(path))
        pages = reader.pages[:max_pages] if max_pages else reader.pages
        doc = ExtractedDocument(page_count=len(reader.pages))
        for page in pages:
            doc.pages.append(_page_fragments(page))
        return doc
    except FileNotFoundError:
        raise
    except Exception as e:
        LOG.warning('pdf_read_failed', extra={'error': str(e)})
        raise PDFExtractionError(f'PyPDF2 failed to read PDF: {e}') from e


def extract_text_from_pdf(source: Union[str, Path, bytes], request_id: Optional[str] = None) -> str:
    start = time.time()
    doc = extract_document(source)
    text = doc.text
    log_pdf_extraction(request_id or '', doc.page_count, len(text), int((time.time() - start) * 1000))
    return text
