"""
Document Converter

Converts DOCX bytes to PDF with LibreOffice running headless.

Each conversion gets its own temporary directory (timestamped prefix,
random suffix), holding the input, the output and a private LibreOffice
user profile. It is removed afterwards whether or not the conversion
succeeded.
"""

import logging
import os
import shutil
import subprocess
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path

from .exceptions import ConversionFailed

logger = logging.getLogger(__name__)


@contextmanager
def conversion_workspace():
    """Yield a fresh temporary directory and always remove it."""
    tmpdir = tempfile.mkdtemp(prefix=f"docx2pdf-{int(time.time() * 1000)}-")
    try:
        yield tmpdir
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


class DocumentConverter:
    """
    DOCX to PDF converter backed by `soffice`.

    Usage:
        converter = DocumentConverter(soffice_path='soffice', timeout_seconds=120)
        pdf_bytes = converter.docx_to_pdf(docx_bytes)
    """

    def __init__(self, soffice_path: str = 'soffice', timeout_seconds: float = 120):
        self.soffice_path = soffice_path
        self.timeout_seconds = timeout_seconds

    def docx_to_pdf(self, docx_bytes: bytes) -> bytes:
        """
        Convert a DOCX document to PDF.

        Raises:
            ConversionFailed: Non-zero exit, no output file, missing
                executable or timeout
        """
        with conversion_workspace() as tmpdir:
            input_path = os.path.join(tmpdir, 'document.docx')
            output_path = os.path.join(tmpdir, 'document.pdf')
            with open(input_path, 'wb') as handle:
                handle.write(docx_bytes)

            # LibreOffice user profile private to this conversion
            profile = Path(tmpdir, 'profile').as_uri()
            cmd = [
                self.soffice_path, f'-env:UserInstallation={profile}',
                '--headless', '--convert-to', 'pdf', '--outdir', tmpdir, input_path,
            ]
            try:
                result = subprocess.run(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    timeout=self.timeout_seconds,
                )
            except OSError as e:
                logger.error(f"Office converter could not be started ({self.soffice_path}): {e}")
                raise ConversionFailed(f"Office converter not available: {self.soffice_path}", cause=e)
            except subprocess.TimeoutExpired as e:
                logger.error(f"Office conversion exceeded {self.timeout_seconds}s")
                raise ConversionFailed(f"Conversion timed out after {self.timeout_seconds}s", cause=e)

            stderr = (result.stderr or b'').decode('utf-8', errors='replace').strip()
            if result.returncode != 0:
                logger.error(f"Office conversion failed (exit {result.returncode}): {stderr}")
                raise ConversionFailed(
                    f"Conversion failed with exit code {result.returncode}",
                    returncode=result.returncode,
                    stderr=stderr,
                )

            if not os.path.exists(output_path):
                logger.error(f"Office conversion produced no PDF: {stderr}")
                raise ConversionFailed("Conversion produced no PDF", returncode=result.returncode, stderr=stderr)

            with open(output_path, 'rb') as handle:
                pdf_bytes = handle.read()

        logger.info(f"Converted DOCX to PDF ({len(pdf_bytes)} bytes)")
        return pdf_bytes
