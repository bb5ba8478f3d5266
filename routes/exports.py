# routes/exports.py
"""
Case Export Routes
Downloadable PDF, DOCX and CSV renditions of one case or a batch of cases
"""

import io
import logging
from functools import wraps

from flask import Blueprint, current_app, jsonify, request, send_file
from flask_login import login_required

from services.case_export import (
    SAMPLE_CASE,
    CaseExporter,
    CaseExportError,
    ExportSettings,
)

logger = logging.getLogger(__name__)

exports_bp = Blueprint('exports', __name__, url_prefix='/export')


def export_errors(f):
    """Decorator translating export pipeline errors into JSON responses."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except CaseExportError as e:
            logger.error(f"Export failed in {f.__name__}: {e}")
            return jsonify({'success': False, 'error': str(e)}), e.status_code
    return decorated_function


def get_exporter():
    return CaseExporter(ExportSettings.from_config(current_app.config))


def send_document(document):
    return send_file(
        io.BytesIO(document.content),
        mimetype=document.mimetype,
        as_attachment=True,
        download_name=document.filename,
    )


def page_args():
    """Page format and orientation from the query string."""
    page_format = request.args.get('format', 'A4')
    landscape = request.args.get('landscape', 'false').lower() == 'true'
    return page_format, landscape


def json_body():
    """The request's JSON object, or an empty dict for any other body."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return {}
    return data


def case_payload():
    """The posted case: either the JSON body itself or its 'case' member."""
    data = json_body()
    if isinstance(data.get('case'), dict):
        return data['case']
    return data


def batch_args():
    data = json_body()
    list_only = bool(data.get('listOnly')) or request.args.get('listOnly', 'false').lower() == 'true'
    return data.get('ids'), data.get('cases'), list_only


# =============================================================================
# STYLED PDF (HTML -> PDF)
# =============================================================================

@exports_bp.route('/case/<int:case_id>/pdf')
@login_required
@export_errors
def case_pdf(case_id):
    exporter = get_exporter()
    page_format, landscape = page_args()
    record = exporter.load_record(case_id=case_id)
    return send_document(exporter.case_pdf(record, page_format=page_format, landscape=landscape))


@exports_bp.route('/case/pdf', methods=['POST'])
@login_required
@export_errors
def case_pdf_from_payload():
    exporter = get_exporter()
    page_format, landscape = page_args()
    record = exporter.load_record(payload=case_payload())
    return send_document(exporter.case_pdf(record, page_format=page_format, landscape=landscape))


# =============================================================================
# FILLED TEMPLATE PDF
# =============================================================================

@exports_bp.route('/case/<int:case_id>/pdf-template')
@login_required
@export_errors
def case_template_pdf(case_id):
    exporter = get_exporter()
    record = exporter.load_record(case_id=case_id)
    return send_document(exporter.case_template_pdf(record))


@exports_bp.route('/case/pdf-template', methods=['POST'])
@login_required
@export_errors
def case_template_pdf_from_payload():
    exporter = get_exporter()
    record = exporter.load_record(payload=case_payload())
    return send_document(exporter.case_template_pdf(record))


# =============================================================================
# WORD DOCUMENTS
# =============================================================================

@exports_bp.route('/case/<int:case_id>/docx')
@login_required
@export_errors
def case_docx(case_id):
    exporter = get_exporter()
    record = exporter.load_record(case_id=case_id)
    return send_document(exporter.case_docx(record))


@exports_bp.route('/case/docx', methods=['POST'])
@login_required
@export_errors
def case_docx_from_payload():
    exporter = get_exporter()
    record = exporter.load_record(payload=case_payload())
    return send_document(exporter.case_docx(record))


@exports_bp.route('/case/<int:case_id>/intake-docx')
@login_required
@export_errors
def intake_docx(case_id):
    exporter = get_exporter()
    record = exporter.load_record(case_id=case_id)
    return send_document(exporter.intake_docx(record))


@exports_bp.route('/case/intake-docx', methods=['POST'])
@login_required
@export_errors
def intake_docx_from_payload():
    exporter = get_exporter()
    record = exporter.load_record(payload=case_payload())
    return send_document(exporter.intake_docx(record))


@exports_bp.route('/case/<int:case_id>/docx-pdf')
@login_required
@export_errors
def case_docx_pdf(case_id):
    exporter = get_exporter()
    record = exporter.load_record(case_id=case_id)
    return send_document(exporter.case_docx_pdf(record))


# =============================================================================
# CSV
# =============================================================================

@exports_bp.route('/case/<int:case_id>/csv')
@login_required
@export_errors
def case_csv(case_id):
    exporter = get_exporter()
    record = exporter.load_record(case_id=case_id)
    return send_document(exporter.case_csv(record))


# =============================================================================
# BATCH
# =============================================================================

@exports_bp.route('/cases/pdf', methods=['POST'])
@login_required
@export_errors
def cases_pdf():
    exporter = get_exporter()
    page_format, landscape = page_args()
    ids, cases, list_only = batch_args()
    batch = exporter.collect(ids=ids, cases=cases, list_only=list_only)
    return send_document(exporter.batch_pdf(batch, page_format=page_format, landscape=landscape))


@exports_bp.route('/cases/docx', methods=['POST'])
@login_required
@export_errors
def cases_docx():
    exporter = get_exporter()
    ids, cases, list_only = batch_args()
    batch = exporter.collect(ids=ids, cases=cases, list_only=list_only)
    return send_document(exporter.batch_docx(batch))


@exports_bp.route('/cases/csv', methods=['POST'])
@login_required
@export_errors
def cases_csv():
    exporter = get_exporter()
    ids, cases, list_only = batch_args()
    batch = exporter.collect(ids=ids, cases=cases, list_only=list_only)
    return send_document(exporter.batch_csv(batch))


# =============================================================================
# SAMPLE PREVIEWS
# =============================================================================

def sample_preview(f):
    """Decorator disabling sample previews in production."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_app.config.get('FLASK_ENV') == 'production':
            return jsonify({'success': False, 'error': 'Sample preview disabled in production'}), 403
        return f(*args, **kwargs)
    return decorated_function


@exports_bp.route('/sample/pdf')
@login_required
@sample_preview
@export_errors
def sample_pdf():
    exporter = get_exporter()
    page_format, landscape = page_args()
    return send_document(exporter.case_pdf(SAMPLE_CASE, page_format=page_format, landscape=landscape))


@exports_bp.route('/sample/pdf-template')
@login_required
@sample_preview
@export_errors
def sample_template_pdf():
    exporter = get_exporter()
    return send_document(exporter.case_template_pdf(SAMPLE_CASE))
