"""
Shared fixtures for the case export test suite.

Run with: python -m pytest tests/ -v
"""

import sys
from pathlib import Path

import fitz  # PyMuPDF
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from services.case_export import FormSchemaLoader


@pytest.fixture(autouse=True)
def clear_schema_cache():
    """Every test starts from a freshly loaded form schema."""
    FormSchemaLoader.clear_cache()
    yield
    FormSchemaLoader.clear_cache()


@pytest.fixture
def sample_record():
    """A raw case record mixing camelCase and snake_case keys."""
    return {
        'id': 7,
        'firstName': 'Juan',
        'middle_name': 'D.',
        'last_name': 'Delacruz',
        'sex': 'Male',
        'birthdate': '2010-06-15',
        'religion': 'Catholic',
        'presentAddress': '123 Barangay Sto. Niño, Cebu City',
        'caseType': 'Minor Offense',
        'program_type': 'Residential',
        'fatherName': 'Jose Delacruz',
        'mother_name': 'Luz Delacruz',
        'marriedInChurch': True,
        'civil_marriage': False,
        'problemPresented': 'Truancy and petty theft.',
        'lastUpdated': '2024-03-05T10:00:00Z',
        'familyMembers': [
            {'name': 'Ana Delacruz', 'relation': 'Sister', 'age': 9},
            {'name': 'Ben Delacruz', 'relationship': 'Brother', 'age': '12'},
        ],
        'sacramentalRecords': [
            {'sacrament': 'Baptism', 'dateReceived': '6/20/2010', 'placeParish': 'Sto. Niño'},
        ],
    }


@pytest.fixture
def base_template(tmp_path):
    """A blank two-page A4 PDF with no form fields."""
    path = tmp_path / 'GENERAL_INTAKEFORM.pdf'
    doc = fitz.open()
    for _ in range(2):
        page = doc.new_page(width=595, height=842)
        page.insert_text((40, 60), 'GENERAL INTAKE FORM', fontname='helv', fontsize=12)
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def fillable_path(tmp_path):
    return tmp_path / 'GENERAL_INTAKEFORM_fillable.pdf'


@pytest.fixture
def app(tmp_path):
    """Flask app on an in-memory database with login disabled."""
    from app import create_app
    from models import db

    class TestConfig:
        TESTING = True
        LOGIN_DISABLED = True
        FLASK_ENV = 'testing'
        SECRET_KEY = 'test-secret'
        SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        SQLALCHEMY_TRACK_MODIFICATIONS = False
        CASE_TEMPLATE_DIR = str(tmp_path)
        CASE_BASE_TEMPLATE = 'GENERAL_INTAKEFORM.pdf'
        CASE_FILLABLE_TEMPLATE = 'GENERAL_INTAKEFORM_fillable.pdf'
        SOFFICE_PATH = 'soffice'
        RENDER_NO_SANDBOX = True
        RENDER_TIMEOUT_SECONDS = 5
        CONVERSION_TIMEOUT_SECONDS = 5

    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
