import os
from datetime import timedelta

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Config:
    # Environment
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')

    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///cases.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PERMANENT_SESSION_LIFETIME = timedelta(minutes=30)

    # Intake form PDF templates
    CASE_TEMPLATE_DIR = os.getenv('CASE_TEMPLATE_DIR', os.path.join(BASE_DIR, 'static', 'template'))
    CASE_BASE_TEMPLATE = os.getenv('CASE_BASE_TEMPLATE', 'GENERAL_INTAKEFORM.pdf')
    CASE_FILLABLE_TEMPLATE = os.getenv('CASE_FILLABLE_TEMPLATE', 'GENERAL_INTAKEFORM_fillable.pdf')

    # Headless Chromium (HTML -> PDF)
    RENDER_NO_SANDBOX = os.getenv('RENDER_NO_SANDBOX', 'false').lower() == 'true'
    RENDER_TIMEOUT_SECONDS = int(os.getenv('RENDER_TIMEOUT_SECONDS', 60))

    # LibreOffice (DOCX -> PDF)
    SOFFICE_PATH = os.getenv('SOFFICE_PATH', 'soffice')
    CONVERSION_TIMEOUT_SECONDS = int(os.getenv('CONVERSION_TIMEOUT_SECONDS', 120))
