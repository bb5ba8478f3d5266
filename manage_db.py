#!/usr/bin/env python3
"""
Case Database Management Script
Database setup, migrations, backups and export template provisioning.

Usage: python manage_db.py <command> [args]
"""

import logging
import os
import shutil
import sys
from datetime import datetime

from flask_migrate import current, history, upgrade

from app import create_app
from models import Case, db

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def sqlite_path(app):
    """File path of a SQLite database URI, or None for other databases."""
    db_uri = app.config['SQLALCHEMY_DATABASE_URI']
    if not db_uri.startswith('sqlite:///'):
        return None
    return db_uri.replace('sqlite:///', '')


def init_database():
    """Create every table for a fresh database."""
    app = create_app()

    with app.app_context():
        db_file = sqlite_path(app)
        if db_file and os.path.dirname(db_file):
            os.makedirs(os.path.dirname(db_file), exist_ok=True)

        db.create_all()
        print(f"Tables created in {app.config['SQLALCHEMY_DATABASE_URI']}")


def upgrade_database():
    """Apply pending migrations."""
    app = create_app()

    with app.app_context():
        print(f"Upgrading database: {app.config['SQLALCHEMY_DATABASE_URI']}")
        upgrade()
        print("Database upgraded successfully!")


def show_status():
    """Migration revision plus case counts."""
    app = create_app()

    with app.app_context():
        print(f"Database: {app.config['SQLALCHEMY_DATABASE_URI']}")
        print("\nCurrent revision:")
        current()
        print("\nMigration history:")
        history()
        print(f"\nCases: {db.session.query(Case).count()}")


def backup_database():
    """Copy the SQLite database file next to itself with a timestamp."""
    app = create_app()
    db_file = sqlite_path(app)

    if db_file is None:
        print("Backup only supported for SQLite databases")
        return
    if not os.path.exists(db_file):
        print(f"Database file not found: {db_file}")
        return

    backup_file = f"{db_file}.backup_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    shutil.copy2(db_file, backup_file)
    print(f"Database backed up to: {backup_file}")


def provision_template():
    """Create the fillable intake PDF from the base template ahead of the first export."""
    from services.case_export import ExportSettings, FormSchemaLoader, TemplateProvisioner

    app = create_app()
    settings = ExportSettings.from_config(app.config)
    schema = FormSchemaLoader.load(settings.form_schema_path)

    print(f"Base template:     {settings.base_path}")
    print(f"Fillable template: {settings.fillable_path}")
    result = TemplateProvisioner.ensure_fillable(settings.base_path, settings.fillable_path, schema)
    print(f"Result: {result.status.value} ({len(schema.fields)} fields declared)")
    if result.error:
        print(f"Error: {result.error}")
    if not result.is_usable:
        sys.exit(1)


def export_case(case_id, output_dir='.'):
    """Write the styled PDF, filled template, DOCX and CSV of one case to disk."""
    from services.case_export import CaseExportError, CaseExporter, ExportSettings

    app = create_app()

    with app.app_context():
        exporter = CaseExporter(ExportSettings.from_config(app.config))
        record = exporter.load_record(case_id=case_id)

        for operation in (exporter.case_template_pdf, exporter.case_docx, exporter.case_csv, exporter.case_pdf):
            try:
                document = operation(record)
            except CaseExportError as e:
                logger.error(f"{operation.__name__} failed for case {case_id}: {e}")
                continue

            path = os.path.join(output_dir, document.filename)
            with open(path, 'wb') as handle:
                handle.write(document.content)
            print(f"Wrote {path} ({document.size} bytes)")


COMMANDS = {
    'init': (init_database, "Create all tables"),
    'upgrade': (upgrade_database, "Upgrade database to latest migration"),
    'status': (show_status, "Show migration status and case count"),
    'backup': (backup_database, "Create database backup (SQLite only)"),
    'provision-template': (provision_template, "Create the fillable intake PDF template"),
    'export-case': (export_case, "Export one case: export-case <id> [output_dir]"),
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        if len(sys.argv) >= 2:
            print(f"Unknown command: {sys.argv[1]}")
        print("Usage: python manage_db.py <command>")
        print("Commands:")
        for name, (_, description) in COMMANDS.items():
            print(f"  {name:<20} - {description}")
        return

    command, args = sys.argv[1], sys.argv[2:]
    handler, _ = COMMANDS[command]

    try:
        handler(*args)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
