"""
CSV Export

One row per case with a fixed column set. Dates are reduced to
YYYY-MM-DD and line breaks flattened so every case stays on one line.
"""

import csv
import io
import logging
from typing import Sequence, Tuple

from .transforms import apply_transform
from .types import NormalizedCase

logger = logging.getLogger(__name__)

# (header, source, transform); source is a canonical field or a case attribute
CSV_COLUMNS: Tuple[Tuple[str, str, str], ...] = (
    ('ID', 'case_id', 'none'),
    ('Last Name', 'last_name', 'flatten'),
    ('First Name', 'first_name', 'flatten'),
    ('Middle Name', 'middle_name', 'flatten'),
    ('Nickname', 'nickname', 'flatten'),
    ('Sex', 'sex', 'flatten'),
    ('Birthdate', 'birthdate', 'date'),
    ('Age', 'age', 'none'),
    ('Status', 'status', 'flatten'),
    ('Program Type', 'program_type', 'flatten'),
    ('Case Type', 'case_type', 'flatten'),
    ('Present Address', 'present_address', 'flatten'),
    ('Provincial Address', 'provincial_address', 'flatten'),
    ('Source of Referral', 'source_of_referral', 'flatten'),
    ('Date of Referral', 'date_of_referral', 'date'),
    ('Relation to Client', 'relation_to_client', 'flatten'),
    ('Father', 'father_name', 'flatten'),
    ('Mother', 'mother_name', 'flatten'),
    ('Guardian', 'guardian_name', 'flatten'),
    ('Married in Church', 'married_in_church', 'yes_no'),
    ('Live-in/Common Law', 'live_in_common_law', 'yes_no'),
    ('Civil Marriage', 'civil_marriage', 'yes_no'),
    ('Separated', 'separated', 'yes_no'),
    ('Last Updated', 'last_updated', 'date'),
)

CASE_ATTRIBUTES = {'case_id', 'last_updated'}


class CaseCsvExporter:
    """
    Usage:
        csv_bytes = CaseCsvExporter.export(cases)
    """

    @classmethod
    def export(cls, cases: Sequence[NormalizedCase]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator='\r\n')
        writer.writerow([header for header, _, _ in CSV_COLUMNS])
        for case in cases:
            writer.writerow(cls.row(case))

        logger.debug(f"Exported {len(cases)} case(s) to CSV")
        return buffer.getvalue().encode('utf-8')

    @staticmethod
    def row(case: NormalizedCase):
        values = []
        for _, source, transform in CSV_COLUMNS:
            if source in CASE_ATTRIBUTES:
                value = getattr(case, source)
            else:
                value = case.fields.get(source)
            values.append(apply_transform(value, transform))
        return values
