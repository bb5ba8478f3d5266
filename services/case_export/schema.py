"""
Case Document Layout

Labels, section groupings and child-table layouts shared by every
renderer. Renderers differ in how they treat empty values, not in
which fields they show or what they call them.
"""

from typing import Tuple

from .aliases import FIELD_ALIASES
from .types import ChildTableSpec, SectionSpec


BRAND = 'HOPETRACK'

CANONICAL_FIELDS = frozenset(FIELD_ALIASES)

# Tri-state checkbox fields (True / False / None)
CIVIL_STATUS_FIELDS: Tuple[Tuple[str, str], ...] = (
    ('married_in_church', 'Married in church'),
    ('live_in_common_law', 'Live-in/Common Law'),
    ('civil_marriage', 'Civil Marriage'),
    ('separated', 'Separated'),
)

BOOLEAN_FIELDS = frozenset(name for name, _ in CIVIL_STATUS_FIELDS)

DATE_FIELDS = frozenset({'birthdate', 'date_of_referral'})


# =============================================================================
# KEY / VALUE SECTIONS
# =============================================================================

CLIENT_SECTION = SectionSpec('Client Information', (
    ('first_name', 'First Name'),
    ('last_name', 'Last Name'),
    ('middle_name', 'Middle Name'),
    ('sex', 'Sex'),
    ('birthdate', 'Birthdate'),
    ('age', 'Age'),
    ('status', 'Status'),
    ('religion', 'Religion'),
    ('nationality', 'Nationality'),
    ('nickname', 'Nickname'),
))

ADDRESS_SECTION = SectionSpec('Addresses', (
    ('present_address', 'Present Address'),
    ('provincial_address', 'Provincial Address'),
    ('birthplace', 'Birthplace'),
    ('barangay', 'Barangay'),
    ('municipality', 'Municipality'),
    ('province', 'Province'),
))

REFERRAL_SECTION = SectionSpec('Referral', (
    ('date_of_referral', 'Date of Referral'),
    ('source_of_referral', 'Source of Referral'),
    ('other_source_of_referral', 'Other Source of Referral'),
    ('relation_to_client', 'Relation to Client'),
    ('address_and_tel', 'Address & Tel'),
))

CASE_DETAILS_SECTION = SectionSpec('Case Details', (
    ('case_type', 'Case Type'),
    ('program_type', 'Program Type'),
    ('assigned_house_parent', 'Assigned House Parent'),
    ('admission_month', 'Admission Month'),
    ('admission_year', 'Admission Year'),
    ('mother_name', 'Mother'),
    ('father_name', 'Father'),
    ('guardian_name', 'Guardian'),
))

CIVIL_STATUS_SECTION = SectionSpec(
    'Civil Status of Parents',
    CIVIL_STATUS_FIELDS + (('marriage_date_place', 'Date and Place'),),
)

KEY_VALUE_SECTIONS: Tuple[SectionSpec, ...] = (
    CLIENT_SECTION,
    ADDRESS_SECTION,
    REFERRAL_SECTION,
    CASE_DETAILS_SECTION,
    CIVIL_STATUS_SECTION,
)


# =============================================================================
# PARENTS / GUARDIAN
# =============================================================================

def _parent_section(prefix: str, title: str, possessive: str, extra=()) -> SectionSpec:
    fields = (
        (f'{prefix}_name', f"{possessive} Name"),
        (f'{prefix}_age', f"{possessive} Age"),
        (f'{prefix}_occupation', f"{possessive} Occupation"),
        (f'{prefix}_education', f"{possessive} Educational Attainment"),
        (f'{prefix}_other_skills', f"{possessive} Other Skills"),
        (f'{prefix}_address', f"{possessive} Address and Tel. Nos."),
        (f'{prefix}_income', f"{possessive} Income"),
        (f'{prefix}_living', f"{title} Living"),
    )
    return SectionSpec(title, fields + tuple(extra))


PARENT_SECTIONS: Tuple[SectionSpec, ...] = (
    _parent_section('father', 'Father', "Father's"),
    _parent_section('mother', 'Mother', "Mother's"),
    _parent_section('guardian', 'Guardian', "Guardian's", extra=(
        ('guardian_relation', "Guardian's Relation to Client"),
        ('guardian_deceased', 'Guardian Deceased'),
    )),
)


# =============================================================================
# NARRATIVE
# =============================================================================

NARRATIVE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ('problem_presented', 'Problem Presented'),
    ('brief_history', 'Brief History'),
    ('economic_situation', 'Economic Situation'),
    ('medical_history', 'Medical History'),
    ('family_background', 'Family Background'),
    ('client_description', 'Client Description'),
    ('parents_description', "Parents' Description"),
    ('recommendation', 'Recommendation'),
    ('assessment', 'Assessment'),
)

NARRATIVE_FIELD_NAMES = frozenset(name for name, _ in NARRATIVE_FIELDS)


# =============================================================================
# CHILD COLLECTIONS
# =============================================================================

FAMILY_TABLE = ChildTableSpec('family_members', 'Family Composition', (
    ('name', 'Name'),
    ('relation', 'Relation'),
    ('age', 'Age'),
    ('sex', 'Sex'),
    ('status', 'Status'),
    ('education', 'Education'),
    ('address', 'Address'),
    ('occupation', 'Occupation'),
    ('income', 'Income'),
), min_rows=5)

EXTENDED_FAMILY_TABLE = ChildTableSpec('extended_family', 'Extended Family', (
    ('name', 'Name'),
    ('relationship', 'Relationship'),
    ('age', 'Age'),
    ('sex', 'Sex'),
    ('status', 'Status'),
    ('education', 'Education'),
    ('occupation', 'Occupation'),
    ('income', 'Income'),
), min_rows=3)

EDUCATION_TABLE = ChildTableSpec('educational_attainment', 'Educational Attainment', (
    ('level', 'Level'),
    ('school_name', 'School Name'),
    ('school_address', 'School Address'),
    ('year_completed', 'Year Completed'),
), min_rows=4)

SACRAMENT_TABLE = ChildTableSpec('sacramental_records', 'Sacramental Records', (
    ('sacrament', 'Sacrament'),
    ('date_received', 'Date Received'),
    ('place_parish', 'Place/Parish'),
), min_rows=3)

AGENCY_TABLE = ChildTableSpec('agencies', 'Agencies / Persons', (
    ('name', 'Name'),
    ('address_date_duration', 'Address / Date / Duration'),
    ('services_received', 'Services Received'),
), min_rows=3)

LIFE_SKILLS_TABLE = ChildTableSpec('life_skills', 'Life Skills Tracking', (
    ('activity', 'Activity'),
    ('date_completed', 'Date Completed'),
    ('performance_rating', 'Performance Rating'),
    ('notes', 'Notes'),
), min_rows=3)

VITAL_SIGNS_TABLE = ChildTableSpec('vital_signs', 'Vital Signs Monitoring', (
    ('date_recorded', 'Date Recorded'),
    ('blood_pressure', 'Blood Pressure'),
    ('heart_rate', 'Heart Rate'),
    ('temperature', 'Temperature'),
    ('weight', 'Weight'),
    ('height', 'Height'),
    ('notes', 'Notes'),
), min_rows=3)

CHILD_TABLES: Tuple[ChildTableSpec, ...] = (
    FAMILY_TABLE,
    EXTENDED_FAMILY_TABLE,
    EDUCATION_TABLE,
    SACRAMENT_TABLE,
    AGENCY_TABLE,
    LIFE_SKILLS_TABLE,
    VITAL_SIGNS_TABLE,
)

CHILD_DATE_COLUMNS = {
    'sacramental_records': frozenset({'date_received'}),
    'life_skills': frozenset({'date_completed'}),
    'vital_signs': frozenset({'date_recorded'}),
}


def program_label(case) -> str:
    """Program column of summary tables: case type, else program type."""
    return case.get('case_type') or case.get('program_type') or ''
