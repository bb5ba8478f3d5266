"""
Field Alias Resolver

Case payloads arrive from the database (snake_case columns) and from the
browser (camelCase keys), often mixed. Every canonical field therefore has
an ordered list of candidate keys, and the first candidate that holds a
real value wins.

Priority rules for the tables below:
    - camelCase before snake_case:  firstName -> first_name
    - specific before generic:      presentAddress -> present_address -> address

Usage:
    from services.case_export.aliases import FieldAliasResolver, FIELD_ALIASES

    first = FieldAliasResolver.resolve(record, FIELD_ALIASES['first_name'])
    fields = FieldAliasResolver.resolve_fields(record, FIELD_ALIASES)
"""

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple


AliasTable = Dict[str, Tuple[str, ...]]


# =============================================================================
# CASE FIELDS
# =============================================================================

IDENTITY_ALIASES: AliasTable = {
    'first_name': ('firstName', 'first_name'),
    'middle_name': ('middleName', 'middle_name'),
    'last_name': ('lastName', 'last_name'),
    'nickname': ('nickname', 'nickName', 'nick_name'),
    'sex': ('sex', 'gender'),
    'birthdate': ('birthdate', 'birthDate', 'birth_date'),
    'age': ('age',),
    'status': ('status',),
    'civil_status': ('civilStatus', 'civil_status', 'status'),
    'religion': ('religion',),
    'nationality': ('nationality',),
    'birthplace': ('birthplace', 'birthPlace', 'birth_place'),
}

ADDRESS_ALIASES: AliasTable = {
    'present_address': ('presentAddress', 'present_address', 'address'),
    'provincial_address': ('provincialAddress', 'provincial_address'),
    'barangay': ('barangay',),
    'municipality': ('municipality',),
    'province': ('province',),
}

REFERRAL_ALIASES: AliasTable = {
    'source_of_referral': ('sourceOfReferral', 'source_of_referral', 'referralSource', 'referral_source'),
    'other_source_of_referral': ('otherSourceOfReferral', 'other_source_of_referral'),
    'date_of_referral': ('dateOfReferral', 'date_of_referral'),
    'address_and_tel': ('addressAndTel', 'address_and_tel'),
    'relation_to_client': ('relationToClient', 'relation_to_client'),
}

PROGRAM_ALIASES: AliasTable = {
    'case_type': ('caseType', 'case_type'),
    'program_type': ('programType', 'program_type'),
    'assigned_house_parent': ('assignedHouseParent', 'assigned_house_parent', 'assignedHome', 'assigned_home'),
    'admission_month': ('admissionMonth', 'admission_month'),
    'admission_year': ('admissionYear', 'admission_year'),
}


def _parent_aliases(prefix: str, attributes: Sequence[str]) -> AliasTable:
    """Build camelCase/snake_case alias pairs for one parent sub-group."""
    table = {}
    for attr in attributes:
        snake = f"{prefix}_{attr}"
        camel = prefix + ''.join(part.capitalize() for part in attr.split('_'))
        table[snake] = (camel, snake)
    return table


_PARENT_ATTRIBUTES = ('name', 'age', 'education', 'occupation', 'other_skills', 'address', 'income', 'living')

PARENT_ALIASES: AliasTable = {
    **_parent_aliases('father', _PARENT_ATTRIBUTES),
    **_parent_aliases('mother', _PARENT_ATTRIBUTES),
    **_parent_aliases('guardian', _PARENT_ATTRIBUTES + ('relation', 'deceased')),
}

CIVIL_STATUS_ALIASES: AliasTable = {
    'married_in_church': ('marriedInChurch', 'married_in_church'),
    'live_in_common_law': ('liveInCommonLaw', 'live_in_common_law'),
    'civil_marriage': ('civilMarriage', 'civil_marriage'),
    'separated': ('separated',),
    'marriage_date_place': ('marriageDatePlace', 'marriage_date_place'),
}

NARRATIVE_ALIASES: AliasTable = {
    'client_description': ('clientDescription', 'client_description', 'briefDescription', 'brief_description'),
    'parents_description': ('parentsDescription', 'parents_description'),
    'problem_presented': ('problemPresented', 'problem_presented'),
    'brief_history': ('briefHistory', 'brief_history'),
    'economic_situation': ('economicSituation', 'economic_situation'),
    'medical_history': ('medicalHistory', 'medical_history'),
    'family_background': ('familyBackground', 'family_background'),
    'assessment': ('assessment',),
    'recommendation': ('recommendation',),
}

RECORD_ALIASES: AliasTable = {
    'case_id': ('id', 'caseId', 'case_id'),
    'display_name': ('name',),
    'last_updated': ('lastUpdated', 'last_updated', 'updatedAt', 'updated_at', 'createdAt', 'created_at'),
    'checklist': ('checklist',),
}

FIELD_ALIASES: AliasTable = {
    **IDENTITY_ALIASES,
    **ADDRESS_ALIASES,
    **REFERRAL_ALIASES,
    **PROGRAM_ALIASES,
    **PARENT_ALIASES,
    **CIVIL_STATUS_ALIASES,
    **NARRATIVE_ALIASES,
}


# =============================================================================
# CHILD COLLECTIONS
# =============================================================================

COLLECTION_ALIASES: AliasTable = {
    'family_members': ('familyMembers', 'family_members', 'family_members_rows'),
    'extended_family': ('extendedFamily', 'extended_family', 'extended_family_rows'),
    'educational_attainment': ('educationalAttainment', 'educational_attainment'),
    'sacramental_records': ('sacramentalRecords', 'sacramental_records'),
    'agencies': ('agencies', 'agenciesPersons', 'agencies_persons'),
    'life_skills': ('lifeSkills', 'life_skills', 'lifeSkillsData'),
    'vital_signs': ('vitalSigns', 'vital_signs', 'vitalSignsData'),
}

CHILD_COLUMN_ALIASES: Dict[str, AliasTable] = {
    'family_members': {
        'name': ('name',),
        'relation': ('relation', 'relationship'),
        'age': ('age',),
        'sex': ('sex', 'gender'),
        'status': ('status', 'civilStatus', 'civil_status'),
        'education': ('education', 'educationalAttainment', 'educational_attainment'),
        'address': ('address',),
        'occupation': ('occupation',),
        'income': ('income', 'monthlyIncome', 'monthly_income'),
    },
    'extended_family': {
        'name': ('name',),
        'relationship': ('relationship', 'relation'),
        'age': ('age',),
        'sex': ('sex', 'gender'),
        'status': ('status', 'civilStatus', 'civil_status'),
        'education': ('education', 'educationalAttainment', 'educational_attainment'),
        'occupation': ('occupation',),
        'income': ('income', 'monthlyIncome', 'monthly_income'),
    },
    'educational_attainment': {
        'level': ('level',),
        'school_name': ('schoolName', 'school_name'),
        'school_address': ('schoolAddress', 'school_address'),
        'year_completed': ('yearCompleted', 'year_completed'),
    },
    'sacramental_records': {
        'sacrament': ('sacrament',),
        'date_received': ('dateReceived', 'date_received'),
        'place_parish': ('placeParish', 'place_parish'),
    },
    'agencies': {
        'name': ('name',),
        'address_date_duration': ('addressDateDuration', 'address_date_duration'),
        'services_received': ('servicesReceived', 'services_received'),
    },
    'life_skills': {
        'activity': ('activity',),
        'date_completed': ('dateCompleted', 'date_completed'),
        'performance_rating': ('performanceRating', 'performance_rating'),
        'notes': ('notes',),
    },
    'vital_signs': {
        'date_recorded': ('dateRecorded', 'date_recorded'),
        'blood_pressure': ('bloodPressure', 'blood_pressure'),
        'heart_rate': ('heartRate', 'heart_rate'),
        'temperature': ('temperature',),
        'weight': ('weight',),
        'height': ('height',),
        'notes': ('notes',),
    },
}


def is_present(value: Any) -> bool:
    """A value counts as present unless it is None or a blank string."""
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


class FieldAliasResolver:
    """
    Resolves canonical field values from loosely-keyed records.

    Records may be dicts or objects (e.g. SQLAlchemy rows); both are
    read without side effects.
    """

    @classmethod
    def resolve(cls, record: Any, candidates: Sequence[str]) -> Optional[Any]:
        """
        Return the value of the first candidate key holding a present value.

        Args:
            record: Mapping or object to read from
            candidates: Ordered candidate keys, highest priority first

        Returns:
            The winning value, or None if no candidate is present
        """
        if record is None:
            return None

        for key in candidates:
            value = cls._get(record, key)
            if is_present(value):
                return value
        return None

    @classmethod
    def resolve_fields(cls, record: Any, table: Mapping[str, Sequence[str]]) -> Dict[str, Any]:
        """Resolve every canonical field in an alias table."""
        return {name: cls.resolve(record, candidates) for name, candidates in table.items()}

    @staticmethod
    def _get(record: Any, key: str) -> Any:
        if isinstance(record, Mapping):
            return record.get(key)
        return getattr(record, key, None)


resolve_alias = FieldAliasResolver.resolve
resolve_fields = FieldAliasResolver.resolve_fields
