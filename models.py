# models.py
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from datetime import datetime
from sqlalchemy.orm import declared_attr
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256))
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='social_worker')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.username}>'


class Case(db.Model):
    """A client case: identity, family, referral and narrative intake data."""
    __tablename__ = 'cases'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255))
    created_by_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'), nullable=True)

    # Identity
    first_name = db.Column(db.String(100))
    middle_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    nickname = db.Column(db.String(100))
    sex = db.Column(db.String(20))
    birthdate = db.Column(db.Date)
    age = db.Column(db.String(10))  # Stored verbatim when entered; otherwise computed at export
    status = db.Column(db.String(50))
    civil_status = db.Column(db.String(50))
    religion = db.Column(db.String(100))
    nationality = db.Column(db.String(100))
    birthplace = db.Column(db.String(255))

    # Addresses
    present_address = db.Column(db.String(500))
    provincial_address = db.Column(db.String(500))
    barangay = db.Column(db.String(100))
    municipality = db.Column(db.String(100))
    province = db.Column(db.String(100))

    # Referral
    source_of_referral = db.Column(db.String(255))
    other_source_of_referral = db.Column(db.String(255))
    date_of_referral = db.Column(db.Date)
    address_and_tel = db.Column(db.String(500))
    relation_to_client = db.Column(db.String(100))

    # Program
    case_type = db.Column(db.String(100))
    program_type = db.Column(db.String(100))
    assigned_house_parent = db.Column(db.String(255))
    admission_month = db.Column(db.String(20))
    admission_year = db.Column(db.String(10))

    # Father
    father_name = db.Column(db.String(255))
    father_age = db.Column(db.String(10))
    father_education = db.Column(db.String(255))
    father_occupation = db.Column(db.String(255))
    father_other_skills = db.Column(db.String(255))
    father_address = db.Column(db.String(500))
    father_income = db.Column(db.String(100))
    father_living = db.Column(db.String(50))

    # Mother
    mother_name = db.Column(db.String(255))
    mother_age = db.Column(db.String(10))
    mother_education = db.Column(db.String(255))
    mother_occupation = db.Column(db.String(255))
    mother_other_skills = db.Column(db.String(255))
    mother_address = db.Column(db.String(500))
    mother_income = db.Column(db.String(100))
    mother_living = db.Column(db.String(50))

    # Guardian
    guardian_name = db.Column(db.String(255))
    guardian_age = db.Column(db.String(10))
    guardian_education = db.Column(db.String(255))
    guardian_occupation = db.Column(db.String(255))
    guardian_other_skills = db.Column(db.String(255))
    guardian_address = db.Column(db.String(500))
    guardian_income = db.Column(db.String(100))
    guardian_living = db.Column(db.String(50))
    guardian_relation = db.Column(db.String(100))
    guardian_deceased = db.Column(db.String(50))

    # Civil status of parents
    married_in_church = db.Column(db.Boolean, nullable=True)
    live_in_common_law = db.Column(db.Boolean, nullable=True)
    civil_marriage = db.Column(db.Boolean, nullable=True)
    separated = db.Column(db.Boolean, nullable=True)
    marriage_date_place = db.Column(db.String(255))

    # Narrative
    client_description = db.Column(db.Text)
    parents_description = db.Column(db.Text)
    problem_presented = db.Column(db.Text)
    brief_history = db.Column(db.Text)
    economic_situation = db.Column(db.Text)
    medical_history = db.Column(db.Text)
    family_background = db.Column(db.Text)
    assessment = db.Column(db.Text)
    recommendation = db.Column(db.Text)

    checklist = db.Column(db.JSON, nullable=True)  # [{text, timestamp}, ...]

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    last_updated = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                             onupdate=datetime.utcnow)

    created_by = db.relationship('User', backref=db.backref('cases', lazy=True))

    # Child collections, replaced wholesale on save and deleted with the case
    family_members = db.relationship('FamilyMember', backref='case', lazy='select',
                                     cascade='all, delete-orphan', order_by='FamilyMember.position')
    extended_family = db.relationship('ExtendedFamilyMember', backref='case', lazy='select',
                                      cascade='all, delete-orphan', order_by='ExtendedFamilyMember.position')
    educational_attainment = db.relationship('EducationalAttainment', backref='case', lazy='select',
                                             cascade='all, delete-orphan', order_by='EducationalAttainment.position')
    sacramental_records = db.relationship('SacramentalRecord', backref='case', lazy='select',
                                          cascade='all, delete-orphan', order_by='SacramentalRecord.position')
    agencies = db.relationship('AgencyContact', backref='case', lazy='select',
                               cascade='all, delete-orphan', order_by='AgencyContact.position')
    life_skills = db.relationship('LifeSkillEntry', backref='case', lazy='select',
                                  cascade='all, delete-orphan', order_by='LifeSkillEntry.position')
    vital_signs = db.relationship('VitalSignsEntry', backref='case', lazy='select',
                                  cascade='all, delete-orphan', order_by='VitalSignsEntry.position')

    def replace_collection(self, key, rows):
        """Replace a child collection with new rows (dicts of column values)."""
        model = CHILD_MODELS[key]
        columns = {c.name for c in model.__table__.columns} - {'id', 'case_id', 'position'}
        setattr(self, key, [
            model(position=index, **{k: v for k, v in row.items() if k in columns})
            for index, row in enumerate(rows)
        ])

    def to_dict(self):
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}

    def __repr__(self):
        return f'<Case {self.id} {self.first_name} {self.last_name}>'


class CaseChildMixin:
    """Columns shared by every case child row."""
    id = db.Column(db.Integer, primary_key=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    @declared_attr
    def case_id(cls):
        return db.Column(db.Integer, db.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False, index=True)

    def to_dict(self):
        return {c.name: getattr(self, c.name) for c in self.__table__.columns
                if c.name not in ('id', 'case_id', 'position')}


class FamilyMember(CaseChildMixin, db.Model):
    __tablename__ = 'family_members'

    name = db.Column(db.String(255))
    relation = db.Column(db.String(100))
    age = db.Column(db.String(10))
    sex = db.Column(db.String(20))
    status = db.Column(db.String(50))
    education = db.Column(db.String(255))
    address = db.Column(db.String(500))
    occupation = db.Column(db.String(255))
    income = db.Column(db.String(100))


class ExtendedFamilyMember(CaseChildMixin, db.Model):
    __tablename__ = 'extended_family'

    name = db.Column(db.String(255))
    relationship = db.Column(db.String(100))
    age = db.Column(db.String(10))
    sex = db.Column(db.String(20))
    status = db.Column(db.String(50))
    education = db.Column(db.String(255))
    occupation = db.Column(db.String(255))
    income = db.Column(db.String(100))


class EducationalAttainment(CaseChildMixin, db.Model):
    __tablename__ = 'educational_attainment'

    level = db.Column(db.String(100))
    school_name = db.Column(db.String(255))
    school_address = db.Column(db.String(500))
    year_completed = db.Column(db.String(20))


class SacramentalRecord(CaseChildMixin, db.Model):
    __tablename__ = 'sacramental_records'

    sacrament = db.Column(db.String(100))
    date_received = db.Column(db.Date)
    place_parish = db.Column(db.String(255))


class AgencyContact(CaseChildMixin, db.Model):
    __tablename__ = 'agencies_persons'

    name = db.Column(db.String(255))
    address_date_duration = db.Column(db.String(500))
    services_received = db.Column(db.Text)


class LifeSkillEntry(CaseChildMixin, db.Model):
    __tablename__ = 'life_skills'

    activity = db.Column(db.String(255))
    date_completed = db.Column(db.Date)
    performance_rating = db.Column(db.String(50))
    notes = db.Column(db.Text)


class VitalSignsEntry(CaseChildMixin, db.Model):
    __tablename__ = 'vital_signs'

    date_recorded = db.Column(db.Date)
    blood_pressure = db.Column(db.String(20))
    heart_rate = db.Column(db.String(20))
    temperature = db.Column(db.String(20))
    weight = db.Column(db.String(20))
    height = db.Column(db.String(20))
    notes = db.Column(db.Text)


CHILD_MODELS = {
    'family_members': FamilyMember,
    'extended_family': ExtendedFamilyMember,
    'educational_attainment': EducationalAttainment,
    'sacramental_records': SacramentalRecord,
    'agencies': AgencyContact,
    'life_skills': LifeSkillEntry,
    'vital_signs': VitalSignsEntry,
}
