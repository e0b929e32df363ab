"""Field tables and rules for the four record types managed by the portal."""

from dataclasses import dataclass, field

from sped_records.field_normalizer import FieldKind

TEXT = FieldKind.TEXT
INT = FieldKind.INT
DECIMAL = FieldKind.DECIMAL
BOOLEAN = FieldKind.BOOLEAN
DATE = FieldKind.DATE
TIME = FieldKind.TIME
LABELS = FieldKind.LABELS


@dataclass(frozen=True)
class Join:
    """A read-time embed of a referenced record (display only, never written)."""
    alias: str
    collection: str
    foreign_key: str
    columns: tuple[str, ...]


@dataclass(frozen=True)
class Lookup:
    """A pick-list of referenced records offered by an editor."""
    collection: str
    columns: tuple[str, ...]
    filters: dict = field(default_factory=dict)
    order_by: str = "last_name"


@dataclass(frozen=True)
class EntityConfig:
    """Everything an editor, validator and page need to know about one record type."""
    name: str
    collection: str
    label: str
    field_types: dict[str, FieldKind]
    required: tuple[str, ...]
    sections: tuple[tuple[str, tuple[str, ...]], ...]
    order_by: str
    ascending: bool = True
    business_key: str | None = None
    references: dict[str, str] = field(default_factory=dict)
    choices: dict[str, tuple] = field(default_factory=dict)
    non_negative: tuple[str, ...] = ()
    defaults: dict = field(default_factory=dict)
    server_fields: tuple[str, ...] = ("id",)
    joins: tuple[Join, ...] = ()
    lookups: dict[str, Lookup] = field(default_factory=dict)

    @property
    def optional_fields(self) -> list[str]:
        return [f for f in self.field_types if f not in self.required]


ACTIVE_PRACTITIONERS = Lookup(
    collection="user",
    columns=("id", "first_name", "last_name", "role"),
    filters={"role": ["Practitioner", "Supervisor"], "status": "Active"},
)

ACTIVE_STUDENTS = Lookup(
    collection="student",
    columns=("id", "ssid", "first_name", "last_name", "district", "birthdate"),
    filters={"status": "Active"},
)


USER = EntityConfig(
    name="user",
    collection="user",
    label="User",
    field_types={
        "first_name": TEXT,
        "last_name": TEXT,
        "email": TEXT,
        "phone": TEXT,
        "address": TEXT,
        "role": TEXT,
        "status": TEXT,
        "department": TEXT,
        "npi": TEXT,
        "license_number": TEXT,
        "hire_date": DATE,
        "supervisor_id": INT,
        "user_type": TEXT,
        "permission_level": TEXT,
        "districts": LABELS,
    },
    required=("first_name", "last_name", "email", "role", "status"),
    sections=(
        ("Basic Information", ("first_name", "last_name", "email", "phone", "address")),
        ("Professional Information", (
            "role", "status", "department", "npi", "license_number", "hire_date", "supervisor_id",
        )),
        ("Additional Information", ("user_type", "permission_level")),
        ("Districts", ("districts",)),
    ),
    order_by="last_name",
    business_key="email",
    references={"supervisor_id": "supervisor"},
    choices={
        "role": ("Practitioner", "Supervisor", "Admin", "Support"),
        "status": ("Active", "Inactive", "Suspended"),
        "user_type": ("Embedded", "Affiliated"),
        "permission_level": ("Standard", "Advanced", "Full"),
    },
    defaults={"status": "Active", "role": "Practitioner", "permission_level": "Standard"},
    server_fields=("id", "last_login"),
)


STUDENT = EntityConfig(
    name="student",
    collection="student",
    label="Student",
    field_types={
        # Basic Info
        "ssid": TEXT,
        "local_id": TEXT,
        "first_name": TEXT,
        "last_name": TEXT,
        "preferred_name": TEXT,
        "birthdate": DATE,
        "gender": TEXT,
        "status": TEXT,
        # Education
        "grade": INT,
        "district": TEXT,
        "school": TEXT,
        "primary_disability": TEXT,
        "address": TEXT,
        "city": TEXT,
        "state": TEXT,
        "zip_code": TEXT,
        # Contacts
        "primary_contact_name": TEXT,
        "primary_contact_phone": TEXT,
        "emergency_contact_name": TEXT,
        "emergency_contact_phone": TEXT,
        "transportation_team": TEXT,
        "practitioner_id": INT,
        "transportation_needs": TEXT,
        "comments": TEXT,
        # Medical/IEP
        "iep_date": DATE,
        "next_review_date": DATE,
        # Insurance
        "insurance_type": TEXT,
        "insurance_carrier": TEXT,
        "insurance_group_number": TEXT,
        "insurance_policy_number": TEXT,
        "insurance_effective_date": DATE,
        "medi_cal_eligible": BOOLEAN,
        "medi_cal_benefits_id": TEXT,
        "copay_id": TEXT,
        # Consent
        "parental_consent_on_file": BOOLEAN,
        "parental_consent_in_bill": BOOLEAN,
        "parental_consent_given": BOOLEAN,
        "parental_consent_date": DATE,
    },
    required=("ssid", "first_name", "last_name", "birthdate", "district"),
    sections=(
        ("Basic Info", (
            "ssid", "local_id", "first_name", "last_name", "preferred_name",
            "birthdate", "gender", "status",
        )),
        ("Education", (
            "grade", "district", "school", "primary_disability",
            "address", "city", "state", "zip_code",
        )),
        ("Contacts", (
            "primary_contact_name", "primary_contact_phone",
            "emergency_contact_name", "emergency_contact_phone",
            "transportation_team", "practitioner_id", "transportation_needs", "comments",
        )),
        ("Medical/IEP", ("iep_date", "next_review_date")),
        ("Insurance", (
            "insurance_type", "insurance_carrier", "insurance_group_number",
            "insurance_policy_number", "insurance_effective_date",
            "medi_cal_eligible", "medi_cal_benefits_id", "copay_id",
        )),
        ("Consent", (
            "parental_consent_on_file", "parental_consent_in_bill",
            "parental_consent_given", "parental_consent_date",
        )),
    ),
    order_by="last_name",
    business_key="ssid",
    references={"practitioner_id": "practitioner"},
    choices={
        "gender": ("Male", "Female", "Non-binary", "Other"),
        "status": ("Active", "Inactive", "Transferred", "Graduated"),
        "grade": tuple(range(-1, 13)),
    },
    defaults={"status": "Active"},
    server_fields=("id", "last_modified_at"),
    lookups={"practitioner_id": ACTIVE_PRACTITIONERS},
)


SERVICE = EntityConfig(
    name="service",
    collection="service",
    label="Service",
    field_types={
        "student_id": INT,
        "practitioner_id": INT,
        "service_date": DATE,
        "service_time": TIME,
        "duration_minutes": INT,
        "end_time": TIME,
        "status": TEXT,
        "service_type": TEXT,
        "location": TEXT,
        "is_group_service": BOOLEAN,
        "group_name": TEXT,
        "appointment_notes": TEXT,
        "case_notes": TEXT,
    },
    required=("student_id", "practitioner_id", "service_date", "status"),
    sections=(
        ("Basic Info", (
            "student_id", "practitioner_id", "service_date", "service_time",
            "duration_minutes", "end_time", "status",
        )),
        ("Service Details", ("service_type", "location", "is_group_service", "group_name")),
        ("Notes", ("appointment_notes", "case_notes")),
    ),
    order_by="service_date",
    ascending=False,
    references={"student_id": "student", "practitioner_id": "practitioner"},
    choices={
        "status": ("Upcoming", "Completed", "Cancelled", "Incomplete"),
        "service_type": (
            "Speech Therapy", "Occupational Therapy", "Physical Therapy",
            "Behavioral Therapy", "Counseling", "Assessment", "Consultation",
            "IEP Meeting", "Other",
        ),
        "location": ("School", "Home", "Clinic", "Online", "Community", "Other"),
    },
    non_negative=("duration_minutes",),
    defaults={"status": "Upcoming", "is_group_service": False},
    server_fields=("id", "created_at", "updated_at", "student", "practitioner"),
    joins=(
        Join("student", "student", "student_id", ("id", "first_name", "last_name", "ssid")),
        Join("practitioner", "user", "practitioner_id", ("id", "first_name", "last_name", "role")),
    ),
    lookups={"student_id": ACTIVE_STUDENTS, "practitioner_id": ACTIVE_PRACTITIONERS},
)


CLAIM = EntityConfig(
    name="claim",
    collection="claim",
    label="Claim",
    field_types={
        # Basic Claim Information
        "claim_number": TEXT,
        "batch_number": TEXT,
        "status": TEXT,
        # Student Information (snapshot copied at claim time)
        "district": TEXT,
        "student_ssid": TEXT,
        "student_name": TEXT,
        "student_dob": DATE,
        # Service Information
        "service_date": DATE,
        "service_code": TEXT,
        "service_description": TEXT,
        "quantity": DECIMAL,
        "quantity_type": TEXT,
        "location": TEXT,
        "frequency_type": TEXT,
        # Provider Information
        "rendering_provider": TEXT,
        "rendering_provider_npi": TEXT,
        "referring_provider": TEXT,
        "referring_provider_npi": TEXT,
        # Financial Information
        "billed_amount": DECIMAL,
        "paid_amount": DECIMAL,
        "finalized_date": DATE,
        # Insurance Information
        "insurance_type": TEXT,
        "insurance_carrier": TEXT,
        "carelon_id": TEXT,
        "medi_cal_eligible": BOOLEAN,
        # Consent Information
        "consent_to_treat": BOOLEAN,
        "consent_to_bill": BOOLEAN,
    },
    required=("claim_number",),
    sections=(
        ("Basic Claim Information", ("claim_number", "batch_number", "status")),
        ("Student Information", ("district", "student_ssid", "student_name", "student_dob")),
        ("Service Information", (
            "service_date", "service_code", "service_description",
            "quantity", "quantity_type", "location", "frequency_type",
        )),
        ("Provider Information", (
            "rendering_provider", "rendering_provider_npi",
            "referring_provider", "referring_provider_npi",
        )),
        ("Financial Information", ("billed_amount", "paid_amount", "finalized_date")),
        ("Insurance Information", (
            "insurance_type", "insurance_carrier", "carelon_id", "medi_cal_eligible",
        )),
        ("Consent Information", ("consent_to_treat", "consent_to_bill")),
    ),
    order_by="created_at",
    ascending=False,
    business_key="claim_number",
    choices={"status": ("Incomplete", "Pending", "Completed", "Paid", "Denied")},
    non_negative=("billed_amount", "paid_amount", "quantity"),
    defaults={"status": "Incomplete"},
    server_fields=("id", "created_at", "remittance_data"),
    lookups={"student": ACTIVE_STUDENTS},
)


ENTITIES = {config.name: config for config in (USER, STUDENT, SERVICE, CLAIM)}
