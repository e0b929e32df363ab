"""Seed the database with mock staff, student, service and claim data."""

from datetime import date, timedelta

from sped_records import settings
from sped_records.records.database import SqliteRecordStore, init_database
from sped_records.errors import ConstraintViolation


MOCK_USERS = [
    {
        "first_name": "Maria",
        "last_name": "Alvarez",
        "email": "maria.alvarez@example.org",
        "phone": "555-0201",
        "role": "Supervisor",
        "status": "Active",
        "department": "Speech-Language",
        "npi": "1234567890",
        "license_number": "SLP-44821",
        "hire_date": "2016-08-15",
        "districts": ["Oakridge Unified", "Pine Valley USD"],
        "user_type": "Embedded",
        "permission_level": "Full",
    },
    {
        "first_name": "David",
        "last_name": "Kim",
        "email": "david.kim@example.org",
        "phone": "555-0202",
        "role": "Practitioner",
        "status": "Active",
        "department": "Occupational Therapy",
        "npi": "2345678901",
        "license_number": "OT-10233",
        "hire_date": "2020-01-06",
        "districts": ["Oakridge Unified"],
        "user_type": "Affiliated",
        "permission_level": "Standard",
    },
    {
        "first_name": "Priya",
        "last_name": "Natarajan",
        "email": "priya.n@example.org",
        "role": "Practitioner",
        "status": "Active",
        "department": "Behavioral Health",
        "hire_date": "2021-09-13",
        "districts": ["Pine Valley USD"],
        "permission_level": "Standard",
    },
    {
        "first_name": "Tom",
        "last_name": "Becker",
        "email": "tom.becker@example.org",
        "role": "Admin",
        "status": "Active",
        "department": "Billing",
        "permission_level": "Advanced",
    },
]

MOCK_STUDENTS = [
    {
        "ssid": "SSID-100001",
        "local_id": "OR-5521",
        "first_name": "Ava",
        "last_name": "Thompson",
        "birthdate": "2015-04-12",
        "gender": "Female",
        "status": "Active",
        "grade": 4,
        "district": "Oakridge Unified",
        "school": "Oakridge Elementary",
        "primary_disability": "Speech or Language Impairment",
        "primary_contact_name": "Laura Thompson",
        "primary_contact_phone": "555-0301",
        "iep_date": "2025-09-20",
        "next_review_date": "2026-09-20",
        "insurance_type": "Medi-Cal",
        "medi_cal_eligible": True,
        "medi_cal_benefits_id": "MC-778812",
        "parental_consent_on_file": True,
        "parental_consent_in_bill": True,
        "parental_consent_given": True,
        "parental_consent_date": "2025-09-01",
    },
    {
        "ssid": "SSID-100002",
        "first_name": "Noah",
        "last_name": "Garcia",
        "preferred_name": "Noe",
        "birthdate": "2019-11-03",
        "gender": "Male",
        "status": "Active",
        "grade": 0,
        "district": "Pine Valley USD",
        "school": "Pine Valley Primary",
        "primary_disability": "Autism",
        "transportation_needs": "Door-to-door bus",
        "insurance_type": "Private",
        "insurance_carrier": "Blue Shield",
        "insurance_group_number": "GRP-2231",
        "insurance_policy_number": "BS-99120",
        "insurance_effective_date": "2025-01-01",
    },
    {
        "ssid": "SSID-100003",
        "first_name": "Mia",
        "last_name": "Okafor",
        "birthdate": "2021-02-27",
        "status": "Active",
        "grade": -1,
        "district": "Oakridge Unified",
        "primary_disability": "Developmental Delay",
        "parental_consent_on_file": True,
    },
]


def seed_database() -> None:
    """Insert mock records, skipping any that already exist."""
    init_database(settings.DB_PATH)
    store = SqliteRecordStore(settings.DB_PATH)

    users = []
    for user in MOCK_USERS:
        try:
            users.append(store.insert("user", user))
        except ConstraintViolation:
            print(f"  Skipping {user['email']} (already exists)")
    supervisor = next((u for u in users if u["role"] == "Supervisor"), None)
    practitioners = [u for u in users if u["role"] == "Practitioner"]
    if supervisor:
        for practitioner in practitioners:
            store.update("user", practitioner["id"], {"supervisor_id": supervisor["id"]})

    students = []
    for i, student in enumerate(MOCK_STUDENTS):
        if practitioners:
            student = {**student, "practitioner_id": practitioners[i % len(practitioners)]["id"]}
        try:
            students.append(store.insert("student", student))
        except ConstraintViolation:
            print(f"  Skipping {student['ssid']} (already exists)")

    services = 0
    claims = 0
    start = date.today()
    for i, student in enumerate(students):
        practitioner_id = student.get("practitioner_id") or (supervisor or {}).get("id")
        if practitioner_id is None:
            continue
        past_date = (start - timedelta(days=7 + i)).isoformat()
        store.insert("service", {
            "student_id": student["id"],
            "practitioner_id": practitioner_id,
            "service_date": past_date,
            "service_time": "09:00",
            "duration_minutes": 30,
            "end_time": "09:30",
            "service_type": "Speech Therapy",
            "location": "School",
            "status": "Completed",
            "is_group_service": False,
            "case_notes": "Worked on articulation goals.",
        })
        store.insert("service", {
            "student_id": student["id"],
            "practitioner_id": practitioner_id,
            "service_date": (start + timedelta(days=7 + i)).isoformat(),
            "service_time": "13:30",
            "duration_minutes": 45,
            "end_time": "14:15",
            "service_type": "Occupational Therapy",
            "location": "Clinic",
            "status": "Upcoming",
            "is_group_service": True,
            "group_name": "Fine Motor Group",
        })
        services += 2

        try:
            store.insert("claim", {
                "claim_number": f"CLM-{2026000 + student['id']}",
                "batch_number": "B-001",
                "status": "Pending",
                "service_date": past_date,
                "service_code": "92507",
                "service_description": "Speech/language treatment",
                "quantity": 1,
                "quantity_type": "Session",
                "location": "School",
                "billed_amount": 125.0,
                "district": student["district"],
                "student_ssid": student["ssid"],
                "student_name": f"{student['first_name']} {student['last_name']}",
                "student_dob": student["birthdate"],
                "insurance_type": student.get("insurance_type"),
                "medi_cal_eligible": student.get("medi_cal_eligible", False),
                "consent_to_treat": True,
                "consent_to_bill": student.get("parental_consent_in_bill", False),
            })
            claims += 1
        except ConstraintViolation:
            print(f"  Skipping claim for {student['ssid']} (already exists)")

    print("\nDatabase seeded successfully!")
    print(f"  - {len(users)} users")
    print(f"  - {len(students)} students")
    print(f"  - {services} services")
    print(f"  - {claims} claims")


if __name__ == "__main__":
    seed_database()
