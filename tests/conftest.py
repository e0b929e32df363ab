"""Shared pytest fixtures."""

import pytest

from sped_records.records.database import SqliteRecordStore, init_database


@pytest.fixture
def db_path(tmp_path):
    """A fresh database file per test."""
    path = tmp_path / "sped_records_test.db"
    init_database(path)
    return path


@pytest.fixture
def store(db_path):
    """Get a record store over the test database."""
    return SqliteRecordStore(db_path)


@pytest.fixture
def practitioner(store):
    """An active practitioner."""
    return store.insert("user", {
        "first_name": "David",
        "last_name": "Kim",
        "email": "david.kim@example.org",
        "role": "Practitioner",
        "status": "Active",
        "districts": ["Oakridge Unified"],
    })


@pytest.fixture
def supervisor(store):
    """An active supervisor."""
    return store.insert("user", {
        "first_name": "Maria",
        "last_name": "Alvarez",
        "email": "maria.alvarez@example.org",
        "role": "Supervisor",
        "status": "Active",
    })


@pytest.fixture
def student(store, practitioner):
    """A student assigned to the practitioner."""
    return store.insert("student", {
        "ssid": "SSID-100001",
        "first_name": "Ava",
        "last_name": "Thompson",
        "birthdate": "2015-04-12",
        "district": "Oakridge Unified",
        "grade": 4,
        "school": "Oakridge Elementary",
        "practitioner_id": practitioner["id"],
        "medi_cal_eligible": True,
        "parental_consent_on_file": True,
        "parental_consent_in_bill": False,
        "parental_consent_given": False,
        "iep_date": "2025-09-20",
    })


@pytest.fixture
def service(store, student, practitioner):
    """A completed service visit."""
    return store.insert("service", {
        "student_id": student["id"],
        "practitioner_id": practitioner["id"],
        "service_date": "2026-10-01",
        "service_time": "09:00",
        "duration_minutes": 30,
        "end_time": "09:30",
        "service_type": "Speech Therapy",
        "location": "School",
        "status": "Completed",
        "is_group_service": False,
    })


@pytest.fixture
def claim(store):
    """A pending claim."""
    return store.insert("claim", {
        "claim_number": "CLM-2026001",
        "status": "Pending",
        "billed_amount": 125.5,
        "quantity": 1,
        "student_ssid": "SSID-100001",
        "student_name": "Ava Thompson",
        "student_dob": "2015-04-12",
        "consent_to_treat": True,
        "consent_to_bill": False,
        "medi_cal_eligible": False,
    })
