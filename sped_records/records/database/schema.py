"""
Record Portal Database Schema
Staff, students, service visits and insurance claims.

Columns declared BOOLEAN hold 0/1 and are read back as bool; columns
declared JSON hold serialized lists/objects.
"""

SCHEMA = """
-- =============================================================================
-- 1. APP_USER - Staff and employment records (collection "user")
-- =============================================================================
CREATE TABLE IF NOT EXISTS app_user (
    id INTEGER PRIMARY KEY AUTOINCREMENT,

    -- Identity
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    phone TEXT,
    address TEXT,

    -- Employment
    role TEXT NOT NULL DEFAULT 'Practitioner',
    status TEXT NOT NULL DEFAULT 'Active',
    department TEXT,
    npi TEXT,
    license_number TEXT,
    hire_date TEXT,
    supervisor_id INTEGER,          -- weak reference, may dangle

    -- Access
    districts JSON,                 -- ["Oak Unified", "Pine USD"]
    user_type TEXT,
    permission_level TEXT DEFAULT 'Standard',

    last_login TEXT
);

CREATE INDEX IF NOT EXISTS idx_app_user_name ON app_user(last_name, first_name);
CREATE INDEX IF NOT EXISTS idx_app_user_role ON app_user(role, status);


-- =============================================================================
-- 2. STUDENT - Demographic, program, IEP and insurance record
-- =============================================================================
CREATE TABLE IF NOT EXISTS student (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ssid TEXT NOT NULL UNIQUE,
    local_id TEXT,

    -- Basic info
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    preferred_name TEXT,
    birthdate TEXT NOT NULL,
    gender TEXT,
    status TEXT NOT NULL DEFAULT 'Active',

    -- Education (-1 = Pre-K, 0 = Kindergarten)
    grade INTEGER CHECK (grade IS NULL OR grade BETWEEN -1 AND 12),
    district TEXT NOT NULL,
    school TEXT,
    primary_disability TEXT,
    address TEXT,
    city TEXT,
    state TEXT,
    zip_code TEXT,

    -- Contacts
    primary_contact_name TEXT,
    primary_contact_phone TEXT,
    emergency_contact_name TEXT,
    emergency_contact_phone TEXT,
    transportation_team TEXT,
    transportation_needs TEXT,
    practitioner_id INTEGER REFERENCES app_user(id) ON DELETE SET NULL,
    comments TEXT,

    -- Medical/IEP
    iep_date TEXT,
    next_review_date TEXT,

    -- Insurance
    insurance_type TEXT,
    insurance_carrier TEXT,
    insurance_group_number TEXT,
    insurance_policy_number TEXT,
    insurance_effective_date TEXT,
    medi_cal_eligible BOOLEAN NOT NULL DEFAULT 0,
    medi_cal_benefits_id TEXT,
    copay_id TEXT,

    -- Consent
    parental_consent_on_file BOOLEAN NOT NULL DEFAULT 0,
    parental_consent_in_bill BOOLEAN NOT NULL DEFAULT 0,
    parental_consent_given BOOLEAN NOT NULL DEFAULT 0,
    parental_consent_date TEXT,

    last_modified_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_student_name ON student(last_name, first_name);
CREATE INDEX IF NOT EXISTS idx_student_practitioner ON student(practitioner_id);

CREATE TRIGGER IF NOT EXISTS trg_student_touch
AFTER UPDATE ON student
FOR EACH ROW WHEN NEW.last_modified_at IS OLD.last_modified_at
BEGIN
    UPDATE student SET last_modified_at = strftime('%Y-%m-%dT%H:%M:%f', 'now') WHERE id = NEW.id;
END;


-- =============================================================================
-- 3. SERVICE - Scheduled or completed visits
-- =============================================================================
CREATE TABLE IF NOT EXISTS service (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    student_id INTEGER NOT NULL REFERENCES student(id),
    practitioner_id INTEGER NOT NULL REFERENCES app_user(id),

    -- Scheduling
    service_date TEXT NOT NULL,
    service_time TEXT,              -- "09:00"
    end_time TEXT,                  -- "09:30"
    duration_minutes INTEGER,

    -- Details
    service_type TEXT,
    location TEXT,
    status TEXT NOT NULL DEFAULT 'Upcoming',
    is_group_service BOOLEAN NOT NULL DEFAULT 0,
    group_name TEXT,

    -- Notes
    case_notes TEXT,
    appointment_notes TEXT,

    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    updated_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_service_student ON service(student_id);
CREATE INDEX IF NOT EXISTS idx_service_practitioner ON service(practitioner_id);
CREATE INDEX IF NOT EXISTS idx_service_date ON service(service_date);

CREATE TRIGGER IF NOT EXISTS trg_service_touch
AFTER UPDATE ON service
FOR EACH ROW WHEN NEW.updated_at IS OLD.updated_at
BEGIN
    UPDATE service SET updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now') WHERE id = NEW.id;
END;


-- =============================================================================
-- 4. CLAIM - Billing records with a student snapshot taken at claim time
-- =============================================================================
CREATE TABLE IF NOT EXISTS claim (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    claim_number TEXT NOT NULL UNIQUE,
    batch_number TEXT,
    status TEXT NOT NULL DEFAULT 'Incomplete',

    -- Service
    service_date TEXT,
    service_code TEXT,
    service_description TEXT,
    quantity REAL CHECK (quantity IS NULL OR quantity >= 0),
    quantity_type TEXT,
    location TEXT,
    frequency_type TEXT,

    -- Providers
    rendering_provider TEXT,
    rendering_provider_npi TEXT,
    referring_provider TEXT,
    referring_provider_npi TEXT,

    -- Financials (NULL = not yet determined)
    billed_amount REAL CHECK (billed_amount IS NULL OR billed_amount >= 0),
    paid_amount REAL CHECK (paid_amount IS NULL OR paid_amount >= 0),
    finalized_date TEXT,

    -- Student snapshot
    district TEXT,
    student_ssid TEXT,
    student_name TEXT,
    student_dob TEXT,

    -- Insurance and consent
    insurance_type TEXT,
    insurance_carrier TEXT,
    medi_cal_eligible BOOLEAN NOT NULL DEFAULT 0,
    carelon_id TEXT,
    consent_to_treat BOOLEAN NOT NULL DEFAULT 0,
    consent_to_bill BOOLEAN NOT NULL DEFAULT 0,

    remittance_data JSON,
    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_claim_status ON claim(status);
CREATE INDEX IF NOT EXISTS idx_claim_student_ssid ON claim(student_ssid);
"""
