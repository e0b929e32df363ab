"""Read-only table views and display formatting for record collections."""

from datetime import date

from rich.table import Table
from rich.text import Text

from sped_records.entities import CLAIM, SERVICE, STUDENT, USER, EntityConfig
from sped_records.validator import is_valid_date

NOT_AVAILABLE = "N/A"

STATUS_STYLES = {
    USER.name: {"active": "green", "inactive": "grey50", "suspended": "red"},
    STUDENT.name: {"active": "green", "inactive": "grey50", "transferred": "blue", "graduated": "magenta"},
    SERVICE.name: {"upcoming": "blue", "completed": "green", "cancelled": "red", "incomplete": "yellow"},
    CLAIM.name: {"completed": "green", "incomplete": "yellow", "denied": "red", "pending": "blue", "paid": "green"},
}

LOCATION_ICONS = {
    "school": "🏫",
    "home": "🏠",
    "clinic": "🏥",
    "online": "💻",
}


def format_date(value: str | None) -> str:
    """Format YYYY-MM-DD as M/D/YYYY."""
    if not value:
        return NOT_AVAILABLE
    if not is_valid_date(value[:10]):
        return value
    parsed = date.fromisoformat(value[:10])
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def format_time(value: str | None) -> str:
    if not value:
        return NOT_AVAILABLE
    return value[:5]


def format_currency(amount: float | None) -> str:
    """Format a dollar amount. Absent amounts have not been determined yet."""
    if amount is None:
        return NOT_AVAILABLE
    return f"${amount:,.2f}"


def grade_display(grade: int | None) -> str:
    """-1 is Pre-K, 0 is Kindergarten, 1-12 are grade levels."""
    if grade is None:
        return NOT_AVAILABLE
    if grade < 0:
        return "Pre-K"
    if grade == 0:
        return "K"
    return str(grade)


def calculate_age(birthdate: str | None, today: date | None = None) -> int | None:
    """Age in whole years, or None when the birthdate is missing or malformed."""
    if not birthdate or not is_valid_date(birthdate):
        return None
    born = date.fromisoformat(birthdate)
    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def status_badge(entity_name: str, status: str | None) -> Text:
    """Status as Text styled with its colour."""
    if not status:
        return Text(NOT_AVAILABLE)
    style = STATUS_STYLES.get(entity_name, {}).get(status.lower(), "grey50")
    return Text(status, style=style)


def location_icon(location: str | None) -> str:
    return LOCATION_ICONS.get((location or "").lower(), "📍")


def full_name(record: dict | None) -> str:
    if not record:
        return NOT_AVAILABLE
    return f"{record.get('first_name', '')} {record.get('last_name', '')}".strip()


def user_row(user: dict) -> dict:
    return {
        "ID": str(user["id"]),
        "Name": full_name(user),
        "Email": user.get("email") or NOT_AVAILABLE,
        "Role": user.get("role") or NOT_AVAILABLE,
        "Department": user.get("department") or NOT_AVAILABLE,
        "Districts": ", ".join(user.get("districts") or []) or NOT_AVAILABLE,
        "Status": status_badge(USER.name, user.get("status")),
    }


def student_row(student: dict, today: date | None = None) -> dict:
    name = full_name(student)
    if student.get("preferred_name"):
        name += f' "{student["preferred_name"]}"'
    age = calculate_age(student.get("birthdate"), today)
    return {
        "ID": str(student["id"]),
        "Student": name,
        "SSID": student.get("ssid") or NOT_AVAILABLE,
        "Grade": grade_display(student.get("grade")),
        "Age": NOT_AVAILABLE if age is None else str(age),
        "District": student.get("district") or NOT_AVAILABLE,
        "Status": status_badge(STUDENT.name, student.get("status")),
        "IEP Date": format_date(student.get("iep_date")),
    }


def service_row(service: dict) -> dict:
    when = format_date(service.get("service_date"))
    if service.get("service_time"):
        when += f" {format_time(service['service_time'])}"
        if service.get("end_time"):
            when += f"-{format_time(service['end_time'])}"

    student = service.get("student")
    student_label = full_name(student)
    if student and student.get("ssid"):
        student_label += f" ({student['ssid']})"

    duration = service.get("duration_minutes")
    if service.get("is_group_service"):
        group = f"Yes ({service['group_name']})" if service.get("group_name") else "Yes"
    else:
        group = "No"

    return {
        "ID": str(service["id"]),
        "Date & Time": when,
        "Student": student_label,
        "Practitioner": full_name(service.get("practitioner")),
        "Service Type": service.get("service_type") or NOT_AVAILABLE,
        "Location": f"{location_icon(service.get('location'))} {service.get('location') or NOT_AVAILABLE}",
        "Duration": NOT_AVAILABLE if duration is None else f"{duration} min",
        "Status": status_badge(SERVICE.name, service.get("status")),
        "Group Service": group,
    }


def claim_row(claim: dict) -> dict:
    number = claim.get("claim_number") or NOT_AVAILABLE
    if claim.get("batch_number"):
        number += f" (Batch: {claim['batch_number']})"
    student = claim.get("student_name") or NOT_AVAILABLE
    if claim.get("student_ssid"):
        student += f" ({claim['student_ssid']})"
    return {
        "ID": str(claim["id"]),
        "Claim": number,
        "Student": student,
        "Service": claim.get("service_code") or claim.get("service_description") or NOT_AVAILABLE,
        "Status": status_badge(CLAIM.name, claim.get("status")),
        "Billed": format_currency(claim.get("billed_amount")),
        "Paid": format_currency(claim.get("paid_amount")),
        "Service Date": format_date(claim.get("service_date")),
    }


ROW_BUILDERS = {
    USER.name: user_row,
    STUDENT.name: student_row,
    SERVICE.name: service_row,
    CLAIM.name: claim_row,
}

PLURALS = {
    USER.name: "Users",
    STUDENT.name: "Students",
    SERVICE.name: "Services",
    CLAIM.name: "Claims",
}


def build_rows(config: EntityConfig, records: list[dict]) -> list[dict]:
    row_builder = ROW_BUILDERS[config.name]
    return [row_builder(record) for record in records]


def render_table(config: EntityConfig, records: list[dict]):
    """Render a collection as a rich Table, or an empty-state message."""
    plural = PLURALS[config.name]
    if not records:
        return Text(f"No {plural.lower()} found. Use 'add' to create one.", style="dim")

    rows = build_rows(config, records)
    table = Table(title=f"All {plural} ({len(records)})", show_lines=False)
    for column in rows[0]:
        table.add_column(column, overflow="fold")
    for row in rows:
        # Stored values are shown literally, never parsed as markup
        table.add_row(*(Text(cell) if isinstance(cell, str) else cell for cell in row.values()))
    return table
