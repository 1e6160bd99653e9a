"""Integer-backed domain enumerations and their display names."""

from __future__ import annotations

from enum import IntEnum


class _Labelled(IntEnum):
    @property
    def display_name(self) -> str:
        return _LABELS.get(type(self), {}).get(self.value, self.name)


class ActivityType(_Labelled):
    HospitalVisit = 1
    GardenWalk = 2
    MedicationAssistance = 3
    MealPreparation = 4
    PersonalCare = 5
    Companionship = 6
    Transportation = 7
    Physiotherapy = 8
    DoctorAppointment = 9
    GroceryShopping = 10
    Housekeeping = 11
    Other = 12


class DocumentStatus(_Labelled):
    Pending = 1
    Uploaded = 2
    Overdue = 3


class DocumentType(_Labelled):
    PDF = 1
    DOC = 2
    DOCX = 3
    Image = 4


class IncidentSeverity(_Labelled):
    Low = 1
    Medium = 2
    High = 3
    Critical = 4


class IncidentStatus(_Labelled):
    Open = 1
    InProgress = 2
    Resolved = 3
    Closed = 4


class UserRole(_Labelled):
    Staff = 1
    Admin = 2


# Only members whose label differs from the member name are listed
_LABELS: dict[type, dict[int, str]] = {
    ActivityType: {
        1: "Hospital Visit",
        2: "Garden Walk",
        3: "Medication Assistance",
        4: "Meal Preparation",
        5: "Personal Care",
        9: "Doctor Appointment",
        10: "Grocery Shopping",
    },
    DocumentStatus: {2: "upload"},
}

# Stored values of ClientDocument.status
DOC_STATUS_PENDING = "pending"
DOC_STATUS_UPLOAD = "upload"
DOC_STATUS_OVERDUE = "overdue"


def display_name(enum_cls: type[_Labelled], value: int | None) -> str:
    """Display name for a raw stored value; unknown values render as their number."""
    if value is None:
        return ""
    try:
        return enum_cls(value).display_name
    except ValueError:
        return str(value)


__all__ = [
    "ActivityType",
    "DocumentStatus",
    "DocumentType",
    "IncidentSeverity",
    "IncidentStatus",
    "UserRole",
    "DOC_STATUS_PENDING",
    "DOC_STATUS_UPLOAD",
    "DOC_STATUS_OVERDUE",
    "display_name",
]
