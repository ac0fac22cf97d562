"""Database-level enumerations.

All enums subclass ``str`` so values are stored as their lowercase string
form in ``String`` columns and serialise naturally in API payloads.
"""

import enum


class AssessmentType(str, enum.Enum):
    """Kind of assessment; selects which question bank drives the wizard."""

    HOME = "home"
    ASSISTIVE_TECH = "assistive_tech"
    GENERAL = "general"
    MOBILITY_SCOOTER = "mobility_scooter"
    FALLS_RISK = "falls_risk"
    MOVEMENT_MOBILITY = "movement_mobility"


class AssessmentStatus(str, enum.Enum):
    """Lifecycle states for an assessment.

    Transitions (derived on the server after each saved response):
        draft -> in_progress  (first response saved)
        in_progress -> completed (every question in the bank answered)
        completed -> approved (explicit update by the practitioner)
    """

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    APPROVED = "approved"


# Statuses counted as "pending" on the dashboard and given the short
# incomplete-record retention period.
INCOMPLETE_STATUSES: tuple[AssessmentStatus, ...] = (
    AssessmentStatus.DRAFT,
    AssessmentStatus.IN_PROGRESS,
)


class MediaType(str, enum.Enum):
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"


class EquipmentCategory(str, enum.Enum):
    MOBILITY = "mobility"
    BATHROOM = "bathroom"
    BEDROOM = "bedroom"
    ASSISTIVE_TECH = "assistive_tech"
    IOT = "iot"


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class InvoiceStatus(str, enum.Enum):
    """Invoice states; ``draft``, ``sent`` and ``overdue`` count as pending revenue."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class DocumentKind(str, enum.Enum):
    """Numbered business documents; each kind has its own sequence counter."""

    QUOTE = "quote"
    INVOICE = "invoice"


class RecommendationPriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AppointmentType(str, enum.Enum):
    ASSESSMENT = "assessment"
    FOLLOW_UP = "follow_up"
    CONSULTATION = "consultation"
    PHONE_CALL = "phone_call"
    HOME_VISIT = "home_visit"
    OTHER = "other"


class AppointmentStatus(str, enum.Enum):
    """Appointment states.  Recording consent moves an appointment to ``confirmed``."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Appointments that still get a reminder
REMINDABLE_STATUSES: tuple[AppointmentStatus, ...] = (
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.CONFIRMED,
)


class PlacementPriority(str, enum.Enum):
    ESSENTIAL = "essential"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


class PlacementStatus(str, enum.Enum):
    PROPOSED = "proposed"
    APPROVED = "approved"
    INSTALLED = "installed"


class ReportType(str, enum.Enum):
    FINANCIAL = "financial"
    OPERATIONAL = "operational"
    CLINICAL = "clinical"
    CUSTOM = "custom"
