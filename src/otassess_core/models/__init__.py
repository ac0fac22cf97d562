"""Public model re-exports for otassess_core.

Consumers should import from ``otassess_core.models`` rather than
reaching into sub-modules directly.
"""

# --- Questions ---
from otassess_core.models.question import (
    BaseQuestion,
    CheckboxQuestion,
    MultipleChoiceQuestion,
    Question,
    QuestionBank,
    RatingQuestion,
    Section,
    TextQuestion,
    YesNoQuestion,
    question_mapper,
)

# --- Clients, assessments, responses ---
from otassess_core.models.client import (
    ArchivedAssessmentView,
    ArchivedClientView,
    ArchiveResult,
    AssessmentCreate,
    AssessmentDetail,
    AssessmentProgress,
    AssessmentUpdate,
    AssessmentView,
    ClientCreate,
    ClientUpdate,
    ClientView,
    MediaView,
    RecommendationCreate,
    RecommendationView,
    SummaryResult,
)
from otassess_core.models.response import AnalysisResult, ResponsePayload, ResponseView

# --- Wizard ---
from otassess_core.models.wizard import (
    AnswerDraft,
    WizardComplete,
    WizardPosition,
    WizardStep,
)

# --- Billing, catalog, documents, house maps ---
from otassess_core.models.billing import (
    InvoiceCreate,
    InvoiceItem,
    InvoiceUpdate,
    InvoiceView,
    QuoteCreate,
    QuoteItem,
    QuoteUpdate,
    QuoteView,
)
from otassess_core.models.document import DocumentCreate, DocumentUpdate, DocumentView
from otassess_core.models.equipment import (
    CatalogParseResult,
    EquipmentCreate,
    EquipmentUpdate,
    EquipmentView,
)
from otassess_core.models.house_map import (
    AreaCreate,
    AreaUpdate,
    AreaView,
    HouseMapDetail,
    HouseMapView,
    PlacementView,
    Position3D,
    RoomCreate,
    RoomUpdate,
    RoomView,
)
from otassess_core.models.iot import (
    IoTDeviceCreate,
    IoTDeviceUpdate,
    IoTDeviceView,
    PlacementCreate,
    PlacementUpdate,
)

# --- Appointments & reports ---
from otassess_core.models.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentView,
    ConsentRecord,
    ReminderRun,
)
from otassess_core.models.report import ReportRequest, ReportView

# --- Enrichment & dashboard ---
from otassess_core.models.enrichment import EnrichmentKind, EnrichmentResult
from otassess_core.models.dashboard import DashboardStats

__all__ = [
    "AnalysisResult",
    "AnswerDraft",
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentView",
    "ArchiveResult",
    "ArchivedAssessmentView",
    "ArchivedClientView",
    "AreaCreate",
    "AreaUpdate",
    "AreaView",
    "AssessmentCreate",
    "AssessmentDetail",
    "AssessmentProgress",
    "AssessmentUpdate",
    "AssessmentView",
    "BaseQuestion",
    "CatalogParseResult",
    "CheckboxQuestion",
    "ClientCreate",
    "ClientUpdate",
    "ClientView",
    "ConsentRecord",
    "DashboardStats",
    "DocumentCreate",
    "DocumentUpdate",
    "DocumentView",
    "EnrichmentKind",
    "EnrichmentResult",
    "EquipmentCreate",
    "EquipmentUpdate",
    "EquipmentView",
    "HouseMapDetail",
    "HouseMapView",
    "InvoiceCreate",
    "InvoiceItem",
    "InvoiceUpdate",
    "InvoiceView",
    "IoTDeviceCreate",
    "IoTDeviceUpdate",
    "IoTDeviceView",
    "MediaView",
    "MultipleChoiceQuestion",
    "PlacementCreate",
    "PlacementUpdate",
    "PlacementView",
    "Position3D",
    "Question",
    "QuestionBank",
    "QuoteCreate",
    "QuoteItem",
    "QuoteUpdate",
    "QuoteView",
    "RatingQuestion",
    "RecommendationCreate",
    "RecommendationView",
    "ReminderRun",
    "ReportRequest",
    "ReportView",
    "ResponsePayload",
    "ResponseView",
    "RoomCreate",
    "RoomUpdate",
    "RoomView",
    "Section",
    "SummaryResult",
    "TextQuestion",
    "WizardComplete",
    "WizardPosition",
    "WizardStep",
    "YesNoQuestion",
    "question_mapper",
]
