"""ORM models for otassess_db."""

from otassess_db.models.appointment import Appointment
from otassess_db.models.assessment import Assessment, AssessmentMedia, AssessmentResponse
from otassess_db.models.base import Base
from otassess_db.models.billing import DocumentCounter, Invoice, Quote
from otassess_db.models.client import Client
from otassess_db.models.document import BusinessDocument
from otassess_db.models.enums import (
    AppointmentStatus,
    AppointmentType,
    AssessmentStatus,
    AssessmentType,
    DocumentKind,
    EquipmentCategory,
    InvoiceStatus,
    MediaType,
    PlacementPriority,
    PlacementStatus,
    QuoteStatus,
    RecommendationPriority,
    ReportType,
)
from otassess_db.models.equipment import EquipmentItem, EquipmentRecommendation
from otassess_db.models.house_map import Area, HouseMap, Room
from otassess_db.models.iot import DevicePlacement, IoTDevice
from otassess_db.models.report import Report

__all__ = [
    "Base",
    # Rows
    "Appointment",
    "Area",
    "Assessment",
    "AssessmentMedia",
    "AssessmentResponse",
    "BusinessDocument",
    "Client",
    "DevicePlacement",
    "DocumentCounter",
    "EquipmentItem",
    "EquipmentRecommendation",
    "HouseMap",
    "Invoice",
    "IoTDevice",
    "Quote",
    "Report",
    "Room",
    # Enums
    "AppointmentStatus",
    "AppointmentType",
    "AssessmentStatus",
    "AssessmentType",
    "DocumentKind",
    "EquipmentCategory",
    "InvoiceStatus",
    "MediaType",
    "PlacementPriority",
    "PlacementStatus",
    "QuoteStatus",
    "RecommendationPriority",
    "ReportType",
]
