"""otassess_core: OT/AH assessment domain SDK.

Public API:
    QuestionBankStore   loads YAML question banks into typed models with lookup helpers
    ResponseStore       per-question answers, upserted on (assessment, question)
    PrefillResolver     suggests a draft from the client's other assessments
    AssessmentWizard    stateless section-by-section walk through a bank
    EnrichmentGateway   single entry point for every AI-assisted feature
    PromptManager       Jinja2 prompt renderer used by the gateway
    RequestContext      who is calling; passed into every service

Services:
    ClientService, AssessmentService, BillingService, EquipmentService,
    DocumentService, HouseMapService, IoTDeviceService, AppointmentService,
    ReportService, AIService, DashboardAggregator

Storage:
    MediaStorage        ABC for uploaded bytes
    LocalMediaStorage   files under an upload directory
"""

from otassess_core.ai import AIService
from otassess_core.appointments import AppointmentService
from otassess_core.assessments import AssessmentService
from otassess_core.billing import BillingService
from otassess_core.clients import ClientService
from otassess_core.context import RequestContext
from otassess_core.dashboard import DashboardAggregator
from otassess_core.documents import DocumentService
from otassess_core.enrichment import EnrichmentGateway, ProviderSet
from otassess_core.equipment import EquipmentService
from otassess_core.house_maps import HouseMapService
from otassess_core.iot import IoTDeviceService
from otassess_core.media import LocalMediaStorage, MediaStorage, StoredMedia
from otassess_core.prefill import PrefillResolver
from otassess_core.prompt import PromptManager
from otassess_core.question_bank import QuestionBankStore
from otassess_core.reports import ReportService
from otassess_core.responses import ResponseStore
from otassess_core.wizard import AssessmentWizard

__all__ = [
    # Question banks & responses
    "QuestionBankStore",
    "ResponseStore",
    "PrefillResolver",
    "AssessmentWizard",
    # AI
    "EnrichmentGateway",
    "ProviderSet",
    "PromptManager",
    # Services
    "AIService",
    "AppointmentService",
    "AssessmentService",
    "BillingService",
    "ClientService",
    "DashboardAggregator",
    "DocumentService",
    "EquipmentService",
    "HouseMapService",
    "IoTDeviceService",
    "ReportService",
    # Media
    "LocalMediaStorage",
    "MediaStorage",
    "StoredMedia",
    # Context
    "RequestContext",
]
