"""FastAPI dependency injection: DB sessions, services, and caller identity.

Each request that touches the database gets a fresh ``AsyncSession`` via
``get_db()``.  The session is committed on success and rolled back on error,
matching the SDK convention where services and repositories call
``flush()`` but never ``commit()``.

Services are built once in the lifespan handler and stashed on
``app.state.services``; the ``get_*_service`` functions hand them out and
are the override points for tests.
"""

import hmac
from dataclasses import dataclass
from typing import AsyncGenerator

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.engine import get_session_factory

from otassess_core.ai import AIService
from otassess_core.appointments import AppointmentService
from otassess_core.assessments import AssessmentService
from otassess_core.billing import BillingService
from otassess_core.clients import ClientService
from otassess_core.context import RequestContext
from otassess_core.dashboard import DashboardAggregator
from otassess_core.documents import DocumentService
from otassess_core.enrichment import EnrichmentGateway
from otassess_core.equipment import EquipmentService
from otassess_core.house_maps import HouseMapService
from otassess_core.iot import IoTDeviceService
from otassess_core.media import MediaStorage
from otassess_core.question_bank import QuestionBankStore
from otassess_core.reports import ReportService
from otassess_core.responses import ResponseStore
from otassess_core.wizard import AssessmentWizard

from otassess_server.config import ServerSettings


@dataclass
class AppServices:
    """Everything a route needs besides the DB session."""

    store: QuestionBankStore
    gateway: EnrichmentGateway
    storage: MediaStorage
    responses: ResponseStore
    wizard: AssessmentWizard
    clients: ClientService
    assessments: AssessmentService
    billing: BillingService
    equipment: EquipmentService
    documents: DocumentService
    house_maps: HouseMapService
    iot: IoTDeviceService
    appointments: AppointmentService
    reports: ReportService
    ai: AIService
    dashboard: DashboardAggregator

    @classmethod
    def build(
        cls,
        store: QuestionBankStore,
        gateway: EnrichmentGateway,
        storage: MediaStorage,
    ) -> "AppServices":
        responses = ResponseStore(store, gateway)
        return cls(
            store=store,
            gateway=gateway,
            storage=storage,
            responses=responses,
            wizard=AssessmentWizard(store, responses),
            clients=ClientService(),
            assessments=AssessmentService(responses, gateway),
            billing=BillingService(),
            equipment=EquipmentService(gateway, storage),
            documents=DocumentService(),
            house_maps=HouseMapService(gateway),
            iot=IoTDeviceService(),
            appointments=AppointmentService(),
            reports=ReportService(),
            ai=AIService(store, gateway),
            dashboard=DashboardAggregator(),
        )


# ------------------------------------------------------------------
# Database session: transaction boundary lives here
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error.

    The SDK's repository methods call ``flush()`` but never ``commit()``,
    so this dependency is the single place where transactions are finalised.
    """
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ------------------------------------------------------------------
# Services: stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_settings(request: Request) -> ServerSettings:
    return request.app.state.settings


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_store(request: Request) -> QuestionBankStore:
    """Return the QuestionBankStore singleton from ``app.state``."""
    return request.app.state.services.store


def get_storage(request: Request) -> MediaStorage:
    return request.app.state.services.storage


def get_response_store(request: Request) -> ResponseStore:
    return request.app.state.services.responses


def get_wizard(request: Request) -> AssessmentWizard:
    return request.app.state.services.wizard


def get_client_service(request: Request) -> ClientService:
    return request.app.state.services.clients


def get_assessment_service(request: Request) -> AssessmentService:
    return request.app.state.services.assessments


def get_billing_service(request: Request) -> BillingService:
    return request.app.state.services.billing


def get_equipment_service(request: Request) -> EquipmentService:
    return request.app.state.services.equipment


def get_document_service(request: Request) -> DocumentService:
    return request.app.state.services.documents


def get_house_map_service(request: Request) -> HouseMapService:
    return request.app.state.services.house_maps


def get_iot_service(request: Request) -> IoTDeviceService:
    return request.app.state.services.iot


def get_appointment_service(request: Request) -> AppointmentService:
    return request.app.state.services.appointments


def get_report_service(request: Request) -> ReportService:
    return request.app.state.services.reports


def get_ai_service(request: Request) -> AIService:
    return request.app.state.services.ai


def get_dashboard(request: Request) -> DashboardAggregator:
    return request.app.state.services.dashboard


# ------------------------------------------------------------------
# Caller identity: X-User-ID / X-Session-ID headers
# ------------------------------------------------------------------

async def get_request_context(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_session_id: str | None = Header(None, alias="X-Session-ID"),
    x_proxy_secret: str | None = Header(None, alias="X-Proxy-Secret"),
) -> RequestContext:
    """Build the caller's ``RequestContext`` from identity headers.

    Returns 401 if ``X-User-ID`` is missing; every data endpoint requires
    a known practitioner.

    When ``TRUSTED_PROXY_SECRET`` is configured, the request must also
    carry a matching ``X-Proxy-Secret`` header (403 otherwise), proving
    the identity headers were injected by the trusted gateway.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-ID header is required")

    # --- Proxy-secret validation (opt-in via TRUSTED_PROXY_SECRET) ---
    expected_secret: str | None = request.app.state.settings.trusted_proxy_secret
    if expected_secret:
        if not x_proxy_secret:
            raise HTTPException(
                status_code=403,
                detail="X-Proxy-Secret header is required",
            )
        if not hmac.compare_digest(x_proxy_secret, expected_secret):
            raise HTTPException(status_code=403, detail="Invalid proxy secret")

    return RequestContext(user_id=x_user_id, session_id=x_session_id or None)
