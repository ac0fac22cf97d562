"""Route registration: mounts all routers under ``/api``."""

from fastapi import FastAPI

from otassess_server.routes.admin import router as admin_router
from otassess_server.routes.ai import router as ai_router
from otassess_server.routes.appointments import router as appointments_router
from otassess_server.routes.assessments import router as assessments_router
from otassess_server.routes.clients import router as clients_router
from otassess_server.routes.dashboard import router as dashboard_router
from otassess_server.routes.documents import router as documents_router
from otassess_server.routes.equipment import router as equipment_router
from otassess_server.routes.house_maps import router as house_maps_router
from otassess_server.routes.invoices import router as invoices_router
from otassess_server.routes.iot import router as iot_router
from otassess_server.routes.question_banks import router as question_banks_router
from otassess_server.routes.quotes import router as quotes_router
from otassess_server.routes.reports import router as reports_router
from otassess_server.routes.responses import router as responses_router
from otassess_server.routes.upload import router as upload_router
from otassess_server.routes.wizard import router as wizard_router

API_PREFIX = "/api"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the API prefix."""
    app.include_router(question_banks_router, prefix=API_PREFIX)
    app.include_router(clients_router, prefix=API_PREFIX)
    # Responses before assessments so /assessments/client/... is matched first
    app.include_router(responses_router, prefix=API_PREFIX)
    app.include_router(wizard_router, prefix=API_PREFIX)
    app.include_router(house_maps_router, prefix=API_PREFIX)
    app.include_router(iot_router, prefix=API_PREFIX)
    app.include_router(assessments_router, prefix=API_PREFIX)
    app.include_router(upload_router, prefix=API_PREFIX)
    app.include_router(ai_router, prefix=API_PREFIX)
    app.include_router(quotes_router, prefix=API_PREFIX)
    app.include_router(invoices_router, prefix=API_PREFIX)
    app.include_router(equipment_router, prefix=API_PREFIX)
    app.include_router(documents_router, prefix=API_PREFIX)
    app.include_router(appointments_router, prefix=API_PREFIX)
    app.include_router(reports_router, prefix=API_PREFIX)
    app.include_router(dashboard_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)
