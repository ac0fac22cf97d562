"""Async repositories, one per aggregate.

Repositories take the ``AsyncSession`` as their first argument, ``flush()``
after writes and never commit; transaction boundaries belong to the caller.
"""

from otassess_db.repositories.appointments import AppointmentRepository
from otassess_db.repositories.assessments import AssessmentRepository
from otassess_db.repositories.billing import BillingRepository
from otassess_db.repositories.clients import ClientRepository
from otassess_db.repositories.dashboard import DashboardRepository
from otassess_db.repositories.documents import DocumentRepository
from otassess_db.repositories.equipment import EquipmentRepository
from otassess_db.repositories.house_maps import HouseMapRepository
from otassess_db.repositories.iot import IoTDeviceRepository
from otassess_db.repositories.reports import ReportRepository
from otassess_db.repositories.responses import ResponseRepository

__all__ = [
    "AppointmentRepository",
    "AssessmentRepository",
    "BillingRepository",
    "ClientRepository",
    "DashboardRepository",
    "DocumentRepository",
    "EquipmentRepository",
    "HouseMapRepository",
    "IoTDeviceRepository",
    "ReportRepository",
    "ResponseRepository",
]
