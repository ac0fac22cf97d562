"""In-memory stand-ins for the otassess_db repositories.

Mock strategy:
  - Mock*Row dataclasses carry the same attributes as the ORM models but
    no SQLAlchemy dependency.  Services read and write attributes directly.
  - Fake*Repository classes implement every async method the services
    call, with the real signatures, mutating rows in place just like the
    real repositories.
  - All fakes share one ``FakeData`` so that cross-table queries
    (responses for a client, assessments of a client) see the same rows.
  - ``AsyncMock()`` stands in for the ``AsyncSession`` (db).
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from otassess_db.models.enums import (
    INCOMPLETE_STATUSES,
    REMINDABLE_STATUSES,
    AppointmentStatus,
    AssessmentStatus,
    PlacementPriority,
    PlacementStatus,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# =====================================================================
# Rows
# =====================================================================


@dataclass
class MockClientRow:
    user_id: str = "user1"
    name: str = "Margaret Hill"
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date | None = None
    notes: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    is_archived: bool = False
    archived_at: datetime | None = None
    deletion_reason: str | None = None
    can_delete_after: datetime | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockAssessmentRow:
    user_id: str = "user1"
    client_id: uuid.UUID = field(default_factory=uuid.uuid4)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    assessment_type: str = "mobility_scooter"
    status: Any = AssessmentStatus.DRAFT
    location: str | None = None
    assessment_date: datetime = field(default_factory=_now)
    notes: str | None = None
    ai_summary: str | None = None
    report_generated: bool = False
    completed_at: datetime | None = None
    is_archived: bool = False
    archived_at: datetime | None = None
    deletion_reason: str | None = None
    can_delete_after: datetime | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockResponseRow:
    assessment_id: uuid.UUID
    question_id: str
    section_id: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    answer: str | None = None
    notes: str | None = None
    media_url: str | None = None
    media_type: str | None = None
    ai_analysis: str | None = None
    needs_follow_up: bool = False
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockQuoteRow:
    assessment_id: uuid.UUID
    quote_number: str
    option_name: str
    items: list = field(default_factory=list)
    subtotal: Decimal = Decimal(0)
    tax: Decimal = Decimal(0)
    total: Decimal = Decimal(0)
    notes: str | None = None
    valid_until: datetime | None = None
    status: str = "draft"
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockInvoiceRow:
    assessment_id: uuid.UUID
    invoice_number: str
    items: list = field(default_factory=list)
    subtotal: Decimal = Decimal(0)
    tax: Decimal = Decimal(0)
    total: Decimal = Decimal(0)
    hourly_rate: float | None = None
    hours_worked: float | None = None
    status: str = "draft"
    due_date: datetime | None = None
    paid_date: datetime | None = None
    notes: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockAppointmentRow:
    title: str = "Home visit"
    appointment_type: str = "home_visit"
    start_time: datetime = field(default_factory=_now)
    end_time: datetime = field(default_factory=_now)
    user_id: str = "user1"
    client_id: uuid.UUID | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    description: str | None = None
    location: str | None = None
    is_all_day: bool = False
    status: Any = AppointmentStatus.SCHEDULED
    notes: str | None = None
    summary: str | None = None
    guidelines: str | None = None
    reminder_date: datetime | None = None
    reminder_sent: bool = False
    consent_required: bool = True
    consent_given: bool = False
    consent_given_at: datetime | None = None
    consent_given_by: str | None = None
    consent_method: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockMapRow:
    assessment_id: uuid.UUID
    property_type: str = "house"
    total_area: float | None = None
    floors: int = 1
    ai_generated: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockRoomRow:
    house_map_id: uuid.UUID
    name: str = "Bathroom"
    room_type: str = "bathroom"
    floor: int = 1
    length: float | None = None
    width: float | None = None
    height: float | None = None
    position_3d: dict | None = None
    features: list | None = None
    notes: str | None = None
    photo_url: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockAreaRow:
    house_map_id: uuid.UUID
    name: str = "Back yard"
    area_type: str = "outdoor"
    length: float | None = None
    width: float | None = None
    position_3d: dict | None = None
    features: list | None = None
    notes: str | None = None
    photo_url: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockDeviceRow:
    name: str = "Fall detection sensor"
    category: str = "safety"
    device_type: str = "fall_sensor"
    price: Decimal = Decimal("249.00")
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    manufacturer: str | None = None
    model: str | None = None
    description: str | None = None
    technical_specs: dict = field(default_factory=dict)
    placement_rules: dict | None = None
    coverage_area: Decimal | None = None
    power_requirements: str | None = None
    connectivity: str | None = None
    installation_cost: Decimal | None = None
    subscription_cost: Decimal | None = None
    subscription_type: str | None = None
    image_url: str | None = None
    documentation_url: str | None = None
    approved_for: list | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockPlacementRow:
    house_map_id: uuid.UUID
    device_id: uuid.UUID
    position_3d: dict = field(default_factory=lambda: {"x": 0, "y": 0, "z": 0})
    room_id: uuid.UUID | None = None
    area_id: uuid.UUID | None = None
    quantity: int = 1
    placement_reason: str | None = None
    priority: Any = PlacementPriority.RECOMMENDED
    status: Any = PlacementStatus.PROPOSED
    installation_notes: str | None = None
    ai_recommended: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockReportRow:
    user_id: str
    report_type: Any
    title: str
    start_date: datetime
    end_date: datetime
    data: dict
    description: str | None = None
    filters: dict | None = None
    columns: list | None = None
    status: str = "generated"
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


# =====================================================================
# Shared tables
# =====================================================================


class FakeData:
    """The rows every fake repository reads and writes."""

    def __init__(self) -> None:
        self.clients: dict[uuid.UUID, MockClientRow] = {}
        self.assessments: dict[uuid.UUID, MockAssessmentRow] = {}
        self.responses: dict[uuid.UUID, MockResponseRow] = {}
        self.quotes: dict[uuid.UUID, MockQuoteRow] = {}
        self.invoices: dict[uuid.UUID, MockInvoiceRow] = {}
        self.counters: dict[str, int] = {}
        self.appointments: dict[uuid.UUID, MockAppointmentRow] = {}
        self.maps: dict[uuid.UUID, MockMapRow] = {}
        self.rooms: dict[uuid.UUID, MockRoomRow] = {}
        self.areas: dict[uuid.UUID, MockAreaRow] = {}
        self.devices: dict[uuid.UUID, MockDeviceRow] = {}
        self.placements: dict[uuid.UUID, MockPlacementRow] = {}
        self.reports: dict[uuid.UUID, MockReportRow] = {}

    def add_client(self, **kwargs: Any) -> MockClientRow:
        row = MockClientRow(**kwargs)
        self.clients[row.id] = row
        return row

    def add_assessment(self, client: MockClientRow, **kwargs: Any) -> MockAssessmentRow:
        kwargs.setdefault("user_id", client.user_id)
        row = MockAssessmentRow(client_id=client.id, **kwargs)
        self.assessments[row.id] = row
        return row

    def add_response(self, assessment: MockAssessmentRow, **kwargs: Any) -> MockResponseRow:
        row = MockResponseRow(assessment_id=assessment.id, **kwargs)
        self.responses[row.id] = row
        return row

    def add_map(self, assessment: MockAssessmentRow, **kwargs: Any) -> MockMapRow:
        row = MockMapRow(assessment_id=assessment.id, **kwargs)
        self.maps[row.id] = row
        return row

    def add_room(self, house_map: MockMapRow, **kwargs: Any) -> MockRoomRow:
        row = MockRoomRow(house_map_id=house_map.id, **kwargs)
        self.rooms[row.id] = row
        return row

    def add_area(self, house_map: MockMapRow, **kwargs: Any) -> MockAreaRow:
        row = MockAreaRow(house_map_id=house_map.id, **kwargs)
        self.areas[row.id] = row
        return row

    def add_device(self, **kwargs: Any) -> MockDeviceRow:
        row = MockDeviceRow(**kwargs)
        self.devices[row.id] = row
        return row

    def add_appointment(self, **kwargs: Any) -> MockAppointmentRow:
        row = MockAppointmentRow(**kwargs)
        self.appointments[row.id] = row
        return row

    def map_owner(self, house_map_id: uuid.UUID) -> str | None:
        house_map = self.maps.get(house_map_id)
        assessment = self.assessments.get(house_map.assessment_id) if house_map else None
        return assessment.user_id if assessment else None


def _owned(row: Any, user_id: str, archived: bool | None) -> bool:
    if row is None or row.user_id != user_id:
        return False
    return archived is None or row.is_archived == archived


def _apply(row: Any, fields: dict[str, Any]) -> Any:
    for key, value in fields.items():
        setattr(row, key, value)
    row.updated_at = _now()
    return row


# =====================================================================
# Repositories
# =====================================================================


class FakeClientRepository:
    def __init__(self, data: FakeData) -> None:
        self.data = data

    async def create(self, db, *, user_id, **fields):
        row = MockClientRow(user_id=user_id, **fields)
        self.data.clients[row.id] = row
        return row

    async def get_for_user(self, db, user_id, client_id, *, archived=False):
        row = self.data.clients.get(client_id)
        return row if _owned(row, user_id, archived) else None

    async def list_by_user(self, db, user_id, *, search=None, limit=20, offset=0):
        rows = [
            c for c in self.data.clients.values()
            if c.user_id == user_id and not c.is_archived
            and (not search or search.lower() in c.name.lower())
        ]
        rows.sort(key=lambda c: c.created_at, reverse=True)
        return rows[offset:offset + limit]

    async def list_archived(self, db, user_id, *, search=None):
        return [c for c in self.data.clients.values() if _owned(c, user_id, True)]

    async def update(self, db, client, fields):
        return _apply(client, fields)

    async def archive(self, db, client, *, reason, can_delete_after):
        now = _now()
        client.is_archived = True
        client.archived_at = now
        client.deletion_reason = reason
        client.can_delete_after = can_delete_after
        client.updated_at = now
        return client

    async def restore(self, db, client):
        client.is_archived = False
        client.archived_at = None
        client.deletion_reason = None
        client.can_delete_after = None
        return client

    async def hard_delete(self, db, client):
        doomed = {a.id for a in self.data.assessments.values() if a.client_id == client.id}
        for rid in [r.id for r in self.data.responses.values() if r.assessment_id in doomed]:
            del self.data.responses[rid]
        for aid in doomed:
            del self.data.assessments[aid]
        del self.data.clients[client.id]


class FakeAssessmentRepository:
    def __init__(self, data: FakeData) -> None:
        self.data = data
        self.media_counts: dict[uuid.UUID, dict[str, int]] = {}

    async def create(self, db, *, user_id, client_id, **fields):
        row = MockAssessmentRow(user_id=user_id, client_id=client_id, **fields)
        self.data.assessments[row.id] = row
        return row

    async def get_for_user(self, db, user_id, assessment_id, *, archived=False):
        row = self.data.assessments.get(assessment_id)
        return row if _owned(row, user_id, archived) else None

    async def get_client_name(self, db, client_id):
        client = self.data.clients.get(client_id)
        return client.name if client else None

    async def get_client_date_of_birth(self, db, client_id):
        client = self.data.clients.get(client_id)
        return client.date_of_birth if client else None

    async def list_for_client(self, db, client_id, *, archived=None):
        return [
            a for a in self.data.assessments.values()
            if a.client_id == client_id and (archived is None or a.is_archived == archived)
        ]

    async def restore_for_client(self, db, client_id):
        restored = 0
        for a in self.data.assessments.values():
            if a.client_id == client_id and a.is_archived:
                await self.restore(db, a)
                restored += 1
        return restored

    async def update(self, db, assessment, fields):
        return _apply(assessment, fields)

    async def set_status(self, db, assessment, status, *, completed_at=None):
        assessment.status = status
        if status in INCOMPLETE_STATUSES:
            assessment.completed_at = None
        elif completed_at is not None:
            assessment.completed_at = completed_at
        assessment.updated_at = _now()
        return assessment

    async def archive(self, db, assessment, *, reason, can_delete_after):
        now = _now()
        assessment.is_archived = True
        assessment.archived_at = now
        assessment.deletion_reason = reason
        assessment.can_delete_after = can_delete_after
        assessment.updated_at = now
        return assessment

    async def restore(self, db, assessment):
        assessment.is_archived = False
        assessment.archived_at = None
        assessment.deletion_reason = None
        assessment.can_delete_after = None
        return assessment

    async def hard_delete(self, db, assessment):
        for rid in [r.id for r in self.data.responses.values() if r.assessment_id == assessment.id]:
            del self.data.responses[rid]
        del self.data.assessments[assessment.id]

    async def count_media_by_type(self, db, assessment_id):
        return dict(self.media_counts.get(assessment_id, {}))


class FakeResponseRepository:
    def __init__(self, data: FakeData) -> None:
        self.data = data

    async def list_for_assessment(self, db, assessment_id):
        rows = [r for r in self.data.responses.values() if r.assessment_id == assessment_id]
        return sorted(rows, key=lambda r: r.created_at)

    async def get_by_question(self, db, assessment_id, question_id):
        for r in self.data.responses.values():
            if r.assessment_id == assessment_id and r.question_id == question_id:
                return r
        return None

    async def get_by_id(self, db, assessment_id, response_id):
        row = self.data.responses.get(response_id)
        if row is None or row.assessment_id != assessment_id:
            return None
        return row

    async def upsert(
        self,
        db,
        *,
        assessment_id,
        question_id,
        section_id,
        answer,
        notes=None,
        media_url=None,
        media_type=None,
        needs_follow_up=False,
    ):
        values = {
            "section_id": section_id,
            "answer": answer,
            "notes": notes,
            "media_url": media_url,
            "media_type": media_type,
            "needs_follow_up": needs_follow_up,
        }
        existing = await self.get_by_question(db, assessment_id, question_id)
        if existing is not None:
            return _apply(existing, values)
        row = MockResponseRow(assessment_id=assessment_id, question_id=question_id, **values)
        self.data.responses[row.id] = row
        return row

    async def set_ai_analysis(self, db, response, analysis):
        response.ai_analysis = analysis
        response.updated_at = _now()
        return response

    async def delete(self, db, response):
        del self.data.responses[response.id]

    async def answered_question_ids(self, db, assessment_id):
        return {r.question_id for r in self.data.responses.values() if r.assessment_id == assessment_id}

    async def list_for_client(self, db, client_id, *, exclude_assessment_id=None, question_ids=None):
        live = {
            a.id for a in self.data.assessments.values()
            if a.client_id == client_id and not a.is_archived and a.id != exclude_assessment_id
        }
        rows = [
            r for r in self.data.responses.values()
            if r.assessment_id in live and (question_ids is None or r.question_id in question_ids)
        ]
        return sorted(rows, key=lambda r: r.updated_at, reverse=True)


class FakeBillingRepository:
    def __init__(self, data: FakeData) -> None:
        self.data = data

    def _owns(self, assessment_id, user_id) -> bool:
        a = self.data.assessments.get(assessment_id)
        return a is not None and a.user_id == user_id

    async def next_number(self, db, kind):
        # Reserve, then yield so concurrent callers interleave like row locks do
        value = self.data.counters.get(kind, 0) + 1
        self.data.counters[kind] = value
        await asyncio.sleep(0)
        return value

    async def create_quote(self, db, *, assessment_id, **fields):
        row = MockQuoteRow(assessment_id=assessment_id, **fields)
        self.data.quotes[row.id] = row
        return row

    async def get_quote(self, db, user_id, quote_id):
        row = self.data.quotes.get(quote_id)
        return row if row is not None and self._owns(row.assessment_id, user_id) else None

    async def list_quotes(self, db, user_id, *, assessment_id=None, status=None):
        return [
            q for q in self.data.quotes.values()
            if self._owns(q.assessment_id, user_id)
            and (assessment_id is None or q.assessment_id == assessment_id)
            and (status is None or q.status == status)
        ]

    async def update_quote(self, db, quote, fields):
        return _apply(quote, fields)

    async def delete_quote(self, db, quote):
        del self.data.quotes[quote.id]

    async def create_invoice(self, db, *, assessment_id, **fields):
        row = MockInvoiceRow(assessment_id=assessment_id, **fields)
        self.data.invoices[row.id] = row
        return row

    async def get_invoice(self, db, user_id, invoice_id):
        row = self.data.invoices.get(invoice_id)
        return row if row is not None and self._owns(row.assessment_id, user_id) else None

    async def list_invoices(self, db, user_id, *, assessment_id=None, status=None):
        return [
            i for i in self.data.invoices.values()
            if self._owns(i.assessment_id, user_id)
            and (assessment_id is None or i.assessment_id == assessment_id)
            and (status is None or i.status == status)
        ]

    async def update_invoice(self, db, invoice, fields):
        return _apply(invoice, fields)

    async def delete_invoice(self, db, invoice):
        del self.data.invoices[invoice.id]


class FakeAppointmentRepository:
    def __init__(self, data: FakeData) -> None:
        self.data = data

    async def create(self, db, *, user_id, **fields):
        row = MockAppointmentRow(user_id=user_id, **fields)
        self.data.appointments[row.id] = row
        return row

    async def get_for_user(self, db, user_id, appointment_id):
        row = self.data.appointments.get(appointment_id)
        return row if row is not None and row.user_id == user_id else None

    async def list_by_user(self, db, user_id, *, start=None, end=None):
        rows = [
            a for a in self.data.appointments.values()
            if a.user_id == user_id
            and (start is None or a.start_time >= start)
            and (end is None or a.start_time <= end)
        ]
        return sorted(rows, key=lambda a: a.start_time)

    async def client_names(self, db, client_ids):
        return {cid: self.data.clients[cid].name for cid in client_ids if cid in self.data.clients}

    async def update(self, db, appointment, fields):
        return _apply(appointment, fields)

    async def delete(self, db, appointment):
        del self.data.appointments[appointment.id]

    async def claim_due_reminders(self, db, user_id, *, now):
        due = [
            a for a in self.data.appointments.values()
            if a.user_id == user_id
            and not a.reminder_sent
            and a.status in REMINDABLE_STATUSES
            and a.reminder_date is not None and a.reminder_date <= now
            and a.start_time >= now
        ]
        for a in due:
            a.reminder_sent = True
        return due


class FakeHouseMapRepository:
    """Room, area and placement lookups used by the map and IoT services."""

    def __init__(self, data: FakeData) -> None:
        self.data = data

    def _mine(self, row, user_id):
        return row if row is not None and self.data.map_owner(row.house_map_id) == user_id else None

    async def get_map_for_user(self, db, user_id, house_map_id):
        row = self.data.maps.get(house_map_id)
        return row if row is not None and self.data.map_owner(row.id) == user_id else None

    async def get_for_assessment(self, db, assessment_id):
        return next((m for m in self.data.maps.values() if m.assessment_id == assessment_id), None)

    async def get_room_for_user(self, db, user_id, room_id):
        return self._mine(self.data.rooms.get(room_id), user_id)

    async def get_area_for_user(self, db, user_id, area_id):
        return self._mine(self.data.areas.get(area_id), user_id)

    async def list_rooms(self, db, house_map_id):
        return [r for r in self.data.rooms.values() if r.house_map_id == house_map_id]

    async def list_areas(self, db, house_map_id):
        return [a for a in self.data.areas.values() if a.house_map_id == house_map_id]

    async def list_placements(self, db, house_map_id):
        return [p for p in self.data.placements.values() if p.house_map_id == house_map_id]

    async def update_row(self, db, row, fields):
        return _apply(row, fields)


class FakeIoTDeviceRepository:
    def __init__(self, data: FakeData) -> None:
        self.data = data

    async def list_devices(self, db, *, category=None):
        rows = [d for d in self.data.devices.values() if not category or d.category == category]
        return sorted(rows, key=lambda d: (d.category, d.name))

    async def get_device(self, db, device_id):
        return self.data.devices.get(device_id)

    async def create_device(self, db, **fields):
        return self.data.add_device(**fields)

    async def update_device(self, db, device, fields):
        return _apply(device, fields)

    async def delete_device(self, db, device):
        del self.data.devices[device.id]

    async def get_placement_for_user(self, db, user_id, placement_id):
        row = self.data.placements.get(placement_id)
        return row if row is not None and self.data.map_owner(row.house_map_id) == user_id else None

    async def create_placement(self, db, *, house_map_id, **fields):
        row = MockPlacementRow(house_map_id=house_map_id, **fields)
        self.data.placements[row.id] = row
        return row

    async def update_placement(self, db, placement, fields):
        return _apply(placement, fields)

    async def delete_placement(self, db, placement):
        del self.data.placements[placement.id]


class FakeReportRepository:
    """Saved reports plus the source-row queries, answered from ``FakeData``."""

    def __init__(self, data: FakeData) -> None:
        self.data = data
        self.recommendations: list[tuple[uuid.UUID, str, str]] = []
        self.media: dict[uuid.UUID, int] = {}

    async def create(self, db, *, user_id, **fields):
        row = MockReportRow(user_id=user_id, **fields)
        self.data.reports[row.id] = row
        return row

    async def get_for_user(self, db, user_id, report_id):
        row = self.data.reports.get(report_id)
        return row if row is not None and row.user_id == user_id else None

    async def list_by_user(self, db, user_id, *, report_type=None):
        rows = [
            r for r in self.data.reports.values()
            if r.user_id == user_id and (report_type is None or r.report_type == report_type)
        ]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    async def delete(self, db, report):
        del self.data.reports[report.id]

    def _with_client(self, assessments):
        return [(a, self.data.clients[a.client_id]) for a in assessments]

    async def invoices_in_range(self, db, user_id, start, end):
        rows = []
        for invoice in self.data.invoices.values():
            assessment = self.data.assessments.get(invoice.assessment_id)
            if assessment and assessment.user_id == user_id and start <= invoice.created_at <= end:
                rows.append((invoice, self.data.clients[assessment.client_id]))
        return sorted(rows, key=lambda r: r[0].created_at, reverse=True)

    async def assessments_created_in_range(self, db, user_id, start, end):
        rows = [
            a for a in self.data.assessments.values()
            if a.user_id == user_id and start <= a.created_at <= end
        ]
        return self._with_client(sorted(rows, key=lambda a: a.created_at, reverse=True))

    async def completed_assessments_in_range(self, db, user_id, start, end):
        rows = [
            a for a in self.data.assessments.values()
            if a.user_id == user_id and a.status == AssessmentStatus.COMPLETED
            and start <= a.assessment_date <= end
        ]
        return self._with_client(sorted(rows, key=lambda a: a.assessment_date, reverse=True))

    async def appointments_in_range(self, db, user_id, start, end):
        rows = [
            a for a in self.data.appointments.values()
            if a.user_id == user_id and start <= a.start_time <= end
        ]
        return sorted(rows, key=lambda a: a.start_time)

    async def count_new_clients(self, db, user_id, start, end):
        return sum(
            1 for c in self.data.clients.values()
            if c.user_id == user_id and start <= c.created_at <= end
        )

    async def count_active_clients(self, db, user_id):
        return sum(1 for c in self.data.clients.values() if _owned(c, user_id, False))

    async def recommendations_for(self, db, assessment_ids):
        return [r for r in self.recommendations if r[0] in assessment_ids]

    async def media_counts(self, db, assessment_ids):
        return {aid: n for aid, n in self.media.items() if aid in assessment_ids}
