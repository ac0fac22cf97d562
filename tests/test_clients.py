"""Client and assessment archive lifecycle with the in-memory repositories.

Verifies that:
  - Archiving a client cascades to its live assessments with per-record
    retention dates
  - Restoring a client brings its assessments back
  - Permanent delete is forbidden until the retention date has passed
  - Another practitioner sees every one of these records as missing
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from otassess_db.models.enums import AssessmentStatus
from otassess_core.assessments import AssessmentService
from otassess_core.clients import ClientService
from otassess_core.errors import AnswerValidationError, ForbiddenError, NotFoundError
from otassess_core.models.client import AssessmentCreate, AssessmentUpdate, ClientCreate, ClientUpdate
from otassess_core.responses import ResponseStore

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clients(repos):
    svc = ClientService()
    svc._repo = repos["clients"]
    svc._assessments = repos["assessments"]
    return svc


@pytest.fixture
def assessments(store, repos):
    responses = ResponseStore(store)
    responses._assessments = repos["assessments"]
    responses._clients = repos["clients"]
    responses._responses = repos["responses"]

    svc = AssessmentService(responses)
    svc._repo = repos["assessments"]
    svc._clients = repos["clients"]
    svc._response_rows = repos["responses"]
    return svc


# =====================================================================
# Client CRUD
# =====================================================================


@pytest.mark.asyncio
async def test_create_and_update(clients, db, ctx):
    client = await clients.create(db, ctx, ClientCreate(name="Margaret Hill", phone="0400 000 000"))
    assert client.user_id == "user1"

    updated = await clients.update(db, ctx, client.id, ClientUpdate(address="12 Rose St"))
    assert updated.address == "12 Rose St"
    assert updated.phone == "0400 000 000"


@pytest.mark.asyncio
async def test_list_hides_other_practitioners(clients, db, ctx, other_ctx, data):
    data.add_client(name="Mine")
    data.add_client(name="Theirs", user_id="user2")
    assert [c.name for c in await clients.list(db, ctx)] == ["Mine"]
    assert [c.name for c in await clients.list(db, other_ctx)] == ["Theirs"]


@pytest.mark.asyncio
async def test_get_foreign_client_is_not_found(clients, db, other_ctx, data):
    client = data.add_client()
    with pytest.raises(NotFoundError):
        await clients.get(db, other_ctx, client.id)


# =====================================================================
# Archive cascade
# =====================================================================


@pytest.mark.asyncio
async def test_archive_cascades_to_live_assessments(clients, db, ctx, data):
    client = data.add_client(date_of_birth=date(1948, 2, 3))
    draft = data.add_assessment(client, status=AssessmentStatus.DRAFT)
    done = data.add_assessment(
        client,
        status=AssessmentStatus.COMPLETED,
        completed_at=datetime(2024, 9, 1, tzinfo=timezone.utc),
    )

    result = await clients.archive(db, ctx, client.id, reason="Moved interstate", now=NOW)

    assert result.archived_count == 3
    assert client.is_archived
    assert client.deletion_reason == "Moved interstate"
    assert client.can_delete_after == datetime(2032, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert draft.is_archived and done.is_archived
    assert draft.deletion_reason == "Client archived: Moved interstate"
    assert draft.can_delete_after == NOW + timedelta(days=30)
    assert done.can_delete_after == datetime(2031, 9, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_archived_client_hidden_from_live_reads(clients, db, ctx, data):
    client = data.add_client()
    await clients.archive(db, ctx, client.id, reason="x", now=NOW)
    with pytest.raises(NotFoundError):
        await clients.get(db, ctx, client.id)
    archived = await clients.list_archived(db, ctx, now=NOW)
    assert [c.id for c in archived] == [client.id]
    assert not archived[0].can_permanently_delete


@pytest.mark.asyncio
async def test_restore_brings_assessments_back(clients, db, ctx, data):
    client = data.add_client()
    assessment = data.add_assessment(client)
    await clients.archive(db, ctx, client.id, reason="x", now=NOW)

    await clients.restore(db, ctx, client.id)

    assert not client.is_archived
    assert not assessment.is_archived
    assert assessment.can_delete_after is None


# =====================================================================
# Permanent delete
# =====================================================================


@pytest.mark.asyncio
async def test_permanent_delete_before_retention_forbidden(clients, db, ctx, data):
    client = data.add_client()
    await clients.archive(db, ctx, client.id, reason="x", now=NOW)

    with pytest.raises(ForbiddenError, match="more days"):
        await clients.permanent_delete(db, ctx, client.id, now=NOW + timedelta(days=1))
    assert client.id in data.clients


@pytest.mark.asyncio
async def test_permanent_delete_live_client_not_found(clients, db, ctx, data):
    client = data.add_client()
    with pytest.raises(NotFoundError):
        await clients.permanent_delete(db, ctx, client.id, now=NOW)


@pytest.mark.asyncio
async def test_permanent_delete_after_retention_cascades(clients, db, ctx, data):
    client = data.add_client()
    assessment = data.add_assessment(client)
    data.add_response(assessment, question_id="scooter_user_2", section_id="scooter_user", answer="Yes")
    client.is_archived = True
    client.can_delete_after = NOW - timedelta(days=1)

    await clients.permanent_delete(db, ctx, client.id, now=NOW)

    assert not data.clients
    assert not data.assessments
    assert not data.responses


@pytest.mark.asyncio
async def test_permanent_delete_without_retention_date_forbidden(clients, db, ctx, data):
    client = data.add_client(is_archived=True)
    with pytest.raises(ForbiddenError, match="no retention date"):
        await clients.permanent_delete(db, ctx, client.id, now=NOW)


# =====================================================================
# Assessment lifecycle
# =====================================================================


@pytest.mark.asyncio
async def test_create_assessment_starts_as_draft(assessments, db, ctx, data):
    client = data.add_client()
    view = await assessments.create(
        db, ctx, AssessmentCreate(client_id=client.id, assessment_type="falls_risk"),
    )
    assert view.status == AssessmentStatus.DRAFT
    assert view.client_name == client.name


@pytest.mark.asyncio
async def test_create_for_foreign_client_not_found(assessments, db, other_ctx, data):
    client = data.add_client()
    with pytest.raises(NotFoundError):
        await assessments.create(db, other_ctx, AssessmentCreate(client_id=client.id))


@pytest.mark.asyncio
async def test_approve_requires_completed(assessments, db, ctx, data):
    client = data.add_client()
    assessment = data.add_assessment(client, status=AssessmentStatus.IN_PROGRESS)
    with pytest.raises(AnswerValidationError, match="Only completed"):
        await assessments.update(db, ctx, assessment.id, AssessmentUpdate(status="approved"))

    assessment.status = AssessmentStatus.COMPLETED
    view = await assessments.update(db, ctx, assessment.id, AssessmentUpdate(status="approved"))
    assert view.status == AssessmentStatus.APPROVED


@pytest.mark.asyncio
async def test_changing_type_rederives_status(assessments, db, ctx, data):
    client = data.add_client()
    assessment = data.add_assessment(client, status=AssessmentStatus.IN_PROGRESS)
    data.add_response(assessment, question_id="scooter_user_2", section_id="scooter_user", answer="Yes")

    view = await assessments.update(
        db, ctx, assessment.id, AssessmentUpdate(assessment_type="falls_risk"),
    )
    # The saved scooter answer does not belong to the falls bank
    assert view.status == AssessmentStatus.DRAFT


@pytest.mark.asyncio
async def test_restore_assessment_requires_live_client(assessments, db, ctx, data):
    client = data.add_client(is_archived=True)
    assessment = data.add_assessment(client, is_archived=True)
    with pytest.raises(ForbiddenError, match="Restore the client"):
        await assessments.restore(db, ctx, assessment.id)

    client.is_archived = False
    view = await assessments.restore(db, ctx, assessment.id)
    assert not view.is_archived


@pytest.mark.asyncio
async def test_archive_assessment_of_child_client(assessments, db, ctx, data):
    client = data.add_client(date_of_birth=date(2015, 4, 10))
    assessment = data.add_assessment(
        client, status=AssessmentStatus.COMPLETED, completed_at=NOW - timedelta(days=10),
    )
    result = await assessments.archive(db, ctx, assessment.id, reason="Duplicate", now=NOW)
    assert result.can_delete_after == datetime(2040, 4, 10, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_analyze_falls_back_to_canned_summary(assessments, db, ctx, data, repos):
    client = data.add_client(name="Margaret Hill")
    assessment = data.add_assessment(client, assessment_type="home")
    repos["assessments"].media_counts[assessment.id] = {"photo": 2, "video": 1}

    result = await assessments.analyze(db, ctx, assessment.id)

    assert result.fallback
    assert result.summary == (
        "Assessment for Margaret Hill (home). 3 media items captured. Detailed analysis pending."
    )
    assert assessment.ai_summary == result.summary
