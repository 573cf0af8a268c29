"""Fixtures for repository and API integration tests.

API tests run the real FastAPI app against the per-test SQLite session from
the root conftest; the lifespan (init_db) is skipped because TestClient is
not used as a context manager.
"""

import pytest
from fastapi.testclient import TestClient

from database import get_db
from dependencies import get_system_status
from domain.quality_documents.models import QualityStatus
from domain.tickets.models import TicketFlow, TicketStatus
from infrastructure.repositories.document_repository import SqlDocumentRepository
from infrastructure.repositories.ticket_repository import SqlTicketRepository
from infrastructure.system_status import StaticSystemStatus
from main import app
from fixtures.builders import ORG_GLOBEX, make_document, make_folder, make_ticket


@pytest.fixture
def seeded_db(db_session):
    """Database holding one organization tree and a few tickets."""
    docs = SqlDocumentRepository(db_session)
    for doc in (
        make_folder("folder-root"),
        make_folder("folder-acme", parent_folder_id="folder-root"),
        make_document("doc-pending", QualityStatus.PENDING),
        make_document("doc-approved", QualityStatus.APPROVED),
        make_document("doc-rejected", QualityStatus.REJECTED),
        make_document("doc-globex", QualityStatus.APPROVED, owner_org_id=ORG_GLOBEX, parent_folder_id=None),
    ):
        docs.add(doc)

    tickets = SqlTicketRepository(db_session)
    tickets.insert(make_ticket("ticket-1"))
    tickets.insert(make_ticket("ticket-resolved", status=TicketStatus.RESOLVED,
                               resolution_note="Done", created_offset_minutes=5))
    tickets.insert(make_ticket("ticket-admin", flow=TicketFlow.QUALITY_TO_ADMIN, org_id=None,
                               raised_by_id="u-quality-1", created_offset_minutes=10))
    return db_session


@pytest.fixture
def maintenance():
    """Switchable maintenance flag injected into the app."""
    status = StaticSystemStatus(maintenance_mode=False)
    app.dependency_overrides[get_system_status] = lambda: status
    yield status
    app.dependency_overrides.pop(get_system_status, None)


@pytest.fixture
def api_client(seeded_db, maintenance):
    def override_get_db():
        yield seeded_db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)
