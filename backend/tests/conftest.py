"""Shared pytest fixtures.

Provides:
- Actors for every role (two client organizations, quality, admin)
- Certificate and ticket builders
- In-memory ports and a WorkflowOrchestrator wired to them
- SQLite in-memory database sessions for repository and API tests

Usage:
    def test_quality_rejects(orchestrator, quality_actor, pending_doc):
        result = orchestrator.submit_technical_verdict(...)
"""

import os
import sys
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("MAINTENANCE_MODE", "false")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))
sys.path.insert(0, str(Path(__file__).parent))

from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from audit.service import AuditRecorder
from auth.roles import UserRole
from domain.actors import Actor
from domain.quality_documents.models import QualityDocument, QualityStatus
from domain.tickets.models import TicketFlow, TicketStatus
from infrastructure.system_status import StaticSystemStatus
from models.base import Base
from workflow.orchestrator import WorkflowOrchestrator
from fixtures.in_memory import (
    InMemoryAuditSink,
    InMemoryDocuments,
    InMemoryTickets,
    RecordingNotifier,
)
from fixtures.builders import ORG_ACME, ORG_GLOBEX, make_document, make_folder, make_ticket

import models  # noqa: F401  (registers all tables)


# =============================================================================
# ACTORS
# =============================================================================

@pytest.fixture
def client_actor() -> Actor:
    return Actor(id="u-client-1", role=UserRole.CLIENT, organization_id=ORG_ACME,
                 name="Clara Client", organization_name="Acme Construction")


@pytest.fixture
def other_client_actor() -> Actor:
    return Actor(id="u-client-2", role=UserRole.CLIENT, organization_id=ORG_GLOBEX,
                 name="Gus Globex", organization_name="Globex Bridges")


@pytest.fixture
def quality_actor() -> Actor:
    return Actor(id="u-quality-1", role=UserRole.QUALITY, name="Ines Kraft")


@pytest.fixture
def admin_actor() -> Actor:
    return Actor(id="u-admin-1", role=UserRole.ADMIN, name="Ada Admin")


@pytest.fixture
def pending_doc() -> QualityDocument:
    return make_document("doc-pending", QualityStatus.PENDING)


@pytest.fixture
def approved_doc() -> QualityDocument:
    return make_document("doc-approved", QualityStatus.APPROVED)


# =============================================================================
# IN-MEMORY WIRING
# =============================================================================

@pytest.fixture
def documents() -> InMemoryDocuments:
    return InMemoryDocuments([
        make_folder("folder-root"),
        make_folder("folder-acme", parent_folder_id="folder-root"),
        make_document("doc-pending", QualityStatus.PENDING),
        make_document("doc-approved", QualityStatus.APPROVED),
        make_document("doc-rejected", QualityStatus.REJECTED),
        make_document("doc-globex", QualityStatus.APPROVED, owner_org_id=ORG_GLOBEX),
    ])


@pytest.fixture
def tickets() -> InMemoryTickets:
    return InMemoryTickets([
        make_ticket("ticket-1"),
        make_ticket("ticket-resolved", status=TicketStatus.RESOLVED, resolution_note="Done"),
        make_ticket("ticket-admin", flow=TicketFlow.QUALITY_TO_ADMIN, org_id=None,
                    raised_by_id="u-quality-1", raised_by_name="Ines Kraft"),
    ])


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def system_status() -> StaticSystemStatus:
    return StaticSystemStatus(maintenance_mode=False)


@pytest.fixture
def orchestrator(documents, tickets, audit_sink, notifier, system_status) -> WorkflowOrchestrator:
    return WorkflowOrchestrator(
        documents=documents,
        tickets=tickets,
        recorder=AuditRecorder(audit_sink),
        notifier=notifier,
        system_status=system_status,
    )


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh SQLite in-memory database per test.

    StaticPool keeps the single in-memory connection alive across sessions
    (the API tests use the same engine from the TestClient thread).
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
