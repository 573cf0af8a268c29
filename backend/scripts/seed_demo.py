#!/usr/bin/env python
"""Seed script to create a demo certificate tree.

Creates one organization's root folder, a project folder and a handful of
mill certificates in different compliance states, plus an open support
ticket. Meant for local development against a fresh database.

Usage:
    python backend/scripts/seed_demo.py

Environment Variables:
    DATABASE_URL: Database connection string (default from settings)
    ORG_ID: Organization id owning the tree (default: org-demo)
    ORG_NAME: Organization display name (default: Demo Steel Buyer)
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from database import SessionLocal, init_db
from domain.errors import InfrastructureError
from domain.quality_documents.models import (
    ChemicalComposition,
    MechanicalProperties,
    QualityDocument,
    QualityStatus,
)
from domain.tickets.models import SupportTicket, TicketFlow, TicketPriority, TicketStatus
from infrastructure.repositories import SqlDocumentRepository, SqlTicketRepository

CERTIFICATES = (
    ("S355J2", "B-2025-0101", QualityStatus.PENDING),
    ("S275JR", "B-2025-0102", QualityStatus.APPROVED),
    ("S460M", "B-2025-0103", QualityStatus.REJECTED),
)


def main():
    """Create the demo tree."""
    org_id = os.getenv("ORG_ID", "org-demo")
    org_name = os.getenv("ORG_NAME", "Demo Steel Buyer")
    now = datetime.now(timezone.utc)

    init_db()
    session = SessionLocal()
    documents = SqlDocumentRepository(session)
    tickets = SqlTicketRepository(session)

    try:
        root_id = f"{org_id}-root"
        if documents.get(root_id) is not None:
            print(f"ERROR: Demo tree for {org_id} already exists")
            sys.exit(1)

        documents.add(QualityDocument(
            id=root_id, owner_org_id=org_id, owner_org_name=org_name,
            name=org_name, is_folder=True, status=None,
        ))
        project_id = f"{org_id}-harbour-bridge"
        documents.add(QualityDocument(
            id=project_id, owner_org_id=org_id, owner_org_name=org_name,
            name="Harbour Bridge", is_folder=True, parent_folder_id=root_id, status=None,
        ))

        for grade, batch, status in CERTIFICATES:
            doc = documents.add(QualityDocument(
                id=f"{org_id}-{batch.lower()}",
                owner_org_id=org_id,
                owner_org_name=org_name,
                name=f"{batch}-{grade}.pdf",
                parent_folder_id=project_id,
                status=status,
                project_name="Harbour Bridge",
                batch_number=batch,
                grade=grade,
                file_type="application/pdf",
                uploaded_at=now,
                uploaded_by="seed",
                chemical_composition=ChemicalComposition(
                    carbon=0.18, manganese=1.40, silicon=0.30, phosphorus=0.02, sulfur=0.01
                ),
                mechanical_properties=MechanicalProperties(
                    yield_strength=360.0, tensile_strength=500.0, elongation=22.0
                ),
            ))
            print(f"  {doc.status.value:<9} {doc.name}")

        ticket = tickets.insert(SupportTicket(
            id=f"{org_id}-ticket-1",
            subject="Elongation value looks wrong",
            description="Batch B-2025-0103 lists 14% elongation, order requires 20%",
            priority=TicketPriority.NORMAL,
            status=TicketStatus.OPEN,
            flow=TicketFlow.CLIENT_TO_QUALITY,
            raised_by_id="seed",
            org_id=org_id,
            client_name=org_name,
            created_at=now,
        ))

        print("SUCCESS: Demo tree created")
        print(f"  Org:    {org_id}")
        print(f"  Root:   {root_id}")
        print(f"  Ticket: {ticket.id}")

    except InfrastructureError as e:
        print(f"ERROR: Failed to seed demo data: {e.message}")
        sys.exit(1)

    finally:
        session.close()


if __name__ == "__main__":
    main()
