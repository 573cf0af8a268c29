"""Compliance overview counters for dashboards."""

from dataclasses import asdict, dataclass
from typing import Iterable, assert_never

from .models import QualityDocument, QualityStatus


@dataclass(frozen=True)
class ComplianceOverview:
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    to_delete: int = 0
    unviewed: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def compliance_overview(docs: Iterable[QualityDocument]) -> ComplianceOverview:
    """Count certificates per status, ignoring folders.

    unviewed counts APPROVED certificates no client has opened yet.
    """
    pending = approved = rejected = to_delete = unviewed = 0
    for doc in docs:
        if doc.is_folder or doc.status is None:
            continue
        match doc.status:
            case QualityStatus.PENDING:
                pending += 1
            case QualityStatus.APPROVED:
                approved += 1
                if doc.viewed_at is None:
                    unviewed += 1
            case QualityStatus.REJECTED:
                rejected += 1
            case QualityStatus.TO_DELETE:
                to_delete += 1
            case _:
                assert_never(doc.status)
    return ComplianceOverview(
        total=pending + approved + rejected + to_delete,
        pending=pending,
        approved=approved,
        rejected=rejected,
        to_delete=to_delete,
        unviewed=unviewed,
    )
