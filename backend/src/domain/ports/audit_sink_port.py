"""Audit Sink Port - append-only destination for audit records."""

from abc import ABC, abstractmethod

from domain.audit.models import AuditRecord


class AuditSinkPort(ABC):
    """Port interface for the audit trail.

    Implementations append and never update or delete. The recorder treats
    append as fire-and-forget: any exception raised here is logged and
    swallowed by the caller.
    """

    @abstractmethod
    def append(self, record: AuditRecord) -> None:
        pass
