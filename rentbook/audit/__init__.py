"""Audit logging package."""

from rentbook.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
