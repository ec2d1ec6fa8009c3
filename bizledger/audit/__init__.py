"""Audit logging package."""

from bizledger.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
