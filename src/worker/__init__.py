"""Background workers for the print shop ledger"""
from .ledger_auditor import AuditReport, LedgerAuditorWorker

__all__ = ["AuditReport", "LedgerAuditorWorker"]
