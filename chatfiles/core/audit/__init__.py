from chatfiles.core.audit.models import AuditLog
from chatfiles.core.audit.service import create_audit_log, AuditAction

__all__ = ["AuditLog", "create_audit_log", "AuditAction"]
