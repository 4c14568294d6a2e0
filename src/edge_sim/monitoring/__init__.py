"""Monitoring exports."""

from edge_sim.monitoring.audit import AuditLog

__all__ = ["AuditLog"]
