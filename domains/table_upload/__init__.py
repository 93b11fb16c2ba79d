"""
Table Upload Domain

Watches a source directory for finished CSV files and forwards them:
- watchers/filesystem.py - Polling change monitor emitting CSV candidates
- processors/router.py - Header-based table routing
- processors/dispatcher.py - Remote transfer and local cleanup
- processors/audit_log.py - Per-directory upload.log audit trail
"""

__all__ = ["processors", "watchers"]
