"""
Table Upload Processors

Per-file processing steps:
- router.py - Match the header line against known table templates
- dispatcher.py - Copy matched files to the remote table directory
- transfer.py - rsync-backed transfer capability
- audit_log.py - Timestamped outcome records next to the source file
"""
