"""
Table Upload Watchers

- filesystem.py - watchdog-based change monitor for CSV candidates
"""
