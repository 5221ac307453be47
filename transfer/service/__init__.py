"""
Service layer for the Kaltura to Vimeo transfer.

This module contains the functions that talk to the Kaltura API, download
flavors and re-encode them with ffmpeg. They take their configuration as an
explicit MigrationConfig value and never touch Django models. They are used by:
- The migrate_entries management command (management/commands/migrate_entries.py)
- The check_tools management command (management/commands/check_tools.py)
"""
