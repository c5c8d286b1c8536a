"""File-backed user accounts and ticketed-event inventory."""
