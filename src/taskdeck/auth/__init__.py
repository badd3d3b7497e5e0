"""Accounts, login session, groups and per-user task persistence."""
