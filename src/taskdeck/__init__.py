"""
taskdeck: a terminal task tracker.

Components:
- tasks/: task entity, per-user collection store, filter & sort engine, session controller
- storage/ + auth/: local key-value storage, accounts, groups, per-user persistence
- connectors/ + cli/: console presentation layer and slash commands
"""
