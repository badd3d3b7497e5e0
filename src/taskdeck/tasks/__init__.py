"""
Task subsystem.

Components:
- task_models.py: Task entity and Priority
- task_collection.py: per-user ordered store (all mutations, save after each)
- task_filters.py: FilterSpec + pure filter/sort engine + aggregate counts
- task_api.py: TaskBoard session controller (user intents -> store/filter -> presenter)
- task_export.py: printable text / Markdown listings
"""
