"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskInput)
- task_store.py: SQLite-backed storage (create/update/list/soft delete/complete/purge)
"""
