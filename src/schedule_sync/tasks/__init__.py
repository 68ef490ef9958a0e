"""
Task subsystem.

Components:
- task_models.py: data structures (Task, RecurrenceRule)
- recurrence.py: which dates a series occurs on
- task_store.py: in-memory store with write-through persistence
- task_codec.py: JSON records <-> Task
- task_editor.py: input validation before tasks reach the store
- task_stats.py: completion / scheduling statistics
"""
