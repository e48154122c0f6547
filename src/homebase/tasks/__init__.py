"""
Task subsystem.

Components:
- task_models.py: data structures (Task, BacklogItem, RoutineItem, ArchivedTask, DraftTask)
- classifier.py: keyword classifier for brain-dump lines
- backlog.py / on_deck.py / routine.py / archive.py: one manager per persisted bucket
- undo.py: single-slot cancellable undo window
- lifecycle.py: orchestrator for every cross-bucket transition
- task_api.py: small display helpers used by connectors
"""
