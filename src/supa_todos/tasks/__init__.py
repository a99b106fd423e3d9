"""
Task subsystem.

Components:
- task_models.py: data structures (Task, row conversion)
- task_store.py: local mirror of the remote `tasks` table (TaskListStore)
"""
