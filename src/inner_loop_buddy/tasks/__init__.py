"""
Task subsystem.

Components:
- task_models.py: data structures (TaskDescriptor, MatchedExecutionEvent, modes)
- task_host.py: runs folder tasks as subprocesses and reports starts
- task_monitor.py: matches starts against criteria and counts them per scope
"""
