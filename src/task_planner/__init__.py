"""
task_planner: natural-language task list updates through a hosted OpenAI assistant.

Packages:
- core/: run polling, action decoding, command dispatch, turn orchestration
- tasks/: Task model + SQLite task store
- llm/: OpenAI Assistants adapter, offline stand-in, tool schema
- cli/: composition root + command-line entrypoint
"""

__version__ = "0.1.0"
