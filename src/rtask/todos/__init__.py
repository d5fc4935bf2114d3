"""
Todo subsystem.

Components:
- todo_models.py: data structures (Todo, Category)
- todo_store.py: SQLite-backed storage + query/update helpers
"""
