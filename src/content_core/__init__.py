"""Content service - projects, tasks and comments with role-based membership.

Modules:
- models: SQLAlchemy tables and enums
- crud: database operations
- task_query: filter/sort composition for task listing
- services: project, task and comment business rules
- notifications: fire-and-forget notification client
- api: FastAPI application factory and routers
"""

__version__ = "1.0.0"
