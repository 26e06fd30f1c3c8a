"""
Notes API.

- api/: FastAPI routers (health, v1 notes)
- core/: Configuration, database handle, logging, errors, pagination
- models/: SQLAlchemy models
- repositories/: Data access (statements, keyset pagination, transactions)
- schemas/: Pydantic request/response schemas
- services/: Business logic and error translation
"""

__version__ = "1.0.0"
