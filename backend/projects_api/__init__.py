"""
Projects API — Application Package Initializer
================================================

What: REST facade over the project-management database's stored procedures.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, envelopes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← procedure calls, tree assembly
    ├─────────────────────────────────────┤
    │            Schemas (Data)           │  ← Pydantic request/row models
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The database owns all business data and rules; this package never
    issues table SQL, only stored procedure calls.
"""

__version__ = "1.0.0"
