"""
Feature modules for Xelma backend.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's public API
- models.py: Pydantic models for data transfer
- service.py: Business logic implementation
- repository.py: Supabase-backed persistence
- exceptions.py: Module-specific exceptions

Route handlers live in api/routes and reach modules through their interfaces.
"""
