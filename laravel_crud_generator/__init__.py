"""
Laravel CRUD generator.

Scaffolds a model, migration columns, controller, service, DTOs, API
resource, response helper and route registration for one entity of a
Laravel project, patching existing files idempotently.
"""

__version__ = "0.1.0"
