"""Service layer: owner-scoped use cases and authentication.

Import concrete services from their subpackages, e.g.
``from wrenchlog.services.parts.service import PartService``.
"""
