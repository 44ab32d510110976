"""Service layer: async functions over an AsyncSession.

Modules are imported individually (``from ctrlaltvibe.services import
project_service``) so that services can depend on each other freely.
"""
