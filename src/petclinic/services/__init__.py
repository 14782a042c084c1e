"""
Service layer for the petclinic package.
"""

from .clinic_service import ClinicService

__all__ = ["ClinicService"]
