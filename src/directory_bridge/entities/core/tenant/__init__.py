"""Tenant entity package."""

from .entity import Tenant
from .repository import TenantRepository
from .table import TenantTable

__all__ = ["Tenant", "TenantTable", "TenantRepository"]
