"""Tenant repository."""

from sqlmodel import Session, select

from .entity import Tenant
from .table import TenantTable


class TenantRepository:
    """Data-access layer for tenants."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_key(self, key: str) -> Tenant | None:
        statement = select(TenantTable).where(TenantTable.key == key)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Tenant.model_validate(row, from_attributes=True)

    def list_all(self) -> list[Tenant]:
        rows = self._session.exec(select(TenantTable).order_by(TenantTable.key)).all()
        return [Tenant.model_validate(row, from_attributes=True) for row in rows]

    def create(self, tenant: Tenant) -> Tenant:
        row = TenantTable.model_validate(tenant, from_attributes=True)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Tenant.model_validate(row, from_attributes=True)
