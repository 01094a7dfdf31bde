"""
FastAPI dependencies that build compliance services on a request session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from api.database import get_db
from api.repositories import SqlBankStore, SqlComplianceStore, SqlPoolStore, SqlRouteStore
from src.compliance.services import (
    BankingService,
    ComplianceService,
    PoolingService,
    RouteService,
)


def get_route_service(db: Session = Depends(get_db)) -> RouteService:
    return RouteService(SqlRouteStore(db))


def get_compliance_service(db: Session = Depends(get_db)) -> ComplianceService:
    return ComplianceService(SqlRouteStore(db), SqlComplianceStore(db), SqlBankStore(db))


def get_banking_service(db: Session = Depends(get_db)) -> BankingService:
    return BankingService(SqlComplianceStore(db), SqlBankStore(db))


def get_pooling_service(db: Session = Depends(get_db)) -> PoolingService:
    return PoolingService(SqlComplianceStore(db), SqlPoolStore(db))
