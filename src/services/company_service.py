# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Company service."""

import uuid

from sqlalchemy.orm import Session

from src.events import AppEvent, event_bus
from src.models import Company, User, UserCompany
from src.schemas.company import CompanyCreate, CompanyUpdate


def get_companies(db: Session, active_only: bool = False) -> list[Company]:
    """Get all companies ordered by business name."""
    query = db.query(Company)
    if active_only:
        query = query.filter(Company.is_active.is_(True))
    return query.order_by(Company.business_name).all()


def get_company(db: Session, company_id: uuid.UUID) -> Company | None:
    return db.query(Company).filter(Company.id == company_id).first()


def create_company(db: Session, data: CompanyCreate) -> Company:
    company = Company(**data.model_dump())
    db.add(company)
    db.commit()
    db.refresh(company)
    event_bus.publish(AppEvent.COMPANY_CREATED, {"company_id": str(company.id)})
    return company


def update_company(db: Session, company: Company, data: CompanyUpdate) -> Company:
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(company, field, value)
    db.commit()
    db.refresh(company)
    event_bus.publish(AppEvent.COMPANY_UPDATED, {"company_id": str(company.id)})
    return company


def delete_company(db: Session, company: Company) -> None:
    company_id = str(company.id)
    db.delete(company)
    db.commit()
    event_bus.publish(AppEvent.COMPANY_DELETED, {"company_id": company_id})


def find_missing_companies(
    db: Session, company_ids: list[uuid.UUID]
) -> list[uuid.UUID]:
    """Return the ids from ``company_ids`` that do not exist."""
    if not company_ids:
        return []
    found = {
        c for (c,) in db.query(Company.id).filter(Company.id.in_(company_ids)).all()
    }
    return [c for c in company_ids if c not in found]


def get_user_companies(db: Session, user_id: uuid.UUID) -> list[Company]:
    """Companies a user is linked to, ordered by business name."""
    return (
        db.query(Company)
        .join(UserCompany, UserCompany.company_id == Company.id)
        .filter(UserCompany.user_id == user_id)
        .order_by(Company.business_name)
        .all()
    )


def set_user_companies(db: Session, user: User, company_ids: list[uuid.UUID]) -> None:
    """Replace a user's company links. Does not commit."""
    wanted = set(company_ids)
    for link in list(user.user_companies):
        if link.company_id not in wanted:
            user.user_companies.remove(link)
    current = {link.company_id for link in user.user_companies}
    for company_id in company_ids:
        if company_id not in current:
            user.user_companies.append(UserCompany(company_id=company_id))
            current.add(company_id)
