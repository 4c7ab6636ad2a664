# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Request template service."""

import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.events import AppEvent, event_bus
from src.models import CompanyTemplate, RequestTemplate
from src.schemas.request_template import RequestTemplateCreate, RequestTemplateUpdate
from src.services.loading import LoadingTracker

logger = logging.getLogger(__name__)

# Returns the templates for a company, or None to let the next resolver try
TemplateResolver = Callable[[Session, uuid.UUID], list[RequestTemplate] | None]


@dataclass
class TemplateStructure:
    """Which template tables exist in the connected database."""

    request_templates_exists: bool
    company_templates_exists: bool
    tables: list[str]


def _active_templates_query(db: Session):
    return (
        db.query(RequestTemplate)
        .filter(RequestTemplate.is_active.is_(True))
        .order_by(RequestTemplate.name)
    )


def resolve_company_templates(
    db: Session, company_id: uuid.UUID
) -> list[RequestTemplate] | None:
    """Active templates linked to the company.

    Gives up (None) when the association table cannot be queried or the
    company has no linked templates at all.
    """
    try:
        template_ids = [
            template_id
            for (template_id,) in db.query(CompanyTemplate.template_id)
            .filter(CompanyTemplate.company_id == company_id)
            .all()
        ]
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Company template links unavailable: {e}")
        return None

    if not template_ids:
        logger.info(f"No templates linked to company {company_id}")
        return None

    try:
        return (
            _active_templates_query(db)
            .filter(RequestTemplate.id.in_(template_ids))
            .all()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Error loading templates for company {company_id}: {e}")
        return None


def resolve_all_active_templates(
    db: Session, company_id: uuid.UUID
) -> list[RequestTemplate] | None:
    """Every active template, regardless of company."""
    try:
        return _active_templates_query(db).all()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error loading active templates: {e}")
        return None


COMPANY_TEMPLATE_RESOLVERS: tuple[TemplateResolver, ...] = (
    resolve_company_templates,
    resolve_all_active_templates,
)


class TemplateService:
    """CRUD and per-company resolution of request templates."""

    def __init__(
        self,
        db: Session,
        loading: LoadingTracker | None = None,
        resolvers: Sequence[TemplateResolver] = COMPANY_TEMPLATE_RESOLVERS,
    ) -> None:
        """Initialize the template service.

        Args:
            db: Database session
            loading: Tracker notified around every database round trip
            resolvers: Strategies tried in order by :meth:`get_by_company`
        """
        self.db = db
        self.loading = loading or LoadingTracker()
        self.resolvers = tuple(resolvers)

    def get_all(self, include_inactive: bool = False) -> list[RequestTemplate]:
        """Templates ordered by name; only active ones unless asked otherwise."""
        with self.loading.track("templates.get_all"):
            query = self.db.query(RequestTemplate).order_by(RequestTemplate.name)
            if not include_inactive:
                query = query.filter(RequestTemplate.is_active.is_(True))
            try:
                return query.all()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error loading templates: {e}")
                return []

    def get_all_active(self) -> list[RequestTemplate]:
        """Every active template ordered by name."""
        with self.loading.track("templates.get_all_active"):
            return resolve_all_active_templates(self.db, uuid.UUID(int=0)) or []

    def get_by_company(self, company_id: uuid.UUID) -> list[RequestTemplate]:
        """Templates available to a company.

        Tries each resolver in turn. By default that is the company's own
        linked templates, then all active templates.
        """
        with self.loading.track("templates.get_by_company"):
            for resolver in self.resolvers:
                templates = resolver(self.db, company_id)
                if templates is not None:
                    logger.debug(
                        f"{len(templates)} templates for company {company_id} "
                        f"from {resolver.__name__}"
                    )
                    return templates
            return []

    def get_by_id(self, template_id: uuid.UUID) -> RequestTemplate | None:
        with self.loading.track("templates.get_by_id"):
            try:
                return (
                    self.db.query(RequestTemplate)
                    .filter(RequestTemplate.id == template_id)
                    .first()
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error loading template {template_id}: {e}")
                return None

    def create(self, data: RequestTemplateCreate) -> RequestTemplate | None:
        with self.loading.track("templates.create"):
            template = RequestTemplate(**data.model_dump(exclude={"company_ids"}))
            try:
                self.db.add(template)
                self.db.flush()
                self._set_companies(template, data.company_ids)
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error creating template {data.name!r}: {e}")
                return None
            self.db.refresh(template)

        event_bus.publish(
            AppEvent.TEMPLATE_CREATED, {"template_id": str(template.id)}
        )
        return template

    def update(
        self, template_id: uuid.UUID, data: RequestTemplateUpdate
    ) -> RequestTemplate | None:
        template = self.get_by_id(template_id)
        if not template:
            return None

        with self.loading.track("templates.update"):
            changes = data.model_dump(exclude_unset=True, exclude={"company_ids"})
            try:
                for field_name, value in changes.items():
                    setattr(template, field_name, value)
                if data.company_ids is not None:
                    self._set_companies(template, data.company_ids)
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error updating template {template_id}: {e}")
                return None
            self.db.refresh(template)

        event_bus.publish(
            AppEvent.TEMPLATE_UPDATED, {"template_id": str(template.id)}
        )
        return template

    def delete(self, template_id: uuid.UUID) -> bool:
        template = self.get_by_id(template_id)
        if not template:
            return False

        with self.loading.track("templates.delete"):
            try:
                self.db.delete(template)
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error deleting template {template_id}: {e}")
                return False

        event_bus.publish(AppEvent.TEMPLATE_DELETED, {"template_id": str(template_id)})
        return True

    def verify_structure(self) -> TemplateStructure:
        """Report which template tables exist."""
        with self.loading.track("templates.verify_structure"):
            tables = sorted(inspect(self.db.get_bind()).get_table_names())
        structure = TemplateStructure(
            request_templates_exists=RequestTemplate.__tablename__ in tables,
            company_templates_exists=CompanyTemplate.__tablename__ in tables,
            tables=tables,
        )
        logger.info(
            f"Template tables: request_templates={structure.request_templates_exists}, "
            f"company_templates={structure.company_templates_exists}"
        )
        return structure

    def _set_companies(
        self, template: RequestTemplate, company_ids: list[uuid.UUID]
    ) -> None:
        wanted = set(company_ids)
        for link in list(template.company_links):
            if link.company_id not in wanted:
                template.company_links.remove(link)
        current = {link.company_id for link in template.company_links}
        for company_id in company_ids:
            if company_id not in current:
                template.company_links.append(CompanyTemplate(company_id=company_id))
                current.add(company_id)
