# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Request template model."""

import uuid as uuid_lib
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from src.models.company_template import CompanyTemplate


class RequestTemplate(Base, TimestampMixin):
    """Form template that users fill in to raise a request.

    Templates can be linked to specific companies. Companies without any
    linked template see every active template.
    """

    __tablename__ = "request_templates"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    form_structure: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    company_links: Mapped[list["CompanyTemplate"]] = relationship(
        "CompanyTemplate",
        back_populates="template",
        cascade="all, delete-orphan",
    )
