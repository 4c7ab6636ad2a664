# src/models/company_template.py
import uuid

from sqlalchemy import Column, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from src.models.base import Base


class CompanyTemplate(Base):
    """Association making a request template available to a company."""

    __tablename__ = "company_templates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    template_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("request_templates.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("company_id", "template_id", name="_company_template_uc"),
    )

    company = relationship("Company", back_populates="template_links")
    template = relationship("RequestTemplate", back_populates="company_links")
