# src/models/user_company.py
import uuid

from sqlalchemy import Column, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from src.models.base import Base


class UserCompany(Base):
    """Association between a user and a company they work for."""

    __tablename__ = "user_companies"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    company_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "company_id", name="_user_company_uc"),
    )

    user = relationship("User", back_populates="user_companies")
    company = relationship("Company", back_populates="user_companies")
