# src/models/permission.py
from sqlalchemy import Column, String, Text

from src.models.base import Base, TimestampMixin


class Permission(Base, TimestampMixin):
    """A single grantable action on a view, identified by ``<view>.<action>``.

    Rows are seeded from the view/action catalog; ``view_code`` and
    ``action_code`` keep the two halves of the code queryable.
    """

    __tablename__ = "permissions"

    code = Column(String(200), primary_key=True)
    view_code = Column(String(100), nullable=False, index=True)
    action_code = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
