"""Category model definitions."""

from sqlalchemy import Column, Integer, String
from backend.database import Base


class Category(Base):
    """Represents a colour-coded appointment category."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False)  # css colour, UI only
