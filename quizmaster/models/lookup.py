"""
Category and difficulty lookup tables
"""
from sqlalchemy import Column, Integer, String
from quizmaster.database import Base


class Category(Base):
    """
    Categories table - one row per trivia category name
    """
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name})>"


class Difficulty(Base):
    """
    Difficulties table - Easy / Medium / Hard / Any Difficulty
    """
    __tablename__ = "difficulties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False, index=True)

    def __repr__(self):
        return f"<Difficulty(id={self.id}, name={self.name})>"
