"""
Modelos de base de datos (ORM).

Shows y personas son registros planos; la relacion de reparto vive en la
tabla show_cast y se consulta por par de IDs, sin back-references entre
modelos. Los IDs vienen de TVMaze (no son autoincrementales).
"""
from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, Table

from app.infrastructure.database.session import Base


show_cast = Table(
    "show_cast",
    Base.metadata,
    Column("show_id", Integer, ForeignKey("shows.id", ondelete="CASCADE"), primary_key=True),
    Column("person_id", Integer, ForeignKey("people.id", ondelete="CASCADE"), primary_key=True),
    Index("ix_show_cast_person_id", "person_id"),
)


class ShowModel(Base):
    """Modelo de base de datos para shows del catalogo."""

    __tablename__ = "shows"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(500), nullable=True)

    def __repr__(self):
        return f"<Show(id={self.id}, name={self.name})>"


class PersonModel(Base):
    """Modelo de base de datos para personas del reparto."""

    __tablename__ = "people"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(500), nullable=True)
    birthday = Column(Date, nullable=True)

    def __repr__(self):
        return f"<Person(id={self.id}, name={self.name})>"
