from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
)
from sqlalchemy.orm import declarative_base

from ..filters.models import reference_column_name, reference_table_name

Base = declarative_base()


class TaxonomyTerm(Base):
    __tablename__ = "taxonomy_term_field_data"

    tid = Column(Integer, primary_key=True)
    vid = Column(String, nullable=False, index=True)  # vocabulary machine name
    name = Column(String, nullable=False)


class TaxonomyTermHierarchy(Base):
    """One row per (term, parent) pair; root terms have parent 0."""
    __tablename__ = "taxonomy_term_hierarchy"

    tid = Column(Integer, nullable=False, index=True)
    parent = Column(Integer, nullable=False, index=True)

    __table_args__ = (
        PrimaryKeyConstraint("tid", "parent"),
    )


class Media(Base):
    __tablename__ = "media_field_data"

    mid = Column(Integer, primary_key=True)
    bundle = Column(String, nullable=False)
    name = Column(String, nullable=True)


def reference_table(field_name: str, metadata: MetaData | None = None) -> Table:
    """
    Return the media__<field> table for a taxonomy reference field.

    Tables are registered on the declarative metadata the first time they are
    requested, so later calls return the same Table object.
    """
    metadata = metadata if metadata is not None else Base.metadata
    table_name = reference_table_name(field_name)
    existing = metadata.tables.get(table_name)
    if existing is not None:
        return existing
    column = reference_column_name(field_name)
    return Table(
        table_name,
        metadata,
        Column("entity_id", Integer, nullable=False, index=True),
        Column("delta", Integer, nullable=False, default=0),
        Column(column, Integer, nullable=False, index=True),
        PrimaryKeyConstraint("entity_id", "delta"),
    )


def create_all(engine, reference_fields: list[str] | None = None) -> None:
    for field_name in reference_fields or []:
        reference_table(field_name)
    Base.metadata.create_all(engine)
