"""Tests for SQLAlchemyIntrospector and column type mapping."""

from __future__ import annotations

import datetime

import pytest
from sqlalchemy import (
    ARRAY,
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    LargeBinary,
    Numeric,
    String,
    Text,
    Time,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from dynsearch import (
    ArrayType,
    FieldType,
    SchemaIntrospector,
    UnknownFieldError,
    UnknownRelationError,
)
from dynsearch_sqlalchemy import MappingError, SQLAlchemyIntrospector, semantic_type_for


class Base(DeclarativeBase):
    pass


class AuthorRecord(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50))
    posts: Mapped[list[PostRecord]] = relationship(back_populates="author")


class PostRecord(Base):
    __tablename__ = "posts"

    uid: Mapped[int] = mapped_column("post_id", Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    body: Mapped[str] = mapped_column(Text)
    published_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True))
    published_on: Mapped[str] = mapped_column(
        String(10), info={"semantic_type": "date"}
    )
    author_id: Mapped[int] = mapped_column(ForeignKey("authors.id"))
    author: Mapped[AuthorRecord] = relationship(back_populates="posts")


@pytest.fixture
def introspector() -> SQLAlchemyIntrospector:
    return SQLAlchemyIntrospector()


def test_satisfies_protocol(introspector):
    assert isinstance(introspector, SchemaIntrospector)


def test_field_types(introspector):
    assert introspector.field_type(PostRecord, "title") is FieldType.STRING
    assert introspector.field_type(PostRecord, "body") is FieldType.STRING
    assert introspector.field_type(PostRecord, "published_at") is FieldType.DATETIME
    assert introspector.field_type(PostRecord, "uid") is FieldType.INTEGER


def test_info_override(introspector):
    assert introspector.field_type(PostRecord, "published_on") is FieldType.DATE


def test_unknown_field(introspector):
    with pytest.raises(UnknownFieldError) as exc_info:
        introspector.field_type(PostRecord, "titel")
    assert exc_info.value.entity_name == "PostRecord"
    assert "title" in exc_info.value.suggestions


def test_relationship_is_not_a_field(introspector):
    assert introspector.has_field(PostRecord, "author") is False
    assert introspector.has_field(PostRecord, "author_id") is True


def test_many_to_one_relation(introspector):
    info = introspector.relation_info(PostRecord, "author")
    assert info.target is AuthorRecord
    assert info.many is False
    assert info.owning is True
    assert info.join_key == ("author_id",)


def test_one_to_many_relation(introspector):
    info = introspector.relation_info(AuthorRecord, "posts")
    assert info.target is PostRecord
    assert info.many is True
    assert info.owning is False


def test_unknown_relation(introspector):
    with pytest.raises(UnknownRelationError) as exc_info:
        introspector.relation_info(PostRecord, "auther")
    assert exc_info.value.suggestions == ["author"]


def test_names_and_primary_key(introspector):
    assert introspector.relation_names(AuthorRecord) == ["posts"]
    assert "published_on" in introspector.field_names(PostRecord)
    assert introspector.primary_key(PostRecord) == "uid"
    assert introspector.primary_key(AuthorRecord) == "id"


def test_unmapped_entity(introspector):
    class Plain:
        pass

    with pytest.raises(MappingError):
        introspector.field_type(Plain, "id")


@pytest.mark.parametrize(
    ("sa_type", "expected"),
    [
        (Boolean(), FieldType.BOOLEAN),
        (Integer(), FieldType.INTEGER),
        (Float(), FieldType.FLOAT),
        (Numeric(10, 2), FieldType.DECIMAL),
        (Numeric(10, 2, asdecimal=False), FieldType.FLOAT),
        (DateTime(), FieldType.NAIVE_DATETIME),
        (DateTime(timezone=True), FieldType.DATETIME),
        (Date(), FieldType.DATE),
        (Time(), FieldType.TIME),
        (Uuid(), FieldType.UUID),
        (Enum("open", "closed", name="status"), FieldType.STRING),
        (LargeBinary(), FieldType.BINARY),
        (JSON(), FieldType.MAP),
        (ARRAY(Integer), ArrayType(FieldType.INTEGER)),
        (ARRAY(String), ArrayType(FieldType.STRING)),
    ],
)
def test_semantic_type_for(sa_type, expected):
    assert semantic_type_for(sa_type) == expected
