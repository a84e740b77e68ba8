"""
Identity service — SQLAlchemy ORM models for the auth domain.

Tables owned by this module:
  - admins     Back-office accounts (username + password)
  - users      Lecturer and student accounts (email + password)
  - lecturers  Lecturer profile; is_moderator promotes the user to MODERATOR
  - students   Student profile

A user's role is never stored: it is derived from which profile row exists
(see service.resolve_role).
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from thesync_shared.database.postgres import Base


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        sa.String(100), unique=True, nullable=False, index=True
    )
    email: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(sa.String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    # email is the login credential for lecturers and students
    email: Mapped[str] = mapped_column(
        sa.String(255), unique=True, nullable=False, index=True
    )
    full_name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    password_hash: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(sa.String(20), nullable=True)
    # Deactivated accounts cannot log in, refresh, or reset their password
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean(),
        nullable=False,
        default=True,
        server_default=sa.true(),
    )

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # selectin so role resolution never triggers a lazy load under asyncio
    lecturer: Mapped[Lecturer | None] = relationship(
        "Lecturer", back_populates="user", uselist=False, lazy="selectin"
    )
    student: Mapped[Student | None] = relationship(
        "Student", back_populates="user", uselist=False, lazy="selectin"
    )


class Lecturer(Base):
    __tablename__ = "lecturers"

    user_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    is_moderator: Mapped[bool] = mapped_column(
        sa.Boolean(),
        nullable=False,
        default=False,
        server_default=sa.false(),
    )

    user: Mapped[User] = relationship("User", back_populates="lecturer")


class Student(Base):
    __tablename__ = "students"

    user_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    student_code: Mapped[str] = mapped_column(
        sa.String(30), unique=True, nullable=False, index=True
    )

    user: Mapped[User] = relationship("User", back_populates="student")
