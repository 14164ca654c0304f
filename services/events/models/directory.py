"""
Read-only directory tables.

Users, subjects, grades and assignments are owned by other parts of the
platform. The Events Service checks that referenced records exist and reads
user names and emails for event responses.
"""

from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"  # type: ignore[assignment]

    id: str = Field(primary_key=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = Field(default=None, index=True)
    role: Optional[str] = Field(default=None, description="student, advisor, ...")


class Subject(SQLModel, table=True):
    __tablename__ = "subjects"  # type: ignore[assignment]

    id: str = Field(primary_key=True)
    name: str
    code: Optional[str] = None


class Grade(SQLModel, table=True):
    __tablename__ = "grades"  # type: ignore[assignment]

    id: str = Field(primary_key=True)
    student_id: Optional[str] = Field(default=None, index=True)
    subject_id: Optional[str] = None
    value: Optional[float] = None


class Assignment(SQLModel, table=True):
    __tablename__ = "assignments"  # type: ignore[assignment]

    id: str = Field(primary_key=True)
    title: str
    subject_id: Optional[str] = None
