# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic calendar models: academic years and their semesters.

At most one semester carries is_current = True. That flag alone decides
which term is open for enrollment.
"""

from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registrar.infrastructure.database.models.base import Base, TimestampMixin


class AcademicYear(Base, TimestampMixin):
    """An academic year, e.g. 2025-2026."""

    __tablename__ = "academic_years"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year_name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_current: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    semesters: Mapped[list["Semester"]] = relationship(back_populates="academic_year")

    def __repr__(self) -> str:
        return f"<AcademicYear {self.year_name}>"


class Semester(Base, TimestampMixin):
    """A semester within an academic year.

    start_date opens enrollment; registration_deadline (or end_date when
    unset) closes it.
    """

    __tablename__ = "semesters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    academic_year_id: Mapped[int] = mapped_column(
        ForeignKey("academic_years.id"), nullable=False, index=True
    )
    semester_name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    registration_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_current: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )

    academic_year: Mapped[AcademicYear] = relationship(back_populates="semesters")

    def __repr__(self) -> str:
        return f"<Semester {self.semester_name} year={self.academic_year_id}>"
