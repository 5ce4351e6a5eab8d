from __future__ import annotations

from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from app.database import Base


class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    university = Column(String(255), nullable=True)
    major = Column(String(255), nullable=True)
    graduation_year = Column(Integer, nullable=True)
    bio = Column(Text, nullable=True)

    # Comma separated or JSON-array-like; parsed on every matching run.
    skills = Column(Text, nullable=True)

    github_url = Column(String(512), nullable=True)
    # Raw JSON list of {"name": ..., "description": ...} objects from the GitHub import.
    github_projects = Column(Text, nullable=True)
    portfolio_url = Column(String(512), nullable=True)

    # Points at cvs.id; kept as a plain column since CVs also reference the student.
    active_cv_id = Column(Integer, nullable=True)

    certifications = relationship(
        "Certification",
        back_populates="student",
        cascade="all, delete-orphan",
        order_by="Certification.id",
    )
    experiences = relationship(
        "WorkExperience",
        back_populates="student",
        cascade="all, delete-orphan",
        order_by="WorkExperience.id",
    )

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()
