from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from database import Base
from roles import RoleEnum


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    student_id = Column(String(50), unique=True, nullable=True)
    # academic department of a student, free text
    department = Column(String(120), nullable=True)
    role = Column(SQLEnum(RoleEnum), default=RoleEnum.student, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    grievances = relationship(
        "Grievance",
        foreign_keys="Grievance.submitted_by_id",
        back_populates="submitted_by",
    )

    def __repr__(self):
        return f"<User {self.id} - {self.email}>"
