from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from database import Base


def utcnow():
    return datetime.now(timezone.utc)


class GrievanceStatus(str, PyEnum):
    pending = "Pending"
    in_progress = "InProgress"
    resolved = "Resolved"
    rejected = "Rejected"


class GrievanceCategory(str, PyEnum):
    academic = "Academic"
    administration = "Administration"
    infrastructure = "Infrastructure"
    hostel = "Hostel"
    general = "General"


class Grievance(Base):
    __tablename__ = "grievances"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(GrievanceCategory), nullable=False)
    priority = Column(String(50), nullable=True)
    status = Column(SQLEnum(GrievanceStatus), default=GrievanceStatus.pending, nullable=False)
    submitted_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    submitted_by = relationship("User", foreign_keys=[submitted_by_id], back_populates="grievances")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    department = relationship("Department", back_populates="grievances")
    attachments = relationship(
        "GrievanceAttachment",
        back_populates="grievance",
        cascade="all, delete-orphan",
        order_by="GrievanceAttachment.id",
    )
    comments = relationship(
        "GrievanceComment",
        back_populates="grievance",
        cascade="all, delete-orphan",
        order_by="GrievanceComment.id",
    )
    status_history = relationship(
        "GrievanceStatusHistory",
        back_populates="grievance",
        cascade="all, delete-orphan",
        order_by="GrievanceStatusHistory.id",
    )

    def __repr__(self):
        return f"<Grievance {self.id} - {self.status}>"


class GrievanceStatusHistory(Base):
    __tablename__ = "grievance_status_history"

    id = Column(Integer, primary_key=True, index=True)
    grievance_id = Column(Integer, ForeignKey("grievances.id", ondelete="CASCADE"), nullable=False)
    status = Column(SQLEnum(GrievanceStatus), nullable=False)
    changed_at = Column(DateTime(timezone=True), default=utcnow)
    changed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    notes = Column(String, nullable=True)

    grievance = relationship("Grievance", back_populates="status_history")
    changed_by = relationship("User")

    def __repr__(self):
        return f"<GrievanceStatusHistory {self.id} - {self.status}>"


class GrievanceAttachment(Base):
    __tablename__ = "grievance_attachments"

    id = Column(Integer, primary_key=True, index=True)
    grievance_id = Column(Integer, ForeignKey("grievances.id", ondelete="CASCADE"), nullable=False)
    # opaque key understood by the attachment store
    reference = Column(String, unique=True, index=True, nullable=False)
    file_name = Column(String, nullable=False)
    file_type = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    uploaded_at = Column(DateTime(timezone=True), default=utcnow)

    grievance = relationship("Grievance", back_populates="attachments")

    @property
    def file_url(self):
        return f"/grievances/attachments/{self.reference}"
