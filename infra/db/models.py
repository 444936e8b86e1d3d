from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from infra.db.session import Base

class FileRecord(Base):
    __tablename__ = "files"
    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String, nullable=False)   # 'cv' | 'project_report'
    path = Column(String, nullable=False)
    name = Column(String, nullable=False)
    size = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())

class JobRecord(Base):
    __tablename__ = "jobs"
    id = Column(String, primary_key=True)
    status = Column(String, nullable=False, default="queued", index=True)
    job_title = Column(String, nullable=False)
    cv_file_id = Column(Integer, nullable=False)
    report_file_id = Column(Integer, nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    result = relationship("JobResultRecord", back_populates="job", uselist=False)

class JobResultRecord(Base):
    __tablename__ = "job_results"
    job_id = Column(String, ForeignKey("jobs.id"), primary_key=True)
    cv_match_rate = Column(Float, nullable=False)
    cv_feedback = Column(Text, nullable=False)
    project_score = Column(Float, nullable=False)
    project_feedback = Column(Text, nullable=False)
    overall_summary = Column(Text, nullable=False)
    job = relationship("JobRecord", back_populates="result")

class QueueEntryRecord(Base):
    __tablename__ = "queue_entries"
    seq = Column(Integer, primary_key=True, autoincrement=True)
    queue_name = Column(String, nullable=False, index=True)
    job_id = Column(String, nullable=False)
    enqueued_at = Column(DateTime, server_default=func.now())
