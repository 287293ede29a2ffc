# api/members/members_model.py
from sqlalchemy import Column, Integer, String, Boolean, Enum, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from config.database import Base
import enum


class MemberRole(enum.Enum):
    member             = 'MEMBER'
    fellowship_manager = 'FELLOWSHIP_MANAGER'


class Gender(enum.Enum):
    male   = 'MALE'
    female = 'FEMALE'


class RegistrationMode(enum.Enum):
    new_member  = 'NEW_MEMBER'
    readmission = 'READMISSION'


class Member(Base):
    __tablename__ = 'members'

    id                    = Column(Integer, primary_key=True, index=True)
    full_name             = Column(String(150), nullable=False)
    email                 = Column(String(255), nullable=False, unique=True, index=True)
    phone_number          = Column(String(30), nullable=False)
    gender                = Column(Enum(Gender), nullable=False)
    fellowship_number     = Column(String(6), nullable=False, unique=True, index=True)
    password              = Column(String(255), nullable=False)
    qr_code               = Column(String(64), nullable=False, unique=True, index=True)
    role                  = Column(Enum(MemberRole), nullable=False, default=MemberRole.member)
    registration_mode     = Column(Enum(RegistrationMode), nullable=False, default=RegistrationMode.new_member)

    # academic progression inputs
    registration_date     = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    initial_year_of_study = Column(Integer, nullable=True)
    initial_semester      = Column(Integer, nullable=True)
    course_id             = Column(Integer, ForeignKey('courses.id'), nullable=True)

    region_id             = Column(Integer, ForeignKey('regions.id'), nullable=False)
    residence_id          = Column(Integer, ForeignKey('residences.id'), nullable=True)
    hostel_name           = Column(String(150), nullable=True)

    is_deleted            = Column(Boolean, nullable=False, default=False)
    failed_login_attempts = Column(Integer, nullable=False, default=0)
    locked_until          = Column(DateTime(timezone=True), nullable=True)

    created_at            = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at            = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    course    = relationship("Course", back_populates="members")
    region    = relationship("Region", back_populates="members")
    residence = relationship("Residence", back_populates="members")

    member_tags = relationship(
        "MemberTag",
        back_populates="member",
        foreign_keys="[MemberTag.member_id]",
        cascade="all, delete-orphan",
    )
    attendances = relationship("Attendance", back_populates="member", foreign_keys="[Attendance.member_id]")

    @property
    def is_manager(self) -> bool:
        return self.role == MemberRole.fellowship_manager

    def __repr__(self):
        return f"<Member(id={self.id}, fellowship_number='{self.fellowship_number}')>"
