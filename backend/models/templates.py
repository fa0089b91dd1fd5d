from datetime import datetime
from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime, JSON, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database import Base


class RequirementTemplateRecord(Base):
    __tablename__ = "requirement_templates"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    organization_id = Column(String(64), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(20), index=True, nullable=False)
    risk_level = Column(String(50), default="standard", nullable=False)
    is_system_default = Column(Boolean, default=False)

    coverages = relationship(
        "TemplateCoverageRequirement",
        back_populates="template",
        order_by="TemplateCoverageRequirement.position",
        cascade="all, delete-orphan",
    )


class TemplateCoverageRequirement(Base):
    __tablename__ = "template_coverage_requirements"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(Integer, ForeignKey("requirement_templates.id"), nullable=False, index=True)
    position = Column(Integer, default=0)
    coverage_type = Column(String(100), nullable=False)
    is_required = Column(Boolean, default=True)
    is_statutory = Column(Boolean, default=False)
    min_amount = Column(BigInteger, nullable=True)
    min_aggregate = Column(BigInteger, nullable=True)
    required_endorsements = Column(JSON, default=list)

    template = relationship("RequirementTemplateRecord", back_populates="coverages")
