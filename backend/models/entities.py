from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, JSON, ForeignKey
from sqlalchemy.orm import declared_attr
from database import Base


class EntityColumns:
    """Columns shared by vendors and tenants."""

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    organization_id = Column(String(64), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=True)
    property_name = Column(String(255), nullable=True)
    certificate_holder_name = Column(String(255), nullable=True)
    risk_level = Column(String(50), default="standard")
    compliance_status = Column(String(20), default="pending", index=True)
    deleted_at = Column(DateTime, nullable=True)

    @declared_attr
    def template_id(cls):
        return Column(Integer, ForeignKey("requirement_templates.id"), nullable=True, index=True)


class Vendor(EntityColumns, Base):
    __tablename__ = "vendors"

    service_type = Column(String(100), nullable=True)


class Tenant(EntityColumns, Base):
    __tablename__ = "tenants"

    unit = Column(String(50), nullable=True)


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, index=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow, index=True)
    entity_type = Column(String(10), index=True, nullable=False)
    entity_id = Column(Integer, index=True, nullable=False)
    document_text = Column(Text, nullable=True)
    extracted_data = Column(JSON, nullable=True)
    uploaded_by = Column(String(20), default="pm")


class ComplianceSnapshot(Base):
    __tablename__ = "compliance_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    certificate_id = Column(Integer, ForeignKey("certificates.id"), nullable=False, index=True)
    entity_type = Column(String(10), index=True, nullable=False)
    entity_id = Column(Integer, index=True, nullable=False)
    template_id = Column(Integer, nullable=True)
    as_of = Column(Date, nullable=False)
    overall_status = Column(String(20), nullable=False)
    gap_count = Column(Integer, default=0)
    result = Column(JSON, nullable=False)
    insight = Column(Text, nullable=True)
