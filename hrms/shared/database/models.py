# hrms/shared/database/models.py
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, JSON,
    ForeignKey, Index, UniqueConstraint, func, text
)
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import JSONB

from hrms.config.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def generate_uuid() -> str:
    return str(uuid.uuid4())


# =====================================================
# TIMESTAMP MIXIN
# =====================================================
class TimestampMixin:
    """Adds created_at and updated_at"""
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())


# =====================================================
# TENANTS AND PLANS
# =====================================================

class Plan(Base):
    """Subscription tier"""
    __tablename__ = "plans"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    display_name = Column(String(255), nullable=False)
    duration = Column(Integer, nullable=False, default=1)
    price = Column(Integer, nullable=False, default=0)
    max_employees = Column(Integer, nullable=False, default=50)
    employees_included = Column(Integer, nullable=False, default=10)
    price_per_additional_employee = Column(Integer, nullable=False, default=0)
    features = Column(JSONType, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    __table_args__ = (
        UniqueConstraint("name", name="uq_plans_name"),
    )

    def snapshot(self) -> dict:
        """Entitlements copied onto a company at signup"""
        return {
            "planId": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "duration": self.duration,
            "price": self.price,
            "maxEmployees": self.max_employees,
            "employeesIncluded": self.employees_included,
            "pricePerAdditionalEmployee": self.price_per_additional_employee,
            "features": list(self.features or []),
        }


class Company(Base, TimestampMixin):
    """Tenant"""
    __tablename__ = "companies"

    # Identity
    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    address = Column(Text)
    website = Column(String(255))

    # Subscription
    status = Column(String(20), nullable=False, default="pending")
    plan_id = Column(String(36), ForeignKey("plans.id"))
    plan = Column(String(100), nullable=False, default="basic")
    max_employees = Column(Integer, nullable=False, default=50)
    plan_snapshot = Column(JSONType, default=dict)

    # Subdomain
    subdomain = Column(String(100))
    subdomain_status = Column(String(20))
    subdomain_requested_at = Column(DateTime)
    subdomain_reviewed_by = Column(String(36))
    subdomain_reviewed_at = Column(DateTime)
    subdomain_rejection_reason = Column(Text)

    # Branding
    logo_url = Column(Text)
    primary_color = Column(String(20), default="#00C853")
    secondary_color = Column(String(20), default="#000000")

    __table_args__ = (
        UniqueConstraint("email", name="uq_companies_email"),
        UniqueConstraint("phone", name="uq_companies_phone"),
        UniqueConstraint("subdomain", name="uq_companies_subdomain"),
    )

    # Relationships
    users = relationship("User", back_populates="company")
    orders = relationship("Order", back_populates="company")
    offline_requests = relationship("OfflinePaymentRequest", back_populates="company")


# =====================================================
# USERS AND SESSIONS
# =====================================================

class User(Base):
    """Account"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), nullable=False)
    password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)
    company_id = Column(String(36), ForeignKey("companies.id"), index=True)
    department = Column(String(255))
    position = Column(String(255))
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    company = relationship("Company", back_populates="users")

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class AuthSession(Base):
    """Issued bearer token, keyed by the JWT id"""
    __tablename__ = "auth_sessions"

    token_id = Column(String(64), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    company_id = Column(String(36))
    issued_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)


# =====================================================
# REGISTRATION
# =====================================================

class RegistrationSession(Base, TimestampMixin):
    """Server-side state of the signup wizard"""
    __tablename__ = "registration_sessions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    step = Column(String(20), nullable=False, default="plan_selection")
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    session_data = Column(JSONType, nullable=False, default=dict)
    company_id = Column(String(36))
    order_id = Column(String(36))
    offline_request_id = Column(String(36))
    expires_at = Column(DateTime, nullable=False, index=True)

    __table_args__ = (
        # Only one live (not completed) signup per email / phone
        Index(
            "uq_registration_sessions_live_email", "email", unique=True,
            postgresql_where=text("step <> 'complete'"),
            sqlite_where=text("step <> 'complete'"),
        ),
        Index(
            "uq_registration_sessions_live_phone", "phone", unique=True,
            postgresql_where=text("step <> 'complete'"),
            sqlite_where=text("step <> 'complete'"),
        ),
    )


# =====================================================
# PAYMENTS
# =====================================================

class Order(Base, TimestampMixin):
    """Online payment"""
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    plan_id = Column(String(36), ForeignKey("plans.id"), nullable=False)
    amount = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False, default="INR")
    status = Column(String(20), nullable=False, default="pending", index=True)
    payment_provider = Column(String(50), default="dummy")
    payment_intent_id = Column(String(100))
    payment_metadata = Column("metadata", JSONType, default=dict)
    reviewed_by = Column(String(36))
    reviewed_at = Column(DateTime)
    rejection_reason = Column(Text)

    company = relationship("Company", back_populates="orders")


class OfflinePaymentRequest(Base, TimestampMixin):
    """Offline payment awaiting manual verification"""
    __tablename__ = "offline_payment_requests"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    plan_id = Column(String(36), ForeignKey("plans.id"), nullable=False)
    amount = Column(Integer, nullable=False)
    requested_by = Column(String(36), nullable=False)
    notes = Column(Text)
    attachment_urls = Column(JSONType, default=list)
    status = Column(String(20), nullable=False, default="pending", index=True)
    reviewed_by = Column(String(36))
    reviewed_at = Column(DateTime)
    rejection_reason = Column(Text)

    company = relationship("Company", back_populates="offline_requests")


# =====================================================
# AUDIT
# =====================================================

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), index=True)
    company_id = Column(String(36), index=True)
    action = Column(String(50), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(36))
    details = Column(JSONType, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
