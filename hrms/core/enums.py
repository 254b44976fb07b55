# hrms/core/enums.py
from enum import Enum


class UserRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    COMPANY_ADMIN = "COMPANY_ADMIN"
    EMPLOYEE = "EMPLOYEE"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class CompanyStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class SubdomainStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RegistrationStep(str, Enum):
    """Cursor of a registration session: the next step the server accepts"""
    PLAN_SELECTION = "plan_selection"
    EMPLOYEE_COUNT = "employee_count"
    PAYMENT = "payment"
    COMPLETE = "complete"


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


class OfflinePaymentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentMethod(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class AuditAction(str, Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    REGISTRATION_COMPLETED = "REGISTRATION_COMPLETED"
    COMPANY_REGISTERED = "COMPANY_REGISTERED"
    COMPANY_CREATED = "COMPANY_CREATED"
    ORDER_APPROVED = "ORDER_APPROVED"
    ORDER_REJECTED = "ORDER_REJECTED"
    OFFLINE_REQUEST_APPROVED = "OFFLINE_REQUEST_APPROVED"
    OFFLINE_REQUEST_REJECTED = "OFFLINE_REQUEST_REJECTED"
    SUBDOMAIN_REQUESTED = "SUBDOMAIN_REQUESTED"
    SUBDOMAIN_APPROVED = "SUBDOMAIN_APPROVED"
    SUBDOMAIN_REJECTED = "SUBDOMAIN_REJECTED"
    COMPANY_UPDATED = "COMPANY_UPDATED"
    COMPANY_SETTINGS_UPDATED = "COMPANY_SETTINGS_UPDATED"
    USER_CREATED = "USER_CREATED"
    PLAN_CREATED = "PLAN_CREATED"
    PLAN_UPDATED = "PLAN_UPDATED"
    PLAN_DEACTIVATED = "PLAN_DEACTIVATED"
