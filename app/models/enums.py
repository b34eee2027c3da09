from enum import StrEnum

class MemberStatus(StrEnum):
    ACTIVE = "active"
    PENDING = "pending"
    OVERDUE = "overdue"
    INACTIVE = "inactive"

class PaymentMethod(StrEnum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"

class PaymentStatus(StrEnum):
    NOT_PAID = "not_paid"
    PENDING = "pending"
    RECEIVED = "received"
    SETTLED = "settled"

class UserRole(StrEnum):
    ADMIN = "admin"
    MEMBER = "member"

class MessageType(StrEnum):
    PAYMENT_NOTIFICATION = "payment_notification"
    SYSTEM_NOTIFICATION = "system_notification"
    PROFILE_UPDATE_NOTIFICATION = "profile_update_notification"

class SenderType(StrEnum):
    ADMIN = "admin"
    MEMBER = "member"
    SYSTEM = "system"

class AuthEvent(StrEnum):
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    ADMIN_CREATE = "admin_create"
    ADMIN_UPDATE = "admin_update"
    ADMIN_DELETE = "admin_delete"
