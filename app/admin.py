import uuid
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from app.models import AuthLog, Bank, Group, GroupSlot, Member, Message, Payment, User
from app.models.enums import AuthEvent, UserRole
from app.core import security
from app.core.config import settings
from app.db.session import AsyncSessionLocal
from app.services.cache import cache
from sqlmodel import select

class AdminAuth(AuthenticationBackend):
    """
    Authentication backend for SQLAdmin.
    Only active users with the admin role can sign in.
    """
    async def login(self, request: Request) -> bool:
        form = await request.form()
        email, password = form["username"], form["password"]

        async with AsyncSessionLocal() as session:
            result = await session.execute(select(User).where(User.email == email))
            user = result.scalars().first()

        if not user or not security.verify_password(password, user.hashed_password):
            return False
        if user.role != UserRole.ADMIN or not user.is_active:
            return False

        request.session.update({"token": security.create_access_token(user.id)})
        return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        token = request.session.get("token")
        if not token:
            return False
        return security.verify_token(token) is not None

class BaseAdminView(ModelView):
    """
    Base view for all admin models; every change is written to the auth log
    and drops cached reads, since edits here bypass the service layer.
    """
    async def after_model_change(self, data: dict, model: object, is_created: bool, request: Request):
        event = AuthEvent.ADMIN_CREATE if is_created else AuthEvent.ADMIN_UPDATE
        await self._log_action(request, event, model)

    async def after_model_delete(self, model: object, request: Request):
        await self._log_action(request, AuthEvent.ADMIN_DELETE, model)

    async def _log_action(self, request: Request, event: AuthEvent, model: object):
        cache.clear()
        subject = security.verify_token(request.session.get("token", ""))
        admin_id = uuid.UUID(subject) if subject else None

        async with AsyncSessionLocal() as session:
            log = AuthLog(
                user_id=admin_id,
                event=event,
                target_model=model.__class__.__name__,
                target_id=str(getattr(model, "id", "")),
                ip_address=request.client.host if request.client else None,
                user_agent=request.headers.get("user-agent"),
            )
            session.add(log)
            await session.commit()

class GroupAdmin(BaseAdminView, model=Group):
    column_list = [Group.name, Group.monthly_amount, Group.max_members, Group.start_date, Group.end_date]
    column_searchable_list = [Group.name]
    column_sortable_list = [Group.name, Group.start_date]

class GroupSlotAdmin(BaseAdminView, model=GroupSlot):
    """
    Month assignments. The (group, month) uniqueness is enforced by the database.
    """
    column_list = [GroupSlot.group_id, GroupSlot.member_id, GroupSlot.assigned_month]
    column_sortable_list = [GroupSlot.assigned_month]
    column_default_sort = ("assigned_month", False)

class MemberAdmin(BaseAdminView, model=Member):
    column_list = [Member.first_name, Member.last_name, Member.email, Member.phone, Member.status]
    column_searchable_list = [Member.first_name, Member.last_name, Member.email, Member.phone]

class PaymentAdmin(BaseAdminView, model=Payment):
    column_list = [Payment.payment_month, Payment.member_id, Payment.group_id, Payment.amount, Payment.status, Payment.is_late_payment]
    column_sortable_list = [Payment.payment_date, Payment.payment_month]
    column_default_sort = ("payment_date", True)

class BankAdmin(BaseAdminView, model=Bank):
    column_list = [Bank.name, Bank.short_name]

class UserAdmin(BaseAdminView, model=User):
    column_list = [User.email, User.first_name, User.last_name, User.role, User.is_active, User.last_login]
    column_searchable_list = [User.email, User.first_name, User.last_name]
    column_details_exclude_list = [User.hashed_password]
    form_excluded_columns = [User.hashed_password]

class MessageAdmin(BaseAdminView, model=Message):
    column_list = [Message.subject, Message.message_type, Message.sender_type, Message.created_at]
    column_default_sort = ("created_at", True)

class AuthLogAdmin(ModelView, model=AuthLog):
    """
    Read-only view of logins and back-office changes.
    """
    column_list = [AuthLog.event, AuthLog.email, AuthLog.user_id, AuthLog.target_model, AuthLog.success, AuthLog.timestamp]
    column_default_sort = ("timestamp", True)
    can_create = False
    can_edit = False
    can_delete = False

def setup_admin(app: FastAPI, engine: AsyncEngine):
    """
    Mounts SQLAdmin on the FastAPI app.
    """
    authentication_backend = AdminAuth(secret_key=settings.SECRET_KEY)
    admin = Admin(app, engine, authentication_backend=authentication_backend)

    for view in (GroupAdmin, GroupSlotAdmin, MemberAdmin, PaymentAdmin, BankAdmin, UserAdmin, MessageAdmin, AuthLogAdmin):
        admin.add_view(view)
    return admin
