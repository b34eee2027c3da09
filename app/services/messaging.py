import logging
import uuid
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.errors import NotFound, ValidationError
from app.db.session import storage_errors
from app.models.enums import MessageType, SenderType, UserRole
from app.models.member import Member
from app.models.message import Message, MessageRecipient
from app.models.payment import Payment
from app.models.user import User
from app.schemas.message import InboxMessage, MessageCreate, MessageRead, RecipientRead
from app.worker import send_email_task

logger = logging.getLogger(__name__)


async def send_message(
    session: AsyncSession,
    message_in: MessageCreate,
    sender: User | None = None,
    sender_ip: str | None = None,
    commit: bool = True,
) -> Message:
    """
    Store a message and one recipient row per distinct recipient.

    Without a sender the message is a system message.
    """
    recipient_ids = list(dict.fromkeys(message_in.recipient_ids))
    async with storage_errors():
        result = await session.execute(select(User.id).where(User.id.in_(recipient_ids)))
        known = set(result.scalars().all())
    missing = [str(r) for r in recipient_ids if r not in known]
    if missing:
        raise ValidationError("Unknown recipients", {"recipient_ids": missing})

    if sender is None:
        sender_type = SenderType.SYSTEM
    elif sender.role == UserRole.ADMIN:
        sender_type = SenderType.ADMIN
    else:
        sender_type = SenderType.MEMBER

    message = Message(
        subject=message_in.subject,
        content=message_in.content,
        message_type=message_in.message_type,
        sender_id=sender.id if sender else None,
        sender_type=sender_type,
        sender_ip_address=sender_ip,
    )
    session.add(message)
    for recipient_id in recipient_ids:
        session.add(MessageRecipient(message_id=message.id, recipient_id=recipient_id))

    if commit:
        async with storage_errors():
            await session.commit()
        await session.refresh(message)
    logger.info(f"Message {message.id} ({message.message_type}) sent to {len(recipient_ids)} recipient(s)")
    return message


async def get_inbox(
    session: AsyncSession,
    user: User,
    message_type: MessageType | None = None,
    is_read: bool | None = None,
    offset: int = 0,
    limit: int = 50,
) -> list[InboxMessage]:
    query = (
        select(Message, MessageRecipient.is_read, User.first_name, User.last_name)
        .join(MessageRecipient, MessageRecipient.message_id == Message.id)
        .outerjoin(User, User.id == Message.sender_id)
        .where(MessageRecipient.recipient_id == user.id)
    )
    if message_type is not None:
        query = query.where(Message.message_type == message_type)
    if is_read is not None:
        query = query.where(MessageRecipient.is_read == is_read)
    query = query.order_by(Message.created_at.desc()).offset(offset).limit(limit)

    async with storage_errors():
        result = await session.execute(query)
    return [
        InboxMessage(
            id=message.id,
            subject=message.subject,
            message_type=message.message_type,
            sender_id=message.sender_id,
            sender_name=f"{first_name} {last_name}" if first_name else "System",
            sender_type=message.sender_type,
            is_read=read,
            created_at=message.created_at,
        )
        for message, read, first_name, last_name in result.all()
    ]


async def get_message(session: AsyncSession, message_id: uuid.UUID, user: User) -> MessageRead:
    """
    Visible to its sender, its recipients and admins.
    """
    async with storage_errors():
        message = await session.get(Message, message_id)
        if not message:
            raise NotFound("Message", message_id)
        result = await session.execute(
            select(MessageRecipient).where(MessageRecipient.message_id == message_id)
        )
        recipients = result.scalars().all()

    if (
        user.role != UserRole.ADMIN
        and message.sender_id != user.id
        and all(r.recipient_id != user.id for r in recipients)
    ):
        # do not reveal that the message exists
        raise NotFound("Message", message_id)

    return MessageRead(
        id=message.id,
        subject=message.subject,
        content=message.content,
        message_type=message.message_type,
        sender_id=message.sender_id,
        sender_type=message.sender_type,
        created_at=message.created_at,
        recipients=[
            RecipientRead(recipient_id=r.recipient_id, is_read=r.is_read, read_at=r.read_at)
            for r in recipients
        ],
    )


async def mark_as_read(session: AsyncSession, message_id: uuid.UUID, user: User) -> None:
    async with storage_errors():
        result = await session.execute(
            select(MessageRecipient).where(
                MessageRecipient.message_id == message_id,
                MessageRecipient.recipient_id == user.id,
            )
        )
        recipient = result.scalar_one_or_none()
        if not recipient:
            raise NotFound("Message", message_id)
        if not recipient.is_read:
            recipient.is_read = True
            recipient.read_at = datetime.utcnow()
            session.add(recipient)
            await session.commit()


async def get_unread_count(session: AsyncSession, user: User) -> int:
    async with storage_errors():
        result = await session.execute(
            select(func.count()).select_from(MessageRecipient).where(
                MessageRecipient.recipient_id == user.id,
                MessageRecipient.is_read == False,  # noqa: E712
            )
        )
    return result.scalar_one()


async def notify_payment(session: AsyncSession, payment: Payment, member: Member, group_name: str) -> Message | None:
    """
    Tell the accounts linked to the member that a payment was recorded.

    Members without an account get nothing. E-mail goes out only when SMTP
    is configured.
    """
    async with storage_errors():
        result = await session.execute(select(User).where(User.member_id == member.id, User.is_active == True))  # noqa: E712
        users = result.scalars().all()
    if not users:
        return None

    amount = f"{settings.CURRENCY} {payment.amount:,.2f}"
    content = (
        f"A payment of {amount} for {group_name} ({payment.payment_month}) "
        f"was recorded on {payment.payment_date.isoformat()} with status '{payment.status}'."
    )
    if payment.is_late_payment:
        content += f" The payment was late; a fine of {settings.CURRENCY} {payment.fine_amount:,.2f} applies."

    message = await send_message(
        session,
        MessageCreate(
            subject=f"Payment recorded - {group_name}",
            content=content,
            message_type=MessageType.PAYMENT_NOTIFICATION,
            recipient_ids=[u.id for u in users],
        ),
    )

    if settings.emails_enabled:
        for user in users:
            try:
                send_email_task.delay(
                    email_to=user.email,
                    subject=f"Payment recorded - {group_name}",
                    html_template="payment_recorded.html",
                    environment={
                        "project_name": settings.PROJECT_NAME,
                        "name": user.first_name,
                        "group_name": group_name,
                        "amount": amount,
                        "payment_month": payment.payment_month,
                        "payment_date": payment.payment_date.isoformat(),
                        "status": str(payment.status),
                        "is_late": payment.is_late_payment,
                        "fine": f"{settings.CURRENCY} {payment.fine_amount:,.2f}",
                    },
                )
            except Exception as e:
                # the payment is already stored
                logger.error(f"Could not queue payment e-mail for {user.email}: {e}")
    return message
