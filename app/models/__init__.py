from app.models.user import User
from app.models.member import Member
from app.models.group import Group, GroupSlot
from app.models.bank import Bank
from app.models.payment import Payment
from app.models.message import Message, MessageRecipient
from app.models.auth_log import AuthLog
