from fastapi import APIRouter
from app.api.v1.endpoints import auth, users, groups, members, payments, banks, messages, dashboard

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(groups.router, prefix="/groups", tags=["groups"])
api_router.include_router(members.router, prefix="/members", tags=["members"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(banks.router, prefix="/banks", tags=["banks"])
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
