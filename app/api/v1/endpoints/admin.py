"""Admin-only endpoints: dashboard stats, account management and audit trail.

All routes require the admin role.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc

from app.core.database import get_db
from app.core.deps import require_admin
from app.models.doctor import Doctor
from app.models.service import Service
from app.models.user import User, ROLES, ROLE_USER, ROLE_STAFF, ROLE_ADMIN
from app.schemas.admin import (
    DashboardStats,
    StaffCreate,
    StaffUpdate,
    RoleUpdate,
    CreatedUserResponse,
    AuditLogEntry,
    AuditLogList,
)
from app.schemas.auth import MessageResponse, UserOut
from app.services.appointment_repository import AppointmentRepository
from app.services.audit_service import list_admin_actions
from app.services.auth import get_user_by_email, hash_password

router = APIRouter()
logger = logging.getLogger(__name__)


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return result.scalar() or 0


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return user


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Totals for users by role, doctors, services and appointments by status."""
    by_role = dict(
        (await db.execute(select(User.role, func.count(User.id)).group_by(User.role))).all()
    )
    by_status = await AppointmentRepository(db).count_by_status()

    return DashboardStats(
        totalUsers=by_role.get(ROLE_USER, 0),
        totalStaff=by_role.get(ROLE_STAFF, 0),
        totalAdmins=by_role.get(ROLE_ADMIN, 0),
        totalAppointments=sum(by_status.values()),
        totalDoctors=await _count(db, select(func.count(Doctor.id))),
        totalServices=await _count(db, select(func.count(Service.id))),
        pendingAppointments=by_status.get("pending", 0),
        confirmedAppointments=by_status.get("confirmed", 0),
    )


@router.get("/users", response_model=list[UserOut])
async def list_users(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).order_by(desc(User.created_at), desc(User.id)))
    return result.scalars().all()


@router.post("/staff", response_model=CreatedUserResponse, status_code=201)
async def create_staff_account(
    data: StaffCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create an admin or staff account."""
    if await get_user_by_email(db, data.email):
        raise HTTPException(status_code=400, detail="Failed! Email is already in use.")

    user = User(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        hashed_password=hash_password(data.password),
        phone=data.phone,
        role=data.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Admin %s created %s account %s", current_user.id, data.role, user.email)
    return {"message": f"{data.role} account created successfully!", "userId": user.id}


@router.put("/staff/{user_id}", response_model=MessageResponse)
async def update_staff_account(
    user_id: int,
    data: StaffUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(db, user_id)

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    password = update_data.pop("password", None)
    for key, value in update_data.items():
        setattr(user, key, value)
    if password:
        user.hashed_password = hash_password(password)
    await db.commit()

    return {"message": "Staff account updated successfully!"}


@router.put("/users/{user_id}/role", response_model=MessageResponse)
async def update_user_role(
    user_id: int,
    data: RoleUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if data.role not in ROLES:
        raise HTTPException(status_code=400, detail="Invalid role.")

    user = await _get_user_or_404(db, user_id)
    previous = user.role
    user.role = data.role
    await db.commit()

    logger.info("Admin %s changed role of user %s: %s -> %s", current_user.id, user_id, previous, data.role)
    return {"message": "User role updated successfully!"}


@router.delete("/staff/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account.")

    user = await _get_user_or_404(db, user_id)
    await db.delete(user)
    await db.commit()

    logger.info("Admin %s deleted user %s", current_user.id, user_id)
    return {"message": "User deleted successfully!"}


@router.get("/audit-log", response_model=AuditLogList)
async def get_audit_log(
    appointment_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Privileged appointment changes, newest first."""
    entries = await list_admin_actions(db, appointment_id=appointment_id, limit=limit, offset=offset)
    return AuditLogList(
        entries=[AuditLogEntry.model_validate(entry) for entry in entries],
        limit=limit,
        offset=offset,
    )
