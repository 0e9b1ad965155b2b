"""Doctor directory: public reads, admin writes."""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.core.database import get_db
from app.core.deps import require_admin
from app.models.doctor import Doctor, DEFAULT_AVAILABILITY
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.doctor import DoctorCreate, DoctorOut, DoctorUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


async def _get_doctor_or_404(db: AsyncSession, doctor_id: int) -> Doctor:
    result = await db.execute(select(Doctor).where(Doctor.id == doctor_id))
    doctor = result.scalar_one_or_none()
    if not doctor:
        raise HTTPException(status_code=404, detail="Doctor not found.")
    return doctor


@router.get("", response_model=list[DoctorOut])
async def list_doctors(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Doctor).order_by(Doctor.name))
    return result.scalars().all()


@router.get("/{doctor_id}", response_model=DoctorOut)
async def get_doctor(doctor_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_doctor_or_404(db, doctor_id)


@router.post("", response_model=DoctorOut, status_code=201)
async def create_doctor(
    data: DoctorCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Add a doctor (admin only)."""
    doctor = Doctor(**data.model_dump(exclude={"availability"}), availability=data.availability or DEFAULT_AVAILABILITY)
    db.add(doctor)
    await db.commit()
    await db.refresh(doctor)
    logger.info("Doctor %s created by admin %s", doctor.id, current_user.id)
    return doctor


@router.put("/{doctor_id}", response_model=DoctorOut)
async def update_doctor(
    doctor_id: int,
    data: DoctorUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    doctor = await _get_doctor_or_404(db, doctor_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(doctor, key, value)
    await db.commit()
    await db.refresh(doctor)
    return doctor


@router.delete("/{doctor_id}", response_model=MessageResponse)
async def delete_doctor(
    doctor_id: int,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    doctor = await _get_doctor_or_404(db, doctor_id)
    await db.delete(doctor)
    await db.commit()
    logger.info("Doctor %s deleted by admin %s", doctor_id, current_user.id)
    return {"message": "Doctor deleted successfully!"}
