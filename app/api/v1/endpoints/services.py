"""Clinic services catalogue: public reads, admin writes."""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.core.database import get_db
from app.core.deps import require_admin
from app.models.service import Service
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.doctor import ServiceCreate, ServiceOut, ServiceUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


async def _get_service_or_404(db: AsyncSession, service_id: int) -> Service:
    result = await db.execute(select(Service).where(Service.id == service_id))
    service = result.scalar_one_or_none()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found.")
    return service


@router.get("", response_model=list[ServiceOut])
async def list_services(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Service).order_by(Service.name))
    return result.scalars().all()


@router.get("/{service_id}", response_model=ServiceOut)
async def get_service(service_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_service_or_404(db, service_id)


@router.post("", response_model=ServiceOut, status_code=201)
async def create_service(
    data: ServiceCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = Service(**data.model_dump())
    db.add(service)
    await db.commit()
    await db.refresh(service)
    logger.info("Service %s created by admin %s", service.id, current_user.id)
    return service


@router.put("/{service_id}", response_model=ServiceOut)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = await _get_service_or_404(db, service_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(service, key, value)
    await db.commit()
    await db.refresh(service)
    return service


@router.delete("/{service_id}", response_model=MessageResponse)
async def delete_service(
    service_id: int,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = await _get_service_or_404(db, service_id)
    await db.delete(service)
    await db.commit()
    return {"message": "Service deleted successfully!"}
