from fastapi import APIRouter
from app.api.v1.endpoints import auth, appointments, doctors, services, admin

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
api_router.include_router(doctors.router, prefix="/doctors", tags=["doctors"])
api_router.include_router(services.router, prefix="/services", tags=["services"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
