from fastapi import APIRouter

from src.presentation.api.v1.endpoints import addresses, flaky, health, students


# Address service: owns the address data and the flaky resource
address_router = APIRouter()
address_router.include_router(health.router)
address_router.include_router(addresses.router)
address_router.include_router(flaky.router)

# Student service: consumes the address service
student_router = APIRouter()
student_router.include_router(health.router)
student_router.include_router(students.router)
