from fastapi import APIRouter
from app.api.v1.endpoints import forms, email

api_router = APIRouter(prefix="/api")

api_router.include_router(forms.router, prefix="/forms", tags=["Forms"])
api_router.include_router(email.router, prefix="/email", tags=["Email"])
