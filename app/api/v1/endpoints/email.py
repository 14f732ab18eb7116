from fastapi import APIRouter, Depends, status

from app.api.v1.dependencies import get_notifier
from app.api.v1.responses import envelope, error_response
from app.core.config import get_settings
from app.core.notifier import Notifier

router = APIRouter()


@router.get("/test")
async def test_email_service(notifier: Notifier = Depends(get_notifier)):
    """
    Report which email settings are present. Development mode only.
    """
    settings = get_settings()
    if not settings.is_development:
        return error_response(status.HTTP_403_FORBIDDEN, "Test endpoint not available in this environment")

    return envelope(
        "Email service is configured and ready",
        data={
            "fromEmail": notifier.from_email,
            "adminEmail": notifier.admin_email,
            "brevoConfigured": bool(getattr(notifier.sink, "configured", False)),
        },
    )
