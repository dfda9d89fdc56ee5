from fastapi import APIRouter, Depends

from ..services.identity import Principal
from ..services.notifications import NotificationService
from ..utils.dependencies import get_current_principal, get_notifications
from ..utils.error_handlers import NotFoundError

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
def my_notifications(
    principal: Principal = Depends(get_current_principal),
    notifications: NotificationService = Depends(get_notifications),
):
    return {
        "success": True,
        "notifications": [n.public_view() for n in notifications.pending(principal.id)],
    }


@router.delete("/{notification_id}")
def dismiss_notification(
    notification_id: str,
    principal: Principal = Depends(get_current_principal),
    notifications: NotificationService = Depends(get_notifications),
):
    if not notifications.dismiss(principal.id, notification_id):
        raise NotFoundError("Notification not found")
    return {"success": True}
