from __future__ import annotations

from fastapi import APIRouter

from dragon_drop.core.config import settings
from dragon_drop.services.employee_service import employee_service
from dragon_drop.services.notifications import notification_gateway

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    try:
        if employee_service.initialized:
            ok = await employee_service.check_connection()
            services["cosmos_db"] = "ok" if ok else "error"
        else:
            services["cosmos_db"] = "not_configured"
    except Exception:
        services["cosmos_db"] = "error"

    # Webhooks are not probed here; POST /integrations/test sends real test messages.
    configured = notification_gateway.get_config_status()
    services["slack"] = "configured" if configured["slack_configured"] else "not_configured"
    services["n8n"] = "configured" if configured["n8n_configured"] else "not_configured"

    all_ok = all(v in ("ok", "configured", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
