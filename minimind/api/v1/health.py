"""Health check: reports which integrations are configured (never their values)."""

from fastapi import APIRouter

from minimind.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    settings = get_settings()
    configured = {
        "DATABASE_URL": bool(settings.database_url),
        "SECRET_KEY": settings.secret_key != "change-me-in-production-use-env",
        "STRIPE_SECRET_KEY": bool(settings.stripe_secret_key),
        "STRIPE_WEBHOOK_SECRET": bool(settings.stripe_webhook_secret),
        "STRIPE_PUBLISHABLE_KEY": bool(settings.stripe_publishable_key),
        "STRIPE_PRICE_ID": bool(settings.stripe_price_id),
        "OPENAI_API_KEY": bool(settings.openai_api_key),
        "FRONTEND_URL": bool(settings.frontend_url),
    }
    missing = [name for name, ok in configured.items() if not ok]
    return {
        "status": "healthy" if not missing else "missing_env_vars",
        "environment": settings.environment,
        "environment_variables": configured,
        "missing_variables": missing,
    }
