"""
Health check routes for the EarthLord client
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Request
import logging

from earthlord.utils.dependencies import SupabaseDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Service health check"""
    supabase = getattr(request.app.state, "supabase", None)
    config = request.app.state.app_config
    return {
        "service": config.service_name,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "supabase": "configured" if supabase is not None and supabase.is_available() else "not_configured",
        "version": config.service_version
    }


@router.get("/health/supabase")
async def supabase_health_check(supabase: SupabaseDep):
    """Probe the Supabase project; 'connected' means the server answered"""
    result = await supabase.check_connection()
    result["timestamp"] = datetime.now(timezone.utc).isoformat()
    return result
