from fastapi import APIRouter, Request
from marketplace.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
