from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for load balancers.

    Answers even when store credentials are missing, so a misconfigured
    instance stays reachable for diagnosis.
    """

    return {"status": "ok"}
