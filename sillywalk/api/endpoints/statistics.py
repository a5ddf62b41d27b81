from fastapi import APIRouter, Depends, Query, Request, Response
from sillywalk.api.deps import client_ip, get_orchestrator, get_request_id
from sillywalk.config import settings
from sillywalk.db.schemas import StatisticsOut
from sillywalk.logging_config import audit_logger
from sillywalk.services.orchestrator import ApplicationOrchestrator

router = APIRouter(tags=["statistics"])

@router.get("/statistics", response_model=StatisticsOut)
def get_statistics(
    request: Request,
    response: Response,
    days: int = Query(settings.STATISTICS_DEFAULT_DAYS),
    orchestrator: ApplicationOrchestrator = Depends(get_orchestrator),
):
    audit_logger.info("Statistics request - RequestID: %s, IP: %s, Days: %d",
                      get_request_id(request), client_ip(request), days)
    stats = orchestrator.get_statistics(days)
    response.headers["Cache-Control"] = "private, max-age=300"
    return StatisticsOut(
        days=days,
        total=stats.total,
        average_score=stats.average_score,
        max_score=stats.max_score,
        briefcase_count=stats.briefcase_count,
        hopping_count=stats.hopping_count,
    )
