from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sillywalk.api.deps import client_ip, get_orchestrator, get_request_id
from sillywalk.db.schemas import ApplicationSubmissionIn, ApplicationSubmissionOut, ApplicationOut
from sillywalk.logging_config import audit_logger, sanitize_for_logging
from sillywalk.services.orchestrator import ApplicationOrchestrator, MIN_SILLINESS_THRESHOLD

router = APIRouter(tags=["applications"])

SUCCESS_MESSAGE = "Application successfully submitted for preliminary review"

@router.post("/applications", response_model=ApplicationSubmissionOut, status_code=201)
def submit_application(
    app_in: ApplicationSubmissionIn,
    request: Request,
    response: Response,
    orchestrator: ApplicationOrchestrator = Depends(get_orchestrator),
):
    request_id = get_request_id(request)
    audit_logger.info(
        "Application submission attempt - RequestID: %s, IP: %s, UserAgent: %s, Applicant: %s, Walk: %s",
        request_id, client_ip(request),
        sanitize_for_logging(request.headers.get("User-Agent"), 100),
        sanitize_for_logging(app_in.applicant_name, 100),
        sanitize_for_logging(app_in.walk_name, 100),
    )
    rec = orchestrator.submit(app_in.to_submission(), request_id)

    response.headers["X-Application-ID"] = rec.application_id
    response.headers["X-Silliness-Score"] = str(rec.initial_silliness_score)
    return ApplicationSubmissionOut(
        application_id=rec.application_id,
        status=rec.status.lower(),
        submitted_at=rec.submitted_at,
        initial_silliness_score=rec.initial_silliness_score,
        message=SUCCESS_MESSAGE,
        request_id=request_id,
    )

@router.get("/applications", response_model=List[ApplicationOut])
def top_applications(
    min_score: int = Query(MIN_SILLINESS_THRESHOLD, alias="minScore"),
    limit: int = Query(10),
    orchestrator: ApplicationOrchestrator = Depends(get_orchestrator),
):
    return [ApplicationOut.model_validate(rec) for rec in orchestrator.get_top_applications(min_score, limit)]

@router.get("/applications/{application_id}", response_model=ApplicationOut)
def get_application(application_id: str, orchestrator: ApplicationOrchestrator = Depends(get_orchestrator)):
    rec = orchestrator.get_by_id(application_id)
    if not rec:
        raise HTTPException(404, "Application not found")
    return ApplicationOut.model_validate(rec)
