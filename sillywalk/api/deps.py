from fastapi import Depends, Request
from sqlalchemy.orm import Session
from sillywalk.db.crud import SqlSubmissionStore
from sillywalk.db.session import SessionLocal
from sillywalk.services.orchestrator import ApplicationOrchestrator, generate_request_id

PROXY_HEADERS = ("X-Forwarded-For", "X-Real-IP", "Proxy-Client-IP")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_orchestrator(db: Session = Depends(get_db)) -> ApplicationOrchestrator:
    return ApplicationOrchestrator(SqlSubmissionStore(db))

def get_request_id(request: Request) -> str:
    rid = getattr(request.state, "request_id", None)
    if rid is None:
        rid = request.state.request_id = generate_request_id()
    return rid

def client_ip(request: Request) -> str:
    for header in PROXY_HEADERS:
        value = request.headers.get(header)
        if value and value.lower() != "unknown":
            # first hop is the original client
            return value.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
