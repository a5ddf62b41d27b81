from fastapi import APIRouter, Response
from sillywalk.db.schemas import HealthOut

router = APIRouter(tags=["health"])

@router.get("/health", response_model=HealthOut)
def health(response: Response):
    response.headers["X-Ministry-Status"] = "Operational"
    return HealthOut(status="UP", description="Ministry of Silly Walks Application System")
