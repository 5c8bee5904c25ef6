"""Site statistics route."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from waternearme.database import get_db
from waternearme.services import waypoint_service

router = APIRouter()


@router.get("")
def get_stats(db: Session = Depends(get_db)):
    """Total fountains and the distinct contributors who added them."""
    return waypoint_service.site_stats(db)
