"""Employer profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from atsboost.api.deps import get_current_user
from atsboost.api.schemas import EmployerCreate, EmployerResponse
from atsboost.db import Employer, User, get_db

router = APIRouter()


@router.post("", response_model=EmployerResponse, status_code=201)
def create_employer(
    body: EmployerCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create the user's company profile and make them a recruiter."""
    if db.query(Employer).filter(Employer.user_id == user.id).first():
        raise HTTPException(status_code=409, detail="Employer profile already exists")

    employer = Employer(user_id=user.id, **body.model_dump())
    db.add(employer)
    if user.role == "user":
        user.role = "recruiter"
    db.commit()
    db.refresh(employer)
    return EmployerResponse.model_validate(employer)


@router.get("/me", response_model=EmployerResponse)
def get_my_employer(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get the user's company profile."""
    employer = db.query(Employer).filter(Employer.user_id == user.id).first()
    if not employer:
        raise HTTPException(status_code=404, detail="Employer profile not found")
    return EmployerResponse.model_validate(employer)


@router.put("/me", response_model=EmployerResponse)
def update_my_employer(
    body: EmployerCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace the user's company profile details."""
    employer = db.query(Employer).filter(Employer.user_id == user.id).first()
    if not employer:
        raise HTTPException(status_code=404, detail="Employer profile not found")

    for field, value in body.model_dump().items():
        setattr(employer, field, value)
    db.commit()
    db.refresh(employer)
    return EmployerResponse.model_validate(employer)
