from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from dropout_monitor.core.config import RiskConfig, get_risk_config, settings
from dropout_monitor.core.database import get_db
from dropout_monitor.core.errors import (
    InputFormatError,
    PersistenceError,
    StudentNotFoundError,
)
from dropout_monitor.schemas.student import RiskEvaluationResponse, StudentResponse
from dropout_monitor.services.evaluation_service import (
    process_and_evaluate,
    reevaluate_student,
)
from dropout_monitor.services.record_parser import load_batch_file, parse_batch
from dropout_monitor.services.student_query import (
    get_student,
    list_risk_evaluations,
    list_students,
)

router = APIRouter()


# Batch evaluation
@router.post("/evaluate", response_model=list[StudentResponse])
async def evaluate_students(
    request: Request,
    db: Session = Depends(get_db),
    risk_config: RiskConfig = Depends(get_risk_config),
):
    body = await request.body()

    try:
        raw_students = parse_batch(body)
        return process_and_evaluate(db, raw_students, risk_config)
    except InputFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/evaluate/file", response_model=list[StudentResponse])
async def evaluate_students_from_file(
    db: Session = Depends(get_db),
    risk_config: RiskConfig = Depends(get_risk_config),
):
    try:
        raw_students = load_batch_file(settings.DATA_FILE)
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Failed to read batch file: {e}")
    except InputFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return process_and_evaluate(db, raw_students, risk_config)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


# Queries
@router.get("/students", response_model=list[StudentResponse])
async def get_students(
    risk_level: str | None = None,
    sort_by: str | None = None,
    db: Session = Depends(get_db),
):
    try:
        return list_students(db, risk_level=risk_level, sort_by=sort_by)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/students/{student_id}", response_model=StudentResponse)
async def get_single_student(
    student_id: str,
    db: Session = Depends(get_db),
):
    try:
        return get_student(db, student_id)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get(
    "/students/{student_id}/evaluations",
    response_model=list[RiskEvaluationResponse],
)
async def get_student_evaluations(
    student_id: str,
    db: Session = Depends(get_db),
):
    try:
        return list_risk_evaluations(db, student_id)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/students/{student_id}/evaluate", response_model=StudentResponse)
async def reevaluate_single_student(
    student_id: str,
    db: Session = Depends(get_db),
    risk_config: RiskConfig = Depends(get_risk_config),
):
    try:
        return reevaluate_student(db, student_id, risk_config)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InputFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
