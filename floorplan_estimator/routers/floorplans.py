from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import get_db
from ..identity import get_user_key

router = APIRouter(prefix="/floorplans", tags=["floorplans"])


@router.post("/", response_model=schemas.FloorPlan)
def save_floor_plan(
    plan: schemas.FloorPlanCreate,
    user_key: str = Depends(get_user_key),
    db: Session = Depends(get_db),
):
    db_plan = models.FloorPlan(
        user_key=user_key,
        file_name=plan.file_name,
        analysis_json=plan.analysis.model_dump(mode="json"),
        cost_estimation_json=plan.cost_estimation,
    )
    db.add(db_plan)
    db.commit()
    db.refresh(db_plan)
    return db_plan


@router.get("/", response_model=List[schemas.FloorPlan])
def list_floor_plans(
    skip: int = 0,
    limit: int = 100,
    user_key: str = Depends(get_user_key),
    db: Session = Depends(get_db),
):
    return (
        db.query(models.FloorPlan)
        .filter(models.FloorPlan.user_key == user_key)
        .order_by(models.FloorPlan.created_at.desc(), models.FloorPlan.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


@router.delete("/{plan_id}")
def delete_floor_plan(
    plan_id: int,
    user_key: str = Depends(get_user_key),
    db: Session = Depends(get_db),
):
    plan = db.query(models.FloorPlan).filter(models.FloorPlan.id == plan_id).first()
    if not plan:
        raise HTTPException(status_code=404, detail="Floor plan not found")
    if plan.user_key != user_key:
        raise HTTPException(status_code=403, detail="Not your floor plan")
    db.delete(plan)
    db.commit()
    return {"ok": True, "deleted": plan_id}
