from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from database import get_db
from schemas.dashboards import Dashboard, DashboardCreate, DashboardUpdate, DashboardWidget, DashboardWidgetCreate
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import dashboards as crud_dashboards

router = APIRouter(prefix="/dashboards", tags=["Dashboards"])


@router.post("/", response_model=Dashboard, status_code=status.HTTP_201_CREATED)
def create_dashboard(
    dashboard: DashboardCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("report.manage")),
):
    return crud_dashboards.create_dashboard(db, dashboard, actor.tenant_id, actor)


@router.get("/", response_model=List[Dashboard])
def read_dashboards(
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    return crud_dashboards.get_dashboards(db, actor.tenant_id, actor.user_id)


@router.get("/{dashboard_id}", response_model=Dashboard)
def read_dashboard(
    dashboard_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    db_dashboard = crud_dashboards.get_dashboard(db, dashboard_id, actor.tenant_id, actor.user_id)
    if db_dashboard is None:
        raise HTTPException(status_code=404, detail="Dashboard not found")
    return db_dashboard


@router.patch("/{dashboard_id}", response_model=Dashboard)
def update_dashboard(
    dashboard_id: int,
    dashboard: DashboardUpdate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("report.manage")),
):
    updated = crud_dashboards.update_dashboard(db, dashboard_id, dashboard, actor.tenant_id, actor)
    if updated is None:
        raise HTTPException(status_code=404, detail="Dashboard not found")
    return updated


@router.delete("/{dashboard_id}")
def delete_dashboard(
    dashboard_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("report.manage")),
):
    if not crud_dashboards.delete_dashboard(db, dashboard_id, actor.tenant_id, actor):
        raise HTTPException(status_code=404, detail="Dashboard not found")
    return {"message": "Dashboard deleted successfully"}


@router.post("/{dashboard_id}/widgets", response_model=DashboardWidget, status_code=status.HTTP_201_CREATED)
def add_widget(
    dashboard_id: int,
    widget: DashboardWidgetCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("report.manage")),
):
    return crud_dashboards.add_widget(db, dashboard_id, widget, actor.tenant_id, actor)


@router.delete("/{dashboard_id}/widgets/{widget_id}")
def delete_widget(
    dashboard_id: int,
    widget_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("report.manage")),
):
    if not crud_dashboards.delete_widget(db, dashboard_id, widget_id, actor.tenant_id, actor):
        raise HTTPException(status_code=404, detail="Widget not found")
    return {"message": "Widget deleted successfully"}
