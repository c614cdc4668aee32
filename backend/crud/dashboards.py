from typing import List, Optional

from sqlalchemy.orm import Session

from exceptions import ReferentialError, ValidationError
from models.custom_report import CustomReport
from models.dashboard import Dashboard, DashboardWidget
from schemas.dashboards import CustomReportLinkParams, DashboardCreate, DashboardUpdate, DashboardWidgetCreate
from utils import reject_null_columns
from utils.actor import ActorContext


def get_dashboard(db: Session, dashboard_id: int, tenant_id: int, user_id: int) -> Optional[Dashboard]:
    return db.query(Dashboard).filter(
        Dashboard.id == dashboard_id,
        Dashboard.tenant_id == tenant_id,
        Dashboard.user_id == user_id
    ).first()


def get_dashboards(db: Session, tenant_id: int, user_id: int) -> List[Dashboard]:
    return db.query(Dashboard).filter(
        Dashboard.tenant_id == tenant_id,
        Dashboard.user_id == user_id
    ).order_by(Dashboard.is_default.desc(), Dashboard.name).all()


def _clear_default(db: Session, tenant_id: int, user_id: int, keep_id: Optional[int] = None):
    query = db.query(Dashboard).filter(
        Dashboard.tenant_id == tenant_id,
        Dashboard.user_id == user_id,
        Dashboard.is_default == True
    )
    for dashboard in query.all():
        if dashboard.id != keep_id:
            dashboard.is_default = False


def _build_widget(db: Session, tenant_id: int, widget: DashboardWidgetCreate, actor: ActorContext) -> DashboardWidget:
    if isinstance(widget.parameters, CustomReportLinkParams):
        report = db.query(CustomReport.id).filter(
            CustomReport.id == widget.parameters.report_id,
            CustomReport.tenant_id == tenant_id
        ).first()
        if report is None:
            raise ReferentialError(f"Report {widget.parameters.report_id} not found for tenant {tenant_id}")
    return DashboardWidget(
        widget_type=widget.parameters.widget_type,
        title=widget.title,
        order_index=widget.order_index,
        parameters=widget.parameters.model_dump(mode="json"),
        properties=widget.properties.model_dump(mode="json"),
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )


def create_dashboard(db: Session, dashboard: DashboardCreate, tenant_id: int, actor: ActorContext) -> Dashboard:
    exists = db.query(Dashboard.id).filter(Dashboard.user_id == actor.user_id, Dashboard.name == dashboard.name).first()
    if exists:
        raise ValidationError(f"Dashboard '{dashboard.name}' already exists")

    db_dashboard = Dashboard(
        **dashboard.model_dump(exclude={"widgets"}),
        tenant_id=tenant_id,
        user_id=actor.user_id,
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )
    db_dashboard.widgets = [_build_widget(db, tenant_id, widget, actor) for widget in dashboard.widgets]
    if dashboard.is_default:
        _clear_default(db, tenant_id, actor.user_id)
    db.add(db_dashboard)
    db.commit()
    db.refresh(db_dashboard)
    return db_dashboard


def update_dashboard(db: Session, dashboard_id: int, dashboard: DashboardUpdate, tenant_id: int,
                     actor: ActorContext) -> Optional[Dashboard]:
    db_dashboard = get_dashboard(db, dashboard_id, tenant_id, actor.user_id)
    if not db_dashboard:
        return None

    update_data = dashboard.model_dump(exclude_unset=True)
    reject_null_columns(Dashboard, update_data)
    if update_data.get("name") and update_data["name"] != db_dashboard.name:
        exists = db.query(Dashboard.id).filter(
            Dashboard.user_id == actor.user_id,
            Dashboard.name == update_data["name"]
        ).first()
        if exists:
            raise ValidationError(f"Dashboard '{update_data['name']}' already exists")
    if update_data.get("is_default"):
        _clear_default(db, tenant_id, actor.user_id, keep_id=dashboard_id)

    for key, value in update_data.items():
        setattr(db_dashboard, key, value)
    db_dashboard.updated_by = actor.user_id
    db.commit()
    db.refresh(db_dashboard)
    return db_dashboard


def delete_dashboard(db: Session, dashboard_id: int, tenant_id: int, actor: ActorContext) -> bool:
    db_dashboard = get_dashboard(db, dashboard_id, tenant_id, actor.user_id)
    if not db_dashboard:
        return False
    db.delete(db_dashboard)
    db.commit()
    return True


def add_widget(db: Session, dashboard_id: int, widget: DashboardWidgetCreate, tenant_id: int,
               actor: ActorContext) -> DashboardWidget:
    db_dashboard = get_dashboard(db, dashboard_id, tenant_id, actor.user_id)
    if not db_dashboard:
        raise ReferentialError(f"Dashboard {dashboard_id} not found")
    db_widget = _build_widget(db, tenant_id, widget, actor)
    db_dashboard.widgets.append(db_widget)
    db.commit()
    db.refresh(db_widget)
    return db_widget


def delete_widget(db: Session, dashboard_id: int, widget_id: int, tenant_id: int, actor: ActorContext) -> bool:
    db_dashboard = get_dashboard(db, dashboard_id, tenant_id, actor.user_id)
    if not db_dashboard:
        return False
    db_widget = db.query(DashboardWidget).filter(
        DashboardWidget.id == widget_id,
        DashboardWidget.dashboard_id == dashboard_id
    ).first()
    if not db_widget:
        return False
    db.delete(db_widget)
    db.commit()
    return True
