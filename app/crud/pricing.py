import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import ServicePrice, PriceHistory
from app.schemas.pricing import ServicePriceCreate, ServicePriceUpdate
from app.crud.base import commit, get_or_404, reject_nulls
from app.utils.totals import to_money

logger = logging.getLogger(__name__)


def _record_price(service: ServicePrice, reason: str) -> None:
    service.history.append(PriceHistory(price=service.price, reason=reason))


def get_service(db: Session, service_id: int) -> ServicePrice:
    return get_or_404(db, ServicePrice, service_id, "Servicio")

def get_services(
    db: Session,
    category: Optional[str] = None,
    include_inactive: bool = False,
    search: Optional[str] = None,
) -> List[ServicePrice]:
    query = db.query(ServicePrice)
    if not include_inactive:
        query = query.filter(ServicePrice.is_active == True)
    if category:
        query = query.filter(ServicePrice.category == category)
    if search:
        query = query.filter(ServicePrice.name.ilike(f"%{search}%"))
    return query.order_by(ServicePrice.category, ServicePrice.name).all()

def find_price_for_template(db: Session, template_id: str) -> Optional[ServicePrice]:
    return db.query(ServicePrice).filter(
        ServicePrice.template_id == template_id,
        ServicePrice.is_active == True
    ).first()

def create_service(db: Session, service_in: ServicePriceCreate) -> ServicePrice:
    service = ServicePrice(**service_in.model_dump(), is_active=True)
    service.price = to_money(service.price)
    _record_price(service, "Alta inicial")

    db.add(service)
    commit(db, "crear servicio")
    db.refresh(service)
    logger.info("Servicio %s creado (%s)", service.id, service.name)
    return service

def update_service(db: Session, service_id: int, service_in: ServicePriceUpdate) -> ServicePrice:
    service = get_service(db, service_id)
    data = service_in.model_dump(exclude_unset=True)
    reject_nulls(data, ("name", "price", "category", "is_active"))
    reason = data.pop("reason", None) or "Edición manual"

    new_price = data.pop("price", None)
    for field, value in data.items():
        setattr(service, field, value)

    if new_price is not None and to_money(new_price) != to_money(service.price):
        service.price = to_money(new_price)
        _record_price(service, reason)

    commit(db, "actualizar servicio")
    db.refresh(service)
    return service

def delete_service(db: Session, service_id: int) -> None:
    service = get_service(db, service_id)
    db.delete(service)
    commit(db, "eliminar servicio")
    logger.info("Servicio %s eliminado", service_id)

def apply_increase(
    db: Session,
    percentage: Decimal,
    category: Optional[str] = None,
    reason: Optional[str] = None,
) -> List[ServicePrice]:
    """
    Aumento porcentual masivo sobre los servicios activos (opcionalmente
    de una categoría). El nuevo precio se redondea a unidades enteras.
    """
    factor = Decimal("1") + Decimal(str(percentage)) / Decimal("100")
    reason = reason or f"Aumento {percentage}%"

    services = get_services(db, category=category)
    for service in services:
        new_price = (Decimal(str(service.price)) * factor).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        service.price = to_money(new_price)
        _record_price(service, reason)

    commit(db, "aplicar aumento de precios")
    for service in services:
        db.refresh(service)

    logger.info(
        "Aumento de %s%% aplicado a %d servicio(s)%s",
        percentage, len(services), f" de la categoría {category}" if category else "",
    )
    return services
