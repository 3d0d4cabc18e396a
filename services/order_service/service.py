import calendar
import math
import time
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.repository import UserRepository
from services.payment_service.service import PaymentService
from services.payment_service.zalopay import ZaloPayClient
from services.pet_service.repository import PetRepository
from services.product_service.repository import ProductRepository
from services.product_service.schemas import Pagination
from shared.errors import BadRequestException, ErrorCode, NotFoundException
from shared.observability import (
    ecomm_checkout_duration_seconds,
    ecomm_order_status_transitions_total,
    ecomm_orders_created_total,
)

from .lifecycle import (
    CANCELLABLE_STATUSES,
    REFUND_REQUEST_STATUSES,
    REVIEWABLE_STATUSES,
    OrderStatus,
    StockReconciliation,
    ensure_transition,
    plan_reconciliation,
)
from .models import Order, OrderItem, OrderRefund, OrderReview, utcnow
from .repository import OrderRepository
from .schemas import (
    DailyOrderStats,
    MonthlyOrderStats,
    OrderCreate,
    OrderFilters,
    OrderItemCreate,
    OrderListResponse,
    OrderResponse,
    OrderSummaryResponse,
    RefundCreate,
    ReviewCreate,
)

logger = structlog.get_logger(__name__)


def _first_image(images) -> str:
    return images[0] if images else ""


# Reported profit is a flat share of revenue
PROFIT_RATE = Decimal("0.10")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive UTC values
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


def _add_to_bucket(bucket, total: int):
    bucket.count += 1
    bucket.revenue += total
    bucket.profit = int((Decimal(bucket.revenue) * PROFIT_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class OrderService:

    @staticmethod
    async def _build_item(db: AsyncSession, line: OrderItemCreate) -> OrderItem:
        """Validates one requested line and takes product stock for it."""
        if line.type == "product":
            product = await ProductRepository.get_product_by_id(db, line.item_id)
            if not product:
                raise NotFoundException(
                    f"Product with ID {line.item_id} not found", ErrorCode.PRODUCT_NOT_FOUND
                )
            if not product.is_active:
                raise BadRequestException(f"Product {product.name} is not available", ErrorCode.ITEM_UNAVAILABLE)
            if not await ProductRepository.reduce_stock(db, product.id, line.quantity):
                raise BadRequestException(
                    f"Insufficient stock for product {product.name}", ErrorCode.INSUFFICIENT_STOCK
                )
            name, price, image = product.name, product.price, _first_image(product.images)
        else:
            pet = await PetRepository.get_pet_by_id(db, line.item_id)
            if not pet:
                raise NotFoundException(f"Pet with ID {line.item_id} not found", ErrorCode.PET_NOT_FOUND)
            if not pet.is_available:
                raise BadRequestException(f"Pet {pet.name} is not available", ErrorCode.ITEM_UNAVAILABLE)
            if line.quantity > 1:
                raise BadRequestException("Only 1 pet can be ordered at a time")
            # Pets are reserved when the order moves to processing, not here
            name, price, image = pet.name, pet.price, _first_image(pet.images)

        return OrderItem(
            item_type=line.type,
            item_id=line.item_id,
            name=name,
            unit_price=price,
            quantity=line.quantity,
            subtotal=price * line.quantity,
            image=image,
        )

    @staticmethod
    async def _apply_reconciliation(db: AsyncSession, plan: StockReconciliation):
        for product_id, quantity in plan.restock.items():
            await ProductRepository.restore_stock(db, product_id, quantity)
        for pet_id in plan.reserve_pets:
            await PetRepository.set_availability(db, pet_id, False)
        for pet_id in plan.release_pets:
            await PetRepository.set_availability(db, pet_id, True)

    @staticmethod
    def _reconciliation_for(order: Order, target: OrderStatus) -> StockReconciliation:
        return plan_reconciliation(
            order.status,
            target,
            ((item.item_type, item.item_id, item.quantity) for item in order.items),
        )

    @staticmethod
    async def create_order(
        db: AsyncSession,
        customer_id: int,
        data: OrderCreate,
        gateway: ZaloPayClient | None = None,
    ) -> Order:
        started = time.perf_counter()
        async with db.begin():
            customer = await UserRepository.get_by_id(db, customer_id)
            if not customer:
                raise NotFoundException("Customer not found")

            items = [await OrderService._build_item(db, line) for line in data.items]

            order = Order(
                customer_id=customer_id,
                items=items,
                status=OrderStatus.PENDING.value,
                payment_method=data.payment_method,
                shipping_address=data.shipping_address.model_dump(),
                notes=data.notes,
                order_date=utcnow(),
            )
            order.recalculate_totals()
            order.set_estimated_delivery()
            order.order_number = await OrderRepository.next_order_number(db)
            await OrderRepository.add(db, order)

        ecomm_checkout_duration_seconds.observe(time.perf_counter() - started)
        ecomm_orders_created_total.labels(payment_method=data.payment_method).inc()
        logger.info(
            "order_created",
            order_id=order.id,
            order_number=order.order_number,
            customer_id=customer_id,
            total=order.total,
        )

        # The gateway is called only once the order and stock changes are committed
        if data.payment_method == "zalopay":
            payment = await PaymentService.create_zalopay_order(
                db,
                gateway or ZaloPayClient.from_settings(),
                order.id,
                order.total,
                f"Thanh toán đơn hàng #{order.order_number}",
            )
            order.order_url = payment.order_url
            return await OrderRepository.save(db, order)

        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def list_orders(db: AsyncSession, filters: OrderFilters, customer_id: int | None = None) -> OrderListResponse:
        orders, total = await OrderRepository.list_orders(db, filters, customer_id)
        return OrderListResponse(
            orders=[OrderResponse.model_validate(o) for o in orders],
            pagination=Pagination(
                page=filters.page,
                limit=filters.limit,
                total=total,
                pages=math.ceil(total / filters.limit),
            ),
        )

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int, customer_id: int | None = None) -> Order:
        order = await OrderRepository.get_order(db, order_id, customer_id)
        if not order:
            raise NotFoundException("Order not found")
        return order

    @staticmethod
    async def cancel_order(db: AsyncSession, order_id: int, customer_id: int) -> Order:
        async with db.begin():
            order = await OrderService.get_order(db, order_id, customer_id)
            if OrderStatus(order.status) not in CANCELLABLE_STATUSES:
                raise BadRequestException("Only pending orders can be cancelled")

            plan = OrderService._reconciliation_for(order, OrderStatus.CANCELLED)
            await OrderService._apply_reconciliation(db, plan)
            previous = order.status
            order.status = OrderStatus.CANCELLED.value

        ecomm_order_status_transitions_total.labels(from_status=previous, to_status=order.status).inc()
        logger.info("order_cancelled", order_id=order.id, customer_id=customer_id)
        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def update_order_status(db: AsyncSession, order_id: int, status: OrderStatus) -> Order:
        async with db.begin():
            order = await OrderService.get_order(db, order_id)
            ensure_transition(order.status, status)

            plan = OrderService._reconciliation_for(order, status)
            await OrderService._apply_reconciliation(db, plan)
            previous = order.status
            order.status = status.value

        ecomm_order_status_transitions_total.labels(from_status=previous, to_status=status.value).inc()
        logger.info(
            "order_status_updated",
            order_id=order.id,
            from_status=previous,
            to_status=status.value,
            restocked=plan.restock,
        )
        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def request_refund(db: AsyncSession, order_id: int, customer_id: int, data: RefundCreate) -> Order:
        order = await OrderService.get_order(db, order_id, customer_id)
        if OrderStatus(order.status) not in REFUND_REQUEST_STATUSES:
            raise BadRequestException("Only delivered or pending refund orders can be refunded/edited")

        refund_fields = dict(
            reason=data.reason,
            bank_name=data.bank_name,
            account_number=data.account_number,
            description=data.description or "",
            images=list(data.images),
            amount=order.total,
            requested_at=utcnow(),
        )
        if order.refund is None:
            order.refund = OrderRefund(**refund_fields)
        else:
            for field, value in refund_fields.items():
                setattr(order.refund, field, value)

        previous = order.status
        order.status = OrderStatus.PENDING_REFUND.value
        saved = await OrderRepository.save(db, order)
        if previous != saved.status:
            ecomm_order_status_transitions_total.labels(from_status=previous, to_status=saved.status).inc()
        logger.info("order_refund_requested", order_id=order_id, customer_id=customer_id)
        return saved

    @staticmethod
    async def add_review(db: AsyncSession, order_id: int, user_id: int, data: ReviewCreate) -> Order:
        order = await OrderService.get_order(db, order_id, user_id)
        if OrderStatus(order.status) not in REVIEWABLE_STATUSES:
            raise BadRequestException("Order must be delivered to review")

        existing = next((r for r in order.reviews if r.user_id == user_id), None)
        if existing:
            existing.rating = data.rating
            existing.content = data.content
            existing.created_at = utcnow()
        else:
            order.reviews.append(OrderReview(user_id=user_id, rating=data.rating, content=data.content))
        return await OrderRepository.save(db, order)

    @staticmethod
    async def get_summary(db: AsyncSession, days: int, now: datetime | None = None) -> OrderSummaryResponse:
        """Order volume and revenue over the last `days`, plus month-on-month revenue."""
        now = now or utcnow()
        since = now - timedelta(days=days)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        last_month_start = (month_start - timedelta(days=1)).replace(day=1)

        counts = await OrderRepository.status_counts(db, since)
        current = await OrderRepository.revenue_between(db, month_start)
        previous = await OrderRepository.revenue_between(db, last_month_start, month_start)

        return OrderSummaryResponse(
            days=days,
            orders=sum(counts.values()),
            revenue=await OrderRepository.revenue_between(db, since),
            status_breakdown={status.value: counts.get(status.value, 0) for status in OrderStatus},
            current_month_revenue=current,
            last_month_revenue=previous,
            revenue_change=100.0 if previous == 0 else round((current - previous) / previous * 100, 1),
        )

    @staticmethod
    async def orders_by_month(db: AsyncSession, year: int | None = None) -> list[MonthlyOrderStats]:
        year = year or utcnow().year
        start = datetime(year, 1, 1, tzinfo=timezone.utc)
        rows = await OrderRepository.revenue_rows(db, start, start.replace(year=year + 1))

        buckets = {month: MonthlyOrderStats(month=calendar.month_abbr[month]) for month in range(1, 13)}
        for order_date, total in rows:
            _add_to_bucket(buckets[_as_utc(order_date).month], total)
        return list(buckets.values())

    @staticmethod
    async def orders_by_day(db: AsyncSession, days: int, today: date | None = None) -> list[DailyOrderStats]:
        today = today or utcnow().date()
        first_day = today - timedelta(days=days - 1)
        start = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)
        rows = await OrderRepository.revenue_rows(db, start)

        buckets = {
            first_day + timedelta(days=offset): DailyOrderStats(
                date=(first_day + timedelta(days=offset)).isoformat()
            )
            for offset in range(days)
        }
        for order_date, total in rows:
            bucket = buckets.get(_as_utc(order_date).date())
            if bucket:
                _add_to_bucket(bucket, total)
        return list(buckets.values())

    @staticmethod
    async def remove_review(db: AsyncSession, order_id: int, user_id: int) -> Order:
        order = await OrderService.get_order(db, order_id, user_id)
        order.reviews = [r for r in order.reviews if r.user_id != user_id]
        return await OrderRepository.save(db, order)
