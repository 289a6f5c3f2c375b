"""Document mapping for subscriptions and delegations.

Dates are stored as ISO strings ("YYYY-MM-DD"), datetimes as timezone-aware
ISO strings and money as decimal strings, so documents round-trip without
precision loss.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from domain.subscription.core.entities import (
    Delegation,
    MealPlanSnapshot,
    SlotMeal,
    SnapshotPricing,
    SnapshotSlot,
    SnapshotStats,
    Subscription,
    SubscriptionMetrics,
    TimelineEntry,
)
from domain.subscription.core.value_objects import (
    Active,
    ArtifactState,
    ArtifactStatus,
    Cancelled,
    CompileRequest,
    DeliveredMarker,
    DeliverySchedule,
    Discount,
    DiscountApplied,
    Expired,
    MealCategory,
    MealCursor,
    MealPricing,
    NextDelivery,
    Nutrition,
    Paused,
    PendingFirstDelivery,
    PricingInputs,
    SkippedDay,
    SlotDeliveryStatus,
    SubscriptionId,
    SubscriptionState,
    TimelineStatus,
    TimeSlot,
)

Document = Dict[str, Any]


def _dt(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware")
    return value.isoformat()


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _d(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_d(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value is not None else None


def _money(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


def _parse_money(value: Optional[str]) -> Optional[Decimal]:
    return Decimal(value) if value is not None else None


# ----------------------------------------------------------------------
# Cursor and state
# ----------------------------------------------------------------------


def cursor_to_doc(cursor: MealCursor) -> Document:
    return {
        "week_number": cursor.week_number,
        "day_of_week": cursor.day_of_week,
        "meal_slot": cursor.meal_slot.value,
    }


def cursor_from_doc(doc: Document) -> MealCursor:
    return MealCursor(
        week_number=doc["week_number"],
        day_of_week=doc["day_of_week"],
        meal_slot=MealCategory(doc["meal_slot"]),
    )


def state_to_doc(state: SubscriptionState) -> Document:
    doc: Document = {"status": state.status.value}
    if isinstance(state, Active):
        doc.update(activated_at=_dt(state.activated_at), resumed_at=_dt(state.resumed_at))
    elif isinstance(state, Paused):
        doc.update(
            activated_at=_dt(state.activated_at), since=_dt(state.since), reason=state.reason
        )
    elif isinstance(state, Cancelled):
        doc.update(
            cancelled_at=_dt(state.cancelled_at),
            reason=state.reason,
            activated_at=_dt(state.activated_at),
        )
    elif isinstance(state, Expired):
        doc.update(expired_at=_dt(state.expired_at), activated_at=_dt(state.activated_at))
    return doc


def state_from_doc(doc: Document) -> SubscriptionState:
    status = doc["status"]
    if status == "active":
        return Active(
            activated_at=_parse_dt(doc["activated_at"]),
            resumed_at=_parse_dt(doc.get("resumed_at")),
        )
    if status == "paused":
        return Paused(
            activated_at=_parse_dt(doc["activated_at"]),
            since=_parse_dt(doc["since"]),
            reason=doc["reason"],
        )
    if status == "cancelled":
        return Cancelled(
            cancelled_at=_parse_dt(doc["cancelled_at"]),
            reason=doc.get("reason", ""),
            activated_at=_parse_dt(doc.get("activated_at")),
        )
    if status == "expired":
        return Expired(
            expired_at=_parse_dt(doc["expired_at"]),
            activated_at=_parse_dt(doc.get("activated_at")),
        )
    if status == "pending_first_delivery":
        return PendingFirstDelivery()
    raise ValueError(f"Unknown subscription status: {status}")


# ----------------------------------------------------------------------
# Snapshot
# ----------------------------------------------------------------------


def _nutrition_from_doc(doc: Document) -> Nutrition:
    return Nutrition(**doc)


def _meal_to_doc(meal: SlotMeal) -> Document:
    return {
        "meal_id": meal.meal_id,
        "name": meal.name,
        "category": meal.category.value,
        "nutrition": meal.nutrition.to_dict(),
        "pricing": {
            "price": _money(meal.pricing.price),
            "chef_earnings": _money(meal.pricing.chef_earnings),
            "platform_fee": _money(meal.pricing.platform_fee),
        },
        "image_url": meal.image_url,
        "dietary_tags": list(meal.dietary_tags),
        "allergens": list(meal.allergens),
        "preparation_time": meal.preparation_time,
        "complexity": meal.complexity,
    }


def _meal_from_doc(doc: Document) -> SlotMeal:
    pricing = doc["pricing"]
    return SlotMeal(
        meal_id=doc["meal_id"],
        name=doc["name"],
        category=MealCategory(doc["category"]),
        nutrition=_nutrition_from_doc(doc["nutrition"]),
        pricing=MealPricing(
            price=Decimal(pricing["price"]),
            chef_earnings=Decimal(pricing["chef_earnings"]),
            platform_fee=Decimal(pricing["platform_fee"]),
        ),
        image_url=doc.get("image_url"),
        dietary_tags=tuple(doc.get("dietary_tags", [])),
        allergens=tuple(doc.get("allergens", [])),
        preparation_time=doc.get("preparation_time"),
        complexity=doc.get("complexity"),
    )


def _pairs(values: tuple[tuple[str, int], ...]) -> list[list[Any]]:
    return [[key, count] for key, count in values]


def _unpairs(values: list[list[Any]]) -> tuple[tuple[str, int], ...]:
    return tuple((key, count) for key, count in values)


def snapshot_to_doc(snapshot: MealPlanSnapshot) -> Document:
    stats = snapshot.stats
    pricing = snapshot.pricing
    discount = pricing.discount
    return {
        "plan_id": snapshot.plan_id,
        "plan_name": snapshot.plan_name,
        "plan_description": snapshot.plan_description,
        "cover_image": snapshot.cover_image,
        "tier": snapshot.tier,
        "target_audience": snapshot.target_audience,
        "features": list(snapshot.features),
        "slots": [
            {
                "week_number": slot.week_number,
                "day_of_week": slot.day_of_week,
                "meal_slot": slot.meal_slot.value,
                "meals": [_meal_to_doc(meal) for meal in slot.meals],
                "scheduled_delivery_date": _d(slot.scheduled_delivery_date),
                "custom_title": slot.custom_title,
                "custom_description": slot.custom_description,
                "notes": slot.notes,
                "delivery_status": slot.delivery_status.value,
                "delivered_at": _dt(slot.delivered_at),
                "timeline_entry_id": slot.timeline_entry_id,
            }
            for slot in snapshot.slots
        ],
        "stats": {
            "total_meals": stats.total_meals,
            "total_meal_slots": stats.total_meal_slots,
            "meals_per_week": stats.meals_per_week,
            "total_days": stats.total_days,
            "days_with_meals": stats.days_with_meals,
            "total_nutrition": stats.total_nutrition.to_dict(),
            "avg_nutrition_per_meal": stats.avg_nutrition_per_meal.to_dict(),
            "avg_nutrition_per_day": stats.avg_nutrition_per_day.to_dict(),
            "meal_type_distribution": _pairs(stats.meal_type_distribution),
            "dietary_distribution": _pairs(stats.dietary_distribution),
            "complexity_distribution": _pairs(stats.complexity_distribution),
        },
        "pricing": {
            "base_plan_price": _money(pricing.base_plan_price),
            "total_meals_cost": _money(pricing.total_meals_cost),
            "frequency_multiplier": _money(pricing.frequency_multiplier),
            "duration_multiplier": _money(pricing.duration_multiplier),
            "subtotal": _money(pricing.subtotal),
            "final_total": _money(pricing.final_total),
            "price_per_meal": _money(pricing.price_per_meal),
            "price_per_week": _money(pricing.price_per_week),
            "total_chef_earnings": _money(pricing.total_chef_earnings),
            "total_platform_fee": _money(pricing.total_platform_fee),
            "discount": (
                {
                    "percent": _money(discount.percent),
                    "amount": _money(discount.amount),
                    "discount_id": discount.discount_id,
                    "reason": discount.reason,
                    "discount_type": discount.discount_type,
                }
                if discount
                else None
            ),
        },
        "allergens_summary": list(snapshot.allergens_summary),
        "snapshot_created_at": _dt(snapshot.snapshot_created_at),
        "last_synced_at": _dt(snapshot.last_synced_at),
    }


def snapshot_from_doc(doc: Document) -> MealPlanSnapshot:
    stats = doc["stats"]
    pricing = doc["pricing"]
    discount = pricing.get("discount")
    return MealPlanSnapshot(
        plan_id=doc["plan_id"],
        plan_name=doc["plan_name"],
        plan_description=doc.get("plan_description"),
        cover_image=doc.get("cover_image"),
        tier=doc.get("tier"),
        target_audience=doc.get("target_audience"),
        features=tuple(doc.get("features", [])),
        slots=[
            SnapshotSlot(
                week_number=slot["week_number"],
                day_of_week=slot["day_of_week"],
                meal_slot=MealCategory(slot["meal_slot"]),
                meals=tuple(_meal_from_doc(meal) for meal in slot["meals"]),
                scheduled_delivery_date=_parse_d(slot["scheduled_delivery_date"]),
                custom_title=slot.get("custom_title"),
                custom_description=slot.get("custom_description"),
                notes=slot.get("notes"),
                delivery_status=SlotDeliveryStatus(slot["delivery_status"]),
                delivered_at=_parse_dt(slot.get("delivered_at")),
                timeline_entry_id=slot.get("timeline_entry_id"),
            )
            for slot in doc["slots"]
        ],
        stats=SnapshotStats(
            total_meals=stats["total_meals"],
            total_meal_slots=stats["total_meal_slots"],
            meals_per_week=stats["meals_per_week"],
            total_days=stats["total_days"],
            days_with_meals=stats["days_with_meals"],
            total_nutrition=_nutrition_from_doc(stats["total_nutrition"]),
            avg_nutrition_per_meal=_nutrition_from_doc(stats["avg_nutrition_per_meal"]),
            avg_nutrition_per_day=_nutrition_from_doc(stats["avg_nutrition_per_day"]),
            meal_type_distribution=_unpairs(stats.get("meal_type_distribution", [])),
            dietary_distribution=_unpairs(stats.get("dietary_distribution", [])),
            complexity_distribution=_unpairs(stats.get("complexity_distribution", [])),
        ),
        pricing=SnapshotPricing(
            base_plan_price=Decimal(pricing["base_plan_price"]),
            total_meals_cost=Decimal(pricing["total_meals_cost"]),
            frequency_multiplier=Decimal(pricing["frequency_multiplier"]),
            duration_multiplier=Decimal(pricing["duration_multiplier"]),
            subtotal=Decimal(pricing["subtotal"]),
            final_total=Decimal(pricing["final_total"]),
            price_per_meal=Decimal(pricing["price_per_meal"]),
            price_per_week=Decimal(pricing["price_per_week"]),
            total_chef_earnings=Decimal(pricing["total_chef_earnings"]),
            total_platform_fee=Decimal(pricing["total_platform_fee"]),
            discount=(
                DiscountApplied(
                    percent=Decimal(discount["percent"]),
                    amount=Decimal(discount["amount"]),
                    discount_id=discount.get("discount_id"),
                    reason=discount.get("reason"),
                    discount_type=discount.get("discount_type", "promo"),
                )
                if discount
                else None
            ),
        ),
        allergens_summary=tuple(doc.get("allergens_summary", [])),
        snapshot_created_at=_parse_dt(doc["snapshot_created_at"]),
        last_synced_at=_parse_dt(doc.get("last_synced_at")),
    )


# ----------------------------------------------------------------------
# Subscription
# ----------------------------------------------------------------------


def _compile_request_to_doc(request: CompileRequest) -> Document:
    inputs = request.pricing_inputs
    discount = request.discount
    return {
        "plan_id": request.plan_id,
        "owner_id": request.owner_id,
        "start_date": _d(request.start_date),
        "end_date": _d(request.end_date),
        "selected_meal_categories": [c.value for c in request.selected_meal_categories],
        "duration_weeks": request.duration_weeks,
        "pricing_inputs": {
            "frequency_multiplier": _money(inputs.frequency_multiplier),
            "duration_multiplier": _money(inputs.duration_multiplier),
            "base_plan_price": _money(inputs.base_plan_price),
        },
        "discount": (
            {
                "percent": _money(discount.percent),
                "discount_id": discount.discount_id,
                "reason": discount.reason,
                "discount_type": discount.discount_type,
            }
            if discount
            else None
        ),
    }


def _compile_request_from_doc(doc: Document) -> CompileRequest:
    inputs = doc["pricing_inputs"]
    discount = doc.get("discount")
    return CompileRequest(
        plan_id=doc["plan_id"],
        owner_id=doc["owner_id"],
        start_date=_parse_d(doc["start_date"]),
        end_date=_parse_d(doc["end_date"]),
        selected_meal_categories=tuple(
            MealCategory(c) for c in doc["selected_meal_categories"]
        ),
        duration_weeks=doc["duration_weeks"],
        pricing_inputs=PricingInputs(
            frequency_multiplier=Decimal(inputs["frequency_multiplier"]),
            duration_multiplier=Decimal(inputs["duration_multiplier"]),
            base_plan_price=_parse_money(inputs.get("base_plan_price")),
        ),
        discount=(
            Discount(
                percent=Decimal(discount["percent"]),
                discount_id=discount.get("discount_id"),
                reason=discount.get("reason"),
                discount_type=discount.get("discount_type", "promo"),
            )
            if discount
            else None
        ),
    )


def subscription_to_doc(subscription: Subscription) -> Document:
    schedule = subscription.delivery_schedule
    nxt = subscription.next_scheduled_delivery
    last = subscription.last_delivered
    return {
        "_id": subscription.id,
        "subscription_id": subscription.id,
        "customer_id": subscription.customer_id,
        "plan_id": subscription.plan_id,
        "start_date": _d(subscription.start_date),
        "end_date": _d(subscription.end_date),
        "duration_weeks": subscription.duration_weeks,
        "selected_meal_categories": [c.value for c in subscription.selected_meal_categories],
        "delivery_schedule": {
            "days_of_week": list(schedule.days_of_week),
            "time_slot": schedule.time_slot.value,
            "custom_window": schedule.custom_window,
        },
        "state": state_to_doc(subscription.state),
        "status": subscription.status.value,
        "cursor": cursor_to_doc(subscription.cursor),
        "last_delivered": (
            {"cursor": cursor_to_doc(last.cursor), "delivered_at": _dt(last.delivered_at)}
            if last
            else None
        ),
        "next_scheduled_delivery": (
            {"date": _d(nxt.date), "time_window": nxt.time_window} if nxt else None
        ),
        "skipped_days": [
            {
                "date": _d(skipped.date),
                "reason": skipped.reason,
                "skipped_by": skipped.skipped_by,
                "skipped_at": _dt(skipped.skipped_at),
            }
            for skipped in subscription.skipped_days
        ],
        "delivered_entry_ids": list(subscription.delivered_entry_ids),
        "metrics": {
            "delivered_days": subscription.metrics.delivered_days,
            "delivered_meals": subscription.metrics.delivered_meals,
            "skipped_days": subscription.metrics.skipped_days,
        },
        "snapshot": snapshot_to_doc(subscription.snapshot) if subscription.snapshot else None,
        "compile_request": (
            _compile_request_to_doc(subscription.compile_request)
            if subscription.compile_request
            else None
        ),
        "artifacts": {
            "snapshot": subscription.artifacts.snapshot.value,
            "delegation": subscription.artifacts.delegation.value,
        },
        "version": subscription.version,
        "created_at": _dt(subscription.created_at),
        "updated_at": _dt(subscription.updated_at),
    }


def subscription_from_doc(doc: Document) -> Subscription:
    schedule = doc["delivery_schedule"]
    last = doc.get("last_delivered")
    nxt = doc.get("next_scheduled_delivery")
    metrics = doc.get("metrics", {})
    artifacts = doc.get("artifacts", {})
    return Subscription(
        subscription_id=SubscriptionId.from_string(doc["subscription_id"]),
        customer_id=doc["customer_id"],
        plan_id=doc["plan_id"],
        start_date=_parse_d(doc["start_date"]),
        end_date=_parse_d(doc["end_date"]),
        duration_weeks=doc["duration_weeks"],
        selected_meal_categories=tuple(
            MealCategory(c) for c in doc["selected_meal_categories"]
        ),
        delivery_schedule=DeliverySchedule(
            days_of_week=tuple(schedule["days_of_week"]),
            time_slot=TimeSlot(schedule["time_slot"]),
            custom_window=schedule.get("custom_window"),
        ),
        state=state_from_doc(doc["state"]),
        cursor=cursor_from_doc(doc["cursor"]),
        last_delivered=(
            DeliveredMarker(
                cursor=cursor_from_doc(last["cursor"]),
                delivered_at=_parse_dt(last["delivered_at"]),
            )
            if last
            else None
        ),
        next_scheduled_delivery=(
            NextDelivery(date=_parse_d(nxt["date"]), time_window=nxt["time_window"])
            if nxt
            else None
        ),
        skipped_days=[
            SkippedDay(
                date=_parse_d(skipped["date"]),
                reason=skipped["reason"],
                skipped_by=skipped["skipped_by"],
                skipped_at=_parse_dt(skipped["skipped_at"]),
            )
            for skipped in doc.get("skipped_days", [])
        ],
        delivered_entry_ids=list(doc.get("delivered_entry_ids", [])),
        metrics=SubscriptionMetrics(**metrics),
        snapshot=snapshot_from_doc(doc["snapshot"]) if doc.get("snapshot") else None,
        compile_request=(
            _compile_request_from_doc(doc["compile_request"])
            if doc.get("compile_request")
            else None
        ),
        artifacts=ArtifactStatus(
            snapshot=ArtifactState(artifacts.get("snapshot", "complete")),
            delegation=ArtifactState(artifacts.get("delegation", "complete")),
        ),
        version=doc.get("version", 0),
        created_at=_parse_dt(doc["created_at"]),
        updated_at=_parse_dt(doc["updated_at"]),
    )


# ----------------------------------------------------------------------
# Delegation
# ----------------------------------------------------------------------


def delegation_to_doc(delegation: Delegation) -> Document:
    return {
        "_id": delegation.subscription_id,
        "delegation_id": delegation.delegation_id,
        "subscription_id": delegation.subscription_id,
        "chef_id": delegation.chef_id,
        "driver_id": delegation.driver_id,
        "timeline": [
            {
                "timeline_entry_id": entry.timeline_entry_id,
                "date": _d(entry.date),
                "status": entry.status.value,
                "slot_count": entry.slot_count,
                "chef_completed_at": _dt(entry.chef_completed_at),
                "delivery_completed_at": _dt(entry.delivery_completed_at),
            }
            for entry in delegation.timeline
        ],
        "timeline_entry_ids": [entry.timeline_entry_id for entry in delegation.timeline],
        "version": delegation.version,
        "created_at": _dt(delegation.created_at),
        "updated_at": _dt(delegation.updated_at),
    }


def delegation_from_doc(doc: Document) -> Delegation:
    return Delegation(
        delegation_id=doc["delegation_id"],
        subscription_id=doc["subscription_id"],
        chef_id=doc.get("chef_id"),
        driver_id=doc.get("driver_id"),
        timeline=[
            TimelineEntry(
                timeline_entry_id=entry["timeline_entry_id"],
                date=_parse_d(entry["date"]),
                status=TimelineStatus(entry["status"]),
                slot_count=entry.get("slot_count", 0),
                chef_completed_at=_parse_dt(entry.get("chef_completed_at")),
                delivery_completed_at=_parse_dt(entry.get("delivery_completed_at")),
            )
            for entry in doc["timeline"]
        ],
        version=doc.get("version", 0),
        created_at=_parse_dt(doc["created_at"]),
        updated_at=_parse_dt(doc["updated_at"]),
    )
