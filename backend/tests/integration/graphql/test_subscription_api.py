"""End-to-end tests for the subscription GraphQL API.

Requests go through the FastAPI app (httpx ASGITransport) backed by the
in-memory repositories and the in-memory catalog seeded in conftest.
Dates are relative to today because the API stamps operations with the
current time.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import pytest
from httpx import AsyncClient, Response

SUBSCRIPTION_FIELDS = """
    subscriptionId
    status
    isActivated
    startDate
    endDate
    currentWeek
    currentDay
    currentMealSlot
    artifactsComplete
    deliveredDays
    skippedDates
    nextDelivery { date timeWindow }
"""

CREATE = (
    """
mutation Create($input: CreateSubscriptionInput!) {
  subscriptions {
    createSubscription(input: $input) {
      __typename
      ... on CreateSubscriptionSuccess {
        artifactsComplete
        subscription {
          %s
          snapshot {
            totalSlots
            allergensSummary
            pricing { finalTotal discount { percent amount } }
            stats { totalMeals daysWithMeals }
          }
        }
      }
      ... on SubscriptionOperationError { code message }
    }
  }
}
"""
    % SUBSCRIPTION_FIELDS
)

TRANSITION_FIELDS = """
      __typename
      ... on TransitionSuccess { applied status message subscription { endDate status } }
      ... on SubscriptionOperationError { code message }
"""


def today() -> Any:
    return datetime.now(timezone.utc).date()


async def gql(
    client: AsyncClient, query: str, variables: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    resp: Response = await client.post(
        "/graphql", json={"query": query, "variables": variables or {}}
    )
    assert resp.status_code == 200
    body: Dict[str, Any] = resp.json()
    assert "errors" not in body, body.get("errors")
    return body["data"]


async def create(client: AsyncClient, **overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "customerId": "customer-api",
        "planId": "plan-balanced",
        "startDate": today().isoformat(),
        "durationWeeks": 2,
        "selectedMealCategories": ["BREAKFAST", "LUNCH", "DINNER"],
    }
    payload.update(overrides)
    data = await gql(client, CREATE, {"input": payload})
    return data["subscriptions"]["createSubscription"]


async def transition(client: AsyncClient, field: str, **arguments: str) -> Dict[str, Any]:
    args = ", ".join(f'{name}: "{value}"' for name, value in arguments.items())
    data = await gql(
        client, "mutation { subscriptions { %s(%s) { %s } } }" % (field, args, TRANSITION_FIELDS)
    )
    return data["subscriptions"][field]


async def complete_delivery(client: AsyncClient, entry_id: str) -> Dict[str, Any]:
    data = await gql(
        client,
        """
        mutation Complete($entry: String!) {
          subscriptions {
            completeDelivery(timelineEntryId: $entry) {
              __typename
              ... on DeliveryCompletedSuccess {
                advanced
                activated
                subscription { status endDate currentDay currentMealSlot deliveredDays }
                currentMeal { weekNumber dayOfWeek mealSlot }
              }
              ... on SubscriptionOperationError { code message }
            }
          }
        }
        """,
        {"entry": entry_id},
    )
    return data["subscriptions"]["completeDelivery"]


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    resp: Response = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestCreateSubscription:
    @pytest.mark.asyncio
    async def test_create_compiles_snapshot(self, client: AsyncClient) -> None:
        result = await create(client)

        assert result["__typename"] == "CreateSubscriptionSuccess"
        assert result["artifactsComplete"] is True
        subscription = result["subscription"]
        assert subscription["status"] == "PENDING_FIRST_DELIVERY"
        assert subscription["isActivated"] is False
        assert subscription["currentMealSlot"] == "BREAKFAST"
        assert subscription["snapshot"]["totalSlots"] == 30
        assert subscription["snapshot"]["stats"]["daysWithMeals"] == 10
        assert subscription["snapshot"]["allergensSummary"] == ["fish", "gluten"]
        assert subscription["nextDelivery"]["date"] == today().isoformat()

    @pytest.mark.asyncio
    async def test_discount_is_applied(self, client: AsyncClient) -> None:
        result = await create(client, discount={"percent": "15", "discountId": "WELCOME"})

        pricing = result["subscription"]["snapshot"]["pricing"]
        assert pricing["discount"]["percent"] in ("15", "15.00")
        assert float(pricing["finalTotal"]) < 345

    @pytest.mark.asyncio
    async def test_unknown_plan(self, client: AsyncClient) -> None:
        result = await create(client, planId="plan-missing")

        assert result["__typename"] == "SubscriptionOperationError"
        assert result["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_category_not_offered(self, client: AsyncClient) -> None:
        result = await create(client, selectedMealCategories=["SNACK"])

        assert result["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_catalog_outage_then_retry(self, client: AsyncClient) -> None:
        import app as app_module

        app_module._catalog_reader.set_available(False)
        result = await create(client)
        app_module._catalog_reader.set_available(True)

        assert result["__typename"] == "CreateSubscriptionSuccess"
        assert result["artifactsComplete"] is False
        assert result["subscription"]["snapshot"] is None

        data = await gql(
            client,
            "mutation { subscriptions { retryIncompleteArtifacts { processed completed } } }",
        )
        assert data["subscriptions"]["retryIncompleteArtifacts"] == {
            "processed": 1,
            "completed": 1,
        }


class TestSubscriptionFlow:
    @pytest.mark.asyncio
    async def test_first_delivery_activates(self, client: AsyncClient) -> None:
        created = (await create(client))["subscription"]
        subscription_id = created["subscriptionId"]

        current = await gql(
            client,
            """
            query Current($id: String!) {
              subscriptions {
                currentMeal(subscriptionId: $id) {
                  weekNumber dayOfWeek mealSlot timelineEntryId meals { mealId name }
                }
              }
            }
            """,
            {"id": subscription_id},
        )
        meal = current["subscriptions"]["currentMeal"]
        assert (meal["weekNumber"], meal["dayOfWeek"], meal["mealSlot"]) == (1, 1, "BREAKFAST")
        assert meal["meals"][0]["mealId"] == "meal-oats"

        result = await complete_delivery(client, meal["timelineEntryId"])

        assert result["activated"] is True
        assert result["subscription"]["status"] == "ACTIVE"
        assert result["subscription"]["deliveredDays"] == 1
        assert result["currentMeal"]["dayOfWeek"] == 2
        assert result["subscription"]["endDate"] >= (today() + timedelta(days=14)).isoformat()

    @pytest.mark.asyncio
    async def test_repeated_delivery_is_noop(self, client: AsyncClient) -> None:
        subscription_id = (await create(client))["subscription"]["subscriptionId"]
        entry_id = f"{subscription_id}-D001"

        await complete_delivery(client, entry_id)
        again = await complete_delivery(client, entry_id)

        assert again["advanced"] is False
        assert again["subscription"]["deliveredDays"] == 1

    @pytest.mark.asyncio
    async def test_pause_resume_cancel(self, client: AsyncClient) -> None:
        subscription_id = (await create(client))["subscription"]["subscriptionId"]

        pending_pause = await transition(
            client, "pauseSubscription", subscriptionId=subscription_id, reason="holiday"
        )
        assert pending_pause["applied"] is False

        await complete_delivery(client, f"{subscription_id}-D001")
        paused = await transition(
            client, "pauseSubscription", subscriptionId=subscription_id, reason="holiday"
        )
        resumed = await transition(client, "resumeSubscription", subscriptionId=subscription_id)
        cancelled = await transition(
            client, "cancelSubscription", subscriptionId=subscription_id, reason="moving"
        )
        again = await transition(client, "cancelSubscription", subscriptionId=subscription_id)

        assert (paused["applied"], paused["status"]) == (True, "PAUSED")
        assert (resumed["applied"], resumed["status"]) == (True, "ACTIVE")
        assert (cancelled["applied"], cancelled["status"]) == (True, "CANCELLED")
        assert again["applied"] is False
        assert again["subscription"]["status"] == "CANCELLED"

    @pytest.mark.asyncio
    async def test_malformed_id(self, client: AsyncClient) -> None:
        result = await transition(
            client, "pauseSubscription", subscriptionId="abc", reason="holiday"
        )

        assert result["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_skip_meal(self, client: AsyncClient) -> None:
        subscription_id = (await create(client))["subscription"]["subscriptionId"]
        skip_date = (today() + timedelta(days=2)).isoformat()
        mutation = """
            mutation Skip($id: String!, $day: Date!) {
              subscriptions {
                skipMeal(subscriptionId: $id, skipDate: $day, reason: "dinner out") {
                  __typename
                  ... on SkipMealSuccess { applied cursorMoved message }
                  ... on SubscriptionOperationError { code message }
                }
              }
            }
        """

        first = await gql(client, mutation, {"id": subscription_id, "day": skip_date})
        second = await gql(client, mutation, {"id": subscription_id, "day": skip_date})

        assert first["subscriptions"]["skipMeal"]["applied"] is True
        assert first["subscriptions"]["skipMeal"]["cursorMoved"] is False
        assert second["subscriptions"]["skipMeal"]["applied"] is False

        data = await gql(
            client,
            """
            query Sub($id: String!) {
              subscriptions { subscription(subscriptionId: $id) { skippedDates } }
            }
            """,
            {"id": subscription_id},
        )
        assert data["subscriptions"]["subscription"]["skippedDates"] == [skip_date]

    @pytest.mark.asyncio
    async def test_timeline(self, client: AsyncClient) -> None:
        subscription_id = (await create(client))["subscription"]["subscriptionId"]

        data = await gql(
            client,
            """
            query Timeline($id: String!) {
              subscriptions {
                timeline(subscriptionId: $id, daysAhead: 3) {
                  date weekNumber dayOfWeek skipped slots { mealSlot }
                }
              }
            }
            """,
            {"id": subscription_id},
        )

        days = data["subscriptions"]["timeline"]
        assert [day["dayOfWeek"] for day in days] == [1, 2, 3, 4]
        assert [slot["mealSlot"] for slot in days[0]["slots"]] == ["BREAKFAST", "LUNCH", "DINNER"]


class TestDelegation:
    @pytest.mark.asyncio
    async def test_assign_and_track(self, client: AsyncClient) -> None:
        subscription_id = (await create(client))["subscription"]["subscriptionId"]

        assigned = await gql(
            client,
            """
            mutation Assign($id: String!) {
              subscriptions {
                assignDelegation(subscriptionId: $id, chefId: "chef-1") {
                  ... on DelegationSuccess { delegation { chefId timeline { timelineEntryId } } }
                }
              }
            }
            """,
            {"id": subscription_id},
        )
        delegation = assigned["subscriptions"]["assignDelegation"]["delegation"]
        assert delegation["chefId"] == "chef-1"
        assert len(delegation["timeline"]) == 10

        updated = await gql(
            client,
            """
            mutation Update($entry: String!) {
              subscriptions {
                updateTimelineStatus(timelineEntryId: $entry, status: READY) {
                  ... on TimelineEntrySuccess { entry { status chefCompletedAt } }
                }
              }
            }
            """,
            {"entry": f"{subscription_id}-D001"},
        )
        entry = updated["subscriptions"]["updateTimelineStatus"]["entry"]
        assert entry["status"] == "READY"
        assert entry["chefCompletedAt"] is not None

    @pytest.mark.asyncio
    async def test_cancelled_delegation_is_frozen(self, client: AsyncClient) -> None:
        subscription_id = (await create(client))["subscription"]["subscriptionId"]
        await transition(
            client, "cancelSubscription", subscriptionId=subscription_id, reason="moving"
        )

        data = await gql(
            client,
            """
            mutation Frozen($id: String!, $entry: String!) {
              subscriptions {
                assignDelegation(subscriptionId: $id, driverId: "driver-1") {
                  ... on SubscriptionOperationError { code }
                }
                updateTimelineStatus(timelineEntryId: $entry, status: PREPARING) {
                  ... on SubscriptionOperationError { code }
                }
              }
            }
            """,
            {"id": subscription_id, "entry": f"{subscription_id}-D001"},
        )

        assert data["subscriptions"]["assignDelegation"]["code"] == "INVALID_TRANSITION"
        assert data["subscriptions"]["updateTimelineStatus"]["code"] == "INVALID_TRANSITION"

    @pytest.mark.asyncio
    async def test_unknown_subscription_reads_are_null(self, client: AsyncClient) -> None:
        data = await gql(
            client,
            """
            {
              subscriptions {
                subscription(subscriptionId: "3f2b8a4e-9d1c-4c7e-8a55-0c2f6a1b9e77") { status }
                delegation(subscriptionId: "3f2b8a4e-9d1c-4c7e-8a55-0c2f6a1b9e77") { chefId }
              }
            }
            """,
        )

        assert data["subscriptions"] == {"subscription": None, "delegation": None}


@pytest.mark.asyncio
async def test_expire_sweep_ignores_pending(client: AsyncClient) -> None:
    await create(client)

    data = await gql(client, "mutation { subscriptions { expireSubscriptions } }")

    assert data["subscriptions"]["expireSubscriptions"] == []
