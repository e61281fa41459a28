"""Tests for application service: apply, duplicate handling, accept/reject races."""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from billboard.core.deps import get_db
from billboard.core.rbac import require_advertiser, require_business
from billboard.main import app
from billboard.services.application import (
    create_application,
    get_application_for_business,
    transition_application,
)
from billboard.services.application_state_machine import InvalidTransitionError
from billboard.services.visibility import VisibilityFilter
from tests.factories import (
    make_advertiser,
    make_application,
    make_business,
    make_campaign,
    mock_db,
    mock_db_scalars,
)


class TestCreateApplication:
    @pytest.mark.asyncio
    @patch("billboard.services.application.notify_application_received", new_callable=AsyncMock)
    async def test_creates_pending_application(self, mock_notify):
        db = mock_db(scalar_result=make_campaign(id=10))
        advertiser = make_advertiser(id=2)

        application = await create_application(db, advertiser, 10, "Pick me")

        assert application.campaign_id == 10
        assert application.advertiser_id == 2
        assert application.status == "pending"
        assert application.message == "Pick me"
        db.add.assert_called_once()
        db.commit.assert_awaited_once()
        mock_notify.assert_awaited_once_with(db, application)

    @pytest.mark.asyncio
    async def test_inactive_or_missing_campaign_404(self):
        db = mock_db(scalar_result=None)

        with pytest.raises(HTTPException) as exc_info:
            await create_application(db, make_advertiser(), 10)
        assert exc_info.value.status_code == 404
        db.add.assert_not_called()

    @pytest.mark.asyncio
    @patch("billboard.services.application.notify_application_received", new_callable=AsyncMock)
    async def test_duplicate_maps_to_conflict(self, mock_notify):
        db = mock_db(scalar_result=make_campaign(id=10))
        db.commit = AsyncMock(
            side_effect=IntegrityError("INSERT INTO applications", {}, Exception("duplicate key"))
        )

        with pytest.raises(HTTPException) as exc_info:
            await create_application(db, make_advertiser(), 10)
        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == "You have already applied to this campaign"
        db.rollback.assert_awaited_once()
        mock_notify.assert_not_awaited()

    @pytest.mark.asyncio
    @patch("billboard.services.notification.send_email", new_callable=AsyncMock)
    @patch("billboard.services.notification._load_application_parties", new_callable=AsyncMock)
    async def test_email_failure_does_not_undo_application(self, mock_parties, mock_send):
        campaign = make_campaign(id=10)
        mock_parties.return_value = (campaign, make_business(id=1), make_advertiser(id=2))
        mock_send.side_effect = httpx.ConnectError("mail provider down")
        db = mock_db(scalar_result=campaign)

        application = await create_application(db, make_advertiser(id=2), 10)

        assert application.status == "pending"
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()
        mock_send.assert_awaited_once()


class TestGetApplicationForBusiness:
    @pytest.mark.asyncio
    async def test_not_owned_404(self):
        db = mock_db(scalar_result=None)

        with pytest.raises(HTTPException) as exc_info:
            await get_application_for_business(db, 100, 1)
        assert exc_info.value.status_code == 404


class TestTransitionApplication:
    @pytest.mark.asyncio
    @patch("billboard.services.application.notify_application_status", new_callable=AsyncMock)
    @patch("billboard.services.application.log_audit", new_callable=AsyncMock)
    async def test_accept_uses_conditional_update(self, mock_audit, mock_notify):
        application = make_application(id=100, status="pending")
        db = mock_db(scalar_result=application)
        db.execute.return_value.rowcount = 1

        await transition_application(db, 100, "accept", make_business(id=1))

        update_stmt = db.execute.await_args_list[1].args[0]
        where = str(update_stmt.whereclause)
        assert "applications.id" in where
        assert "applications.status" in where
        assert update_stmt.compile().params["status"] == "accepted"
        db.commit.assert_awaited_once()
        mock_audit.assert_awaited_once()
        mock_notify.assert_awaited_once_with(db, application)

    @pytest.mark.asyncio
    @patch("billboard.services.application.notify_application_status", new_callable=AsyncMock)
    @patch("billboard.services.application.log_audit", new_callable=AsyncMock)
    async def test_lost_race_raises_and_does_not_notify(self, mock_audit, mock_notify):
        """Another decision landed between the read and the write."""
        db = mock_db(scalar_result=make_application(status="pending"))
        db.execute.return_value.rowcount = 0

        with pytest.raises(InvalidTransitionError):
            await transition_application(db, 100, "reject", make_business(id=1))
        db.commit.assert_not_awaited()
        db.rollback.assert_awaited_once()
        mock_notify.assert_not_awaited()
        mock_audit.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["accepted", "rejected"])
    async def test_decided_application_rejected_before_write(self, status):
        db = mock_db(scalar_result=make_application(status=status))

        with pytest.raises(InvalidTransitionError):
            await transition_application(db, 100, "accept", make_business(id=1))
        assert db.execute.await_count == 1
        db.commit.assert_not_awaited()


class TestApplicationApi:
    @pytest.mark.asyncio
    @patch("billboard.api.advertiser.log_audit", new_callable=AsyncMock)
    @patch("billboard.api.advertiser.application_svc.create_application", new_callable=AsyncMock)
    async def test_apply(self, mock_create, mock_audit, signed_in_client):
        mock_create.return_value = make_application(id=7, campaign_id=10)
        app.dependency_overrides[require_advertiser] = lambda: make_advertiser(id=2)
        app.dependency_overrides[get_db] = lambda: mock_db()

        resp = await signed_in_client.post("/advertiser/campaigns/10/apply", json={"message": ""})
        assert resp.status_code == 201
        assert resp.json()["status"] == "pending"
        assert mock_create.await_args.args[2:] == (10, None)

    @pytest.mark.asyncio
    @patch("billboard.api.advertiser.application_svc.create_application", new_callable=AsyncMock)
    async def test_apply_survives_audit_failure(self, mock_create, signed_in_client):
        mock_create.return_value = make_application(id=7, campaign_id=10)
        db = mock_db()
        db.add.side_effect = RuntimeError("audit table missing")
        app.dependency_overrides[require_advertiser] = lambda: make_advertiser(id=2)
        app.dependency_overrides[get_db] = lambda: db

        resp = await signed_in_client.post("/advertiser/campaigns/10/apply", json={"message": "Hi"})
        assert resp.status_code == 201
        assert resp.json()["id"] == 7
        assert resp.json()["status"] == "pending"
        db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_apply_message_too_long(self, signed_in_client):
        app.dependency_overrides[require_advertiser] = lambda: make_advertiser(id=2)
        app.dependency_overrides[get_db] = lambda: mock_db()

        resp = await signed_in_client.post("/advertiser/campaigns/10/apply", json={"message": "x" * 1001})
        assert resp.status_code == 422
        assert resp.json() == {"detail": "Message must be less than 1000 characters"}

    @pytest.mark.asyncio
    @patch("billboard.api.advertiser.campaign_svc.browse_campaigns", new_callable=AsyncMock)
    async def test_browse_passes_raw_filters(self, mock_browse, signed_in_client):
        mock_browse.return_value = [make_campaign(id=1, business_id=9)]
        app.dependency_overrides[require_advertiser] = lambda: make_advertiser(id=2)
        app.dependency_overrides[get_db] = lambda: mock_db()

        resp = await signed_in_client.get(
            "/advertiser/campaigns",
            params={"location": "austin", "min_comp": "10", "max_comp": "abc", "age_range": "18-25"},
        )
        assert resp.status_code == 200
        filters = mock_browse.await_args.args[2]
        assert filters == VisibilityFilter(location="austin", min_comp="10", max_comp="abc", age_range="18-25")

    @pytest.mark.asyncio
    async def test_browse_compensation_bounds(self, signed_in_client):
        rows = [
            make_campaign(id=1, business_id=9, compensation_amount=Decimal("75")),
            make_campaign(id=2, business_id=9, compensation_amount=Decimal("30")),
        ]
        app.dependency_overrides[require_advertiser] = lambda: make_advertiser(id=2)
        app.dependency_overrides[get_db] = lambda: mock_db_scalars(rows)

        resp = await signed_in_client.get("/advertiser/campaigns", params={"min_comp": "10", "max_comp": "50"})
        assert resp.status_code == 200
        assert [c["id"] for c in resp.json()] == [2]

    @pytest.mark.asyncio
    @patch("billboard.api.business.application_svc.transition_application", new_callable=AsyncMock)
    async def test_transition_conflict_is_409(self, mock_transition, signed_in_client):
        mock_transition.side_effect = InvalidTransitionError("accepted", "reject", "business")
        app.dependency_overrides[require_business] = lambda: make_business(id=1)
        app.dependency_overrides[get_db] = lambda: mock_db()

        resp = await signed_in_client.post("/business/applications/100/transition", json={"action": "reject"})
        assert resp.status_code == 409
        assert resp.json() == {"detail": "Invalid transition: accepted + reject by business"}

    @pytest.mark.asyncio
    async def test_transition_unknown_action_422(self, signed_in_client):
        app.dependency_overrides[require_business] = lambda: make_business(id=1)
        app.dependency_overrides[get_db] = lambda: mock_db()

        resp = await signed_in_client.post("/business/applications/100/transition", json={"action": "withdraw"})
        assert resp.status_code == 422
