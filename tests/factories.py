"""Unsaved model instances and mocked sessions shared by the test modules."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from billboard.models.application import Application
from billboard.models.campaign import Campaign
from billboard.models.user_profile import UserProfile


def _stamp(obj, id: int):
    now = datetime.now(timezone.utc)
    object.__setattr__(obj, "id", id)
    object.__setattr__(obj, "created_at", now)
    object.__setattr__(obj, "updated_at", now)
    return obj


def make_business(id: int = 1, **overrides) -> UserProfile:
    fields = dict(
        auth_subject=f"user_business_{id}",
        email=f"biz{id}@example.com",
        full_name="Bea Owner",
        user_type="business",
        company_name="Corner Coffee",
    )
    fields.update(overrides)
    return _stamp(UserProfile(**fields), id)


def make_advertiser(id: int = 2, **overrides) -> UserProfile:
    fields = dict(
        auth_subject=f"user_advertiser_{id}",
        email=f"ad{id}@example.com",
        full_name="Alex Walker",
        user_type="advertiser",
        city="Austin",
        state="TX",
    )
    fields.update(overrides)
    return _stamp(UserProfile(**fields), id)


def make_campaign(id: int = 10, business_id: int = 1, **overrides) -> Campaign:
    fields = dict(
        business_id=business_id,
        title="Wear our shirt downtown",
        description="Walk around downtown wearing a branded t-shirt.",
        compensation_amount=Decimal("25.00"),
        compensation_type="hourly",
        location="Austin, TX",
        duration_hours=4,
        requirements=None,
        merchandise_type="t-shirt",
        target_demographics={"gender": "any", "age_range": "18-35"},
        status="active",
    )
    fields.update(overrides)
    return _stamp(Campaign(**fields), id)


def make_application(id: int = 100, campaign_id: int = 10, advertiser_id: int = 2, **overrides) -> Application:
    fields = dict(
        campaign_id=campaign_id,
        advertiser_id=advertiser_id,
        status="pending",
        message="I walk downtown every day.",
    )
    fields.update(overrides)
    return _stamp(Application(**fields), id)


def mock_savepoint():
    """Stand-in for ``AsyncSession.begin_nested()``: sync call, async context manager."""
    savepoint = MagicMock()
    savepoint.__aenter__ = AsyncMock(return_value=savepoint)
    savepoint.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=savepoint)


def mock_db(scalar_result=None):
    db = AsyncMock()
    db.add = MagicMock()
    db.begin_nested = mock_savepoint()
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = scalar_result
    db.execute = AsyncMock(return_value=mock_result)
    return db


def mock_db_scalars(items: list):
    db = AsyncMock()
    db.add = MagicMock()
    db.begin_nested = mock_savepoint()
    mock_result = MagicMock()
    mock_scalars = MagicMock()
    mock_scalars.all.return_value = items
    mock_result.scalars.return_value = mock_scalars
    db.execute = AsyncMock(return_value=mock_result)
    return db
