"""Subscription model mirrored from Stripe."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from minimind.db.base import Base


class Subscription(Base):
    __tablename__ = "subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        "userId",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    stripe_customer_id: Mapped[Optional[str]] = mapped_column(
        "stripeCustomerId",
        String(255),
        nullable=True,
    )
    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(
        "stripeSubscriptionId",
        String(255),
        nullable=True,
        index=True,
    )
    plan: Mapped[str] = mapped_column(String(20), default="free", nullable=False)
    status: Mapped[str] = mapped_column(
        String(30),
        default="active",
        nullable=False,
    )  # active, past_due, canceled, trialing
    current_period_end: Mapped[Optional[datetime]] = mapped_column(
        "currentPeriodEnd",
        DateTime(timezone=True),
        nullable=True,
    )
