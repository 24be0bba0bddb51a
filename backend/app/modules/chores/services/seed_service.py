from __future__ import annotations

import logging
import os
import secrets

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.modules.auth.models import ROLE_CHILD, ROLE_PARENT, User
from app.modules.auth.service import HashPassword
from app.modules.chores.models import FREQUENCY_DAILY, FREQUENCY_WEEKLY, Achievement, Chore, Reward

logger = logging.getLogger("app.bootstrap")

DEFAULT_FAMILY_ID = 1
DEFAULT_CHILD_POINTS = 50

DEFAULT_CHORES = [
    ("Make the bed", 5, FREQUENCY_DAILY),
    ("Put away toys", 10, FREQUENCY_DAILY),
    ("Help set the table", 15, FREQUENCY_WEEKLY),
    ("Water the plants", 10, FREQUENCY_WEEKLY),
]

DEFAULT_REWARDS = [
    ("Extra Screen Time", 30),
    ("Ice Cream Treat", 40),
    ("Trip to the Park", 50),
    ("New Toy", 100),
]

DEFAULT_ACHIEVEMENTS = [
    ("First Chore", "ri-rocket-line", True),
    ("1 Week Streak", "ri-calendar-check-line", True),
    ("10 Chores", "ri-award-line", False),
]


def _BootstrapPassword(name: str, username: str) -> str:
    value = os.getenv(name, "").strip()
    if value:
        return value
    generated = secrets.token_urlsafe(9)
    logger.warning("%s not set; generated password for %s: %s", name, username, generated)
    return generated


def SeedDefaultData(db: Session) -> bool:
    """Create the starter family in a single transaction.

    Returns False when any user already exists. A failure part way through
    rolls everything back, so the next startup tries again from scratch.
    """
    if db.query(User.Id).first() is not None:
        return False

    try:
        parent = User(
            Username="parent",
            PasswordHash=HashPassword(_BootstrapPassword("BOOTSTRAP_PARENT_PASSWORD", "parent")),
            Role=ROLE_PARENT,
            Name="Parent",
            FamilyId=DEFAULT_FAMILY_ID,
            Points=0,
            FailedLoginCount=0,
        )
        db.add(parent)
        db.flush()
        child = User(
            Username="child",
            PasswordHash=HashPassword(_BootstrapPassword("BOOTSTRAP_CHILD_PASSWORD", "child")),
            Role=ROLE_CHILD,
            Name="Child",
            FamilyId=DEFAULT_FAMILY_ID,
            ParentId=parent.Id,
            Points=DEFAULT_CHILD_POINTS,
            FailedLoginCount=0,
        )
        db.add(child)
        db.flush()

        db.add_all(
            Chore(Title=title, Points=points, Frequency=frequency, UserId=child.Id)
            for title, points, frequency in DEFAULT_CHORES
        )
        db.add_all(
            Reward(Title=title, Points=points, UserId=child.Id, Claimed=False)
            for title, points in DEFAULT_REWARDS
        )
        db.add_all(
            Achievement(Title=title, Icon=icon, UserId=child.Id, Unlocked=unlocked)
            for title, icon, unlocked in DEFAULT_ACHIEVEMENTS
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("default data seeding failed, rolled back")
        raise

    logger.info(
        "seeded family_id=%s parent_id=%s child_id=%s chores=%s rewards=%s achievements=%s",
        DEFAULT_FAMILY_ID,
        parent.Id,
        child.Id,
        len(DEFAULT_CHORES),
        len(DEFAULT_REWARDS),
        len(DEFAULT_ACHIEVEMENTS),
    )
    return True
