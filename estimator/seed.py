"""Demo data seeding.

Creates the demo admin and company head accounts and, when no pricing
revision exists yet, activates the built-in default pricing configuration
as version 1. Safe to run repeatedly.

Usage:
    estimator-seed
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy import select

from estimator.config.settings import Settings, settings
from estimator.config_store import ConfigKind, ConfigRevisionStore
from estimator.core.logger import setup_logger
from estimator.core.password import hash_password
from estimator.core.permissions import Actor, Role
from estimator.db.models import User
from estimator.db.session import Database
from estimator.pricing.data import DEFAULT_PRICING_CONFIG

SEED_ACTOR_ID = "system-seed"


@dataclass
class SeedResult:
    users_created: list[str] = field(default_factory=list)
    pricing_version: int | None = None

    def to_body(self) -> dict:
        return {"usersCreated": self.users_created, "pricingVersion": self.pricing_version}


def _ensure_user(database: Database, *, email: str, password: str, name: str, role: Role) -> bool:
    email = email.lower().strip()
    with database.session() as session:
        existing = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if existing is not None:
            logger.debug(f"[SEED] User already exists email={email}")
            return False
        session.add(User(email=email, name=name, password_hash=hash_password(password), role=role.value))
    logger.info(f"[SEED] Created {role.value} user email={email}")
    return True


def seed_demo_data(database: Database, store: ConfigRevisionStore, config: Settings = settings) -> SeedResult:
    result = SeedResult()

    demo_users = [
        (config.seed_admin_email, config.seed_admin_password, "Demo Admin", Role.admin),
        (config.seed_head_email, config.seed_head_password, "Demo Company Head", Role.company_head),
    ]
    for email, password, name, role in demo_users:
        if _ensure_user(database, email=email, password=password, name=name, role=role):
            result.users_created.append(email.lower().strip())

    if store.find_active(ConfigKind.pricing) is None and not store.history(ConfigKind.pricing, limit=1):
        revision = store.propose(ConfigKind.pricing, DEFAULT_PRICING_CONFIG, Actor(SEED_ACTOR_ID, Role.admin))
        result.pricing_version = revision.version
        logger.info(f"[SEED] Activated default pricing configuration version={revision.version}")
    else:
        logger.debug("[SEED] Pricing configuration already present, skipping")

    return result


def main() -> None:
    setup_logger(level=settings.log_level, log_file=settings.log_file)
    database = Database(settings.database_url)
    try:
        database.create_all()
        store = ConfigRevisionStore(database)
        store.ensure_heads()
        result = seed_demo_data(database, store)
        logger.info(f"[SEED] Done: users_created={result.users_created} pricing_version={result.pricing_version}")
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
