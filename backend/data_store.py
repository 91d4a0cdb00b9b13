from __future__ import annotations

import csv
import json
import logging
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.location_model import Location
from models.rate_submission_model import ProjectType, RateSubmission, Seniority
from models.skill_model import Skill

SEED_DIR = Path(__file__).parent / "seeds"
SKILLS_CSV = SEED_DIR / "skills.csv"
LOCATIONS_JSON = SEED_DIR / "locations.json"

logger = logging.getLogger(__name__)

DEMO_SKILLS: List[str] = ["React", "Node.js", "UI/UX Design", "Python", "DevOps"]
DEMO_WINDOW_DAYS = 180


def _load_skills_seed() -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    with SKILLS_CSV.open("r", encoding="utf-8") as fp:
        reader = csv.DictReader(fp)
        for row in reader:
            rows.append({"name": row["skill"].strip(), "category": row["group"].strip()})
    return rows


def _load_locations_seed() -> list[dict[str, Any]]:
    payload = json.loads(LOCATIONS_JSON.read_text(encoding="utf-8"))
    return list(payload["locations"])


SKILL_SEED_ROWS = _load_skills_seed()
LOCATION_SEED_ROWS = _load_locations_seed()


def _tier_base_rate(tier: str) -> float:
    return {
        "high": 80.0,
        "mid": 40.0,
        "low": 15.0,
    }.get(tier, 40.0)


def _seniority_multiplier(seniority: Seniority) -> float:
    return {
        Seniority.JUNIOR: 0.6,
        Seniority.MID: 1.0,
        Seniority.SENIOR: 1.5,
        Seniority.EXPERT: 2.0,
    }[seniority]


def _seniority_years(seniority: Seniority) -> int:
    return {
        Seniority.JUNIOR: 1,
        Seniority.MID: 4,
        Seniority.SENIOR: 8,
        Seniority.EXPERT: 12,
    }[seniority]


def get_skill_seed() -> list[dict[str, str]]:
    return SKILL_SEED_ROWS


def get_location_seed() -> list[dict[str, Any]]:
    return LOCATION_SEED_ROWS


def seed_reference_data(db: Session) -> Dict[str, int]:
    """Insert seed skills and locations that are not present yet; safe to rerun."""
    existing_skills = {name.casefold() for name in db.execute(select(Skill.name)).scalars()}
    existing_locations = {
        (city.casefold(), country.casefold()) for city, country in db.execute(select(Location.city, Location.country))
    }

    new_skills = [
        Skill(name=row["name"], category=row["category"])
        for row in SKILL_SEED_ROWS
        if row["name"].casefold() not in existing_skills
    ]
    new_locations = [
        Location(city=row["city"], country=row["country"])
        for row in LOCATION_SEED_ROWS
        if (row["city"].casefold(), row["country"].casefold()) not in existing_locations
    ]

    db.add_all(new_skills + new_locations)
    db.commit()
    logger.info("reference_data_seeded | skills=%s | locations=%s", len(new_skills), len(new_locations))
    return {"skills": len(new_skills), "locations": len(new_locations)}


def seed_demo_submissions(db: Session, count: int = 200, seed: int = 2026, now: datetime | None = None) -> int:
    """Plant approved demo submissions with tiered, seniority-scaled rates over the last six months."""
    skills = {skill.name: skill for skill in db.execute(select(Skill)).scalars()}
    locations = {(location.city, location.country): location for location in db.execute(select(Location)).scalars()}
    tiers = {(row["city"], row["country"]): row.get("tier", "mid") for row in LOCATION_SEED_ROWS}

    demo_skills = [skills[name] for name in DEMO_SKILLS if name in skills]
    demo_locations = [location for key, location in locations.items() if key in tiers]
    if not demo_skills or not demo_locations:
        logger.warning("demo_seed_skipped | reason=reference_data_missing")
        return 0

    rng = random.Random(seed)
    current = now or datetime.now(timezone.utc)
    seniorities = list(Seniority)
    entries: list[RateSubmission] = []

    for _ in range(count):
        skill = rng.choice(demo_skills)
        location = rng.choice(demo_locations)
        seniority = rng.choice(seniorities)
        tier = tiers[(location.city, location.country)]

        variance = rng.uniform(-0.2, 0.2)
        rate = round(_tier_base_rate(tier) * _seniority_multiplier(seniority) * (1 + variance))
        created_at = current - timedelta(seconds=rng.uniform(0, DEMO_WINDOW_DAYS * 86400))

        entries.append(
            RateSubmission(
                skill_id=skill.id,
                location_id=location.id,
                hourly_rate=rate,
                years_experience=_seniority_years(seniority),
                seniority_level=seniority.value,
                project_type=ProjectType.HOURLY.value,
                is_approved=True,
                is_verified=True,
                approved_at=created_at,
                fraud_reasons=[],
                created_at=created_at,
            )
        )

    db.add_all(entries)
    db.commit()
    logger.info("demo_submissions_seeded | count=%s", len(entries))
    return len(entries)
