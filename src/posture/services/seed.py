"""Startup seeding: the bootstrap admin account and optional demo data."""

import logging
import secrets

from sqlalchemy.ext.asyncio import AsyncSession

from posture.auth.passwords import hash_password
from posture.config import settings
from posture.db.base import utcnow
from posture.integrations.normalized import SourceKey
from posture.integrations.records import normalize_record
from posture.repositories.application_repo import ApplicationRepository
from posture.repositories.finding_repo import ScanFindingRepository
from posture.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

DEMO_SERVICES = [
    {
        "name": "Hinge Health Web Portal",
        "labels": ["SCA", "SAST"],
        "tags": ["HITRUST", "SOC 2"],
        "service_owner": "Sarah Chen (Frontend Team Lead)",
        "description": "Main customer-facing web application",
    },
    {
        "name": "Payment Processing API",
        "labels": ["SAST"],
        "tags": ["PCI DSS", "SOC 2"],
        "service_owner": "Michael Rodriguez (Backend Team Lead)",
        "description": "Payment processing API for subscription and billing management",
    },
    {
        "name": "User Authentication Service",
        "labels": ["SAST", "DAST"],
        "tags": ["HITRUST", "SOC 2"],
        "has_alert": True,
        "service_owner": "Jessica Park (Security Team Lead)",
        "description": "Centralized authentication and authorization service",
    },
    {
        "name": "Data Analytics Platform",
        "labels": ["SCA", "SAST", "DAST"],
        "tags": ["HIPAA", "SOC 2"],
        "service_owner": "David Kim (Data Engineering Lead)",
        "description": "Analytics platform processing patient health data and outcomes",
    },
    {
        "name": "Notification Service",
        "labels": ["SCA", "SAST"],
        "tags": ["SOC 2"],
        "service_owner": "Alex Thompson (Platform Team)",
        "description": "Email, SMS and push notification delivery",
    },
    {
        "name": "File Storage Service",
        "labels": ["SCA", "DAST"],
        "tags": ["HIPAA", "SOC 2"],
        "service_owner": "Marcus Johnson (Infrastructure Team)",
        "description": "Storage and retrieval of patient documents and media",
    },
    {
        "name": "Exercise Video Platform",
        "labels": ["SCA", "SAST", "DAST"],
        "tags": ["HITRUST", "SOC 2"],
        "has_alert": True,
        "service_owner": "Rachel Green (Content Team Lead)",
        "description": "Video streaming for exercise content and patient education",
    },
    {
        "name": "Telemedicine Platform",
        "labels": ["SCA", "SAST", "DAST"],
        "tags": ["HIPAA", "HITRUST", "SOC 2"],
        "has_alert": True,
        "service_owner": "Dr. Lisa Anderson (Clinical Technology)",
        "description": "Video consultation platform for patient-provider interactions",
    },
]

# (service, scan date, critical, high, medium, low)
DEMO_FINDINGS: dict[SourceKey, list[tuple]] = {
    SourceKey.MEND_SCA: [
        ("Hinge Health Web Portal", "2025-07-16", 56, 192, 95, 29),
        ("Data Analytics Platform", "2025-07-16", 8, 45, 156, 75),
        ("Notification Service", "2025-07-16", 2, 18, 45, 24),
        ("File Storage Service", "2025-07-15", 5, 28, 67, 27),
        ("Exercise Video Platform", "2025-07-16", 22, 89, 134, 67),
        ("Telemedicine Platform", "2025-07-16", 34, 128, 189, 94),
    ],
    SourceKey.MEND_SAST: [
        ("Hinge Health Web Portal", "2025-07-16", 12, 45, 67, 23),
        ("Data Analytics Platform", "2025-07-16", 3, 15, 42, 18),
        ("Notification Service", "2025-07-16", 1, 8, 22, 12),
        ("Exercise Video Platform", "2025-07-16", 8, 28, 45, 19),
        ("Telemedicine Platform", "2025-07-16", 15, 52, 78, 31),
    ],
    SourceKey.MEND_CONTAINERS: [
        ("Data Analytics Platform", "2025-07-16", 2, 12, 28, 15),
        ("Exercise Video Platform", "2025-07-16", 4, 18, 35, 22),
        ("Telemedicine Platform", "2025-07-16", 6, 24, 42, 18),
    ],
}


async def ensure_bootstrap_admin(session: AsyncSession) -> None:
    """Create the bootstrap admin account when no user holds that username."""
    repo = UserRepository(session)
    username = settings.bootstrap_admin_username
    if await repo.get_by_username(username) is not None:
        return

    password = settings.bootstrap_admin_password
    if not password:
        password = secrets.token_urlsafe(16)
        logger.warning(
            "No POSTURE_BOOTSTRAP_ADMIN_PASSWORD set; generated a one-time password for %s: %s",
            username,
            password,
        )

    await repo.create(
        name="Administrator",
        username=username,
        type="Admin",
        status="Active",
        password_hash=hash_password(password),
        password_updated_at=utcnow(),
    )
    await session.commit()
    logger.info("Bootstrap admin '%s' created", username)


async def seed_demo_data(session: AsyncSession) -> bool:
    """Load demo services and Mend findings into an empty registry.

    Returns False (and changes nothing) when any service already exists.
    """
    app_repo = ApplicationRepository(session)
    if await app_repo.list_all():
        return False

    for service in DEMO_SERVICES:
        await app_repo.create(**{"labels": [], "tags": [], **service})

    finding_repo = ScanFindingRepository(session)
    for source, rows in DEMO_FINDINGS.items():
        for name, scan_date, critical, high, medium, low in rows:
            record = normalize_record(
                source,
                {
                    "serviceName": name,
                    "scanDate": scan_date,
                    "critical": critical,
                    "high": high,
                    "medium": medium,
                    "low": low,
                },
            )
            await finding_repo.upsert(record)

    await session.commit()
    logger.info("Seeded %d demo services", len(DEMO_SERVICES))
    return True
