"""Built-in pricing tables.

DEFAULT_PRICING_CONFIG has the same shape as a pricing configuration
revision payload and is used when no revision has been proposed yet.
"""

from __future__ import annotations

CORE_ROLES = ("frontend", "backend", "designer", "qa", "pm")

# Share of core labor cost assigned to each supporting role.
ADDITIONAL_ROLE_SHARES = {
    "infrastructure": 0.055,
    "security": 0.045,
    "support": 0.04,
}

ROLE_LABELS = {
    "frontend": "Product Engineering",
    "backend": "Business Logic & Automation",
    "designer": "UI / UX Design",
    "qa": "QA & Testing",
    "pm": "Product Management",
    "infrastructure": "Infrastructure & Tools",
    "security": "Security & Data Protection",
    "support": "Support & Risk Coverage",
}

# Client-facing cost categories: (label, color, description, labor role).
# Infrastructure also carries the hosting cost, support also carries the risk buffer.
CLIENT_COST_CATEGORIES: tuple[tuple[str, str, str, str], ...] = (
    ("Product Engineering", "#0ea5e9", "Building your product features", "frontend"),
    ("UX & Design", "#8b5cf6", "User experience and visual design", "designer"),
    ("Business Logic & Automation", "#ec4899", "Backend systems and workflows", "backend"),
    ("QA & Testing", "#10b981", "Testing and quality assurance", "qa"),
    ("Security & Data Protection", "#f59e0b", "Keeping your data safe", "security"),
    ("Product Management", "#6366f1", "Coordination and delivery", "pm"),
    ("Infrastructure & Tools", "#14b8a6", "Hosting and development tools", "infrastructure"),
    ("Support & Risk Coverage", "#ef4444", "Maintenance and contingency", "support"),
)


def _hours(frontend: int, backend: int, designer: int, qa: int, pm: int) -> dict[str, int]:
    return {"frontend": frontend, "backend": backend, "designer": designer, "qa": qa, "pm": pm}


FEATURE_HOURS: dict[str, dict[str, int]] = {
    "user-accounts": _hours(40, 60, 20, 25, 15),
    "social-login": _hours(25, 35, 15, 20, 10),
    "content-management": _hours(60, 80, 30, 35, 20),
    "search": _hours(30, 50, 15, 20, 10),
    "file-uploads": _hours(35, 45, 20, 25, 12),
    "payments": _hours(50, 70, 25, 40, 20),
    "subscriptions": _hours(45, 65, 20, 35, 18),
    "analytics": _hours(35, 55, 25, 20, 12),
    "booking-system": _hours(60, 75, 30, 40, 22),
    "invoicing": _hours(40, 50, 20, 25, 15),
    "reporting": _hours(50, 60, 30, 30, 18),
    "notifications": _hours(40, 60, 20, 25, 15),
    "chat": _hours(70, 90, 35, 45, 25),
    "ai-recommendations": _hours(50, 120, 30, 40, 30),
    "email-marketing": _hours(45, 55, 25, 30, 18),
    "video-calls": _hours(60, 70, 30, 40, 22),
    "reviews-ratings": _hours(40, 50, 25, 30, 15),
    "admin-control": _hours(80, 70, 40, 35, 20),
    "data-security": _hours(20, 80, 10, 50, 25),
    "backups": _hours(10, 40, 5, 15, 8),
    "compliance": _hours(30, 60, 15, 40, 20),
}

AI_FEATURE = "ai-recommendations"
AI_IDEA_TYPE = "ai-powered-product"
ENTERPRISE_IDEA_TYPE = "enterprise software"

BASE_IDEA_HOURS: dict[str, dict[str, int]] = {
    "business-website": _hours(80, 40, 60, 30, 20),
    "mobile-app": _hours(120, 80, 80, 50, 30),
    "website-mobile-app": _hours(200, 120, 120, 80, 50),
    "startup-product": _hours(180, 150, 100, 80, 60),
    ENTERPRISE_IDEA_TYPE: _hours(300, 350, 150, 200, 120),
    AI_IDEA_TYPE: _hours(200, 250, 120, 120, 80),
}

SUPPORT_MONTHS = {
    "none": 0,
    "3-months": 3,
    "6-months": 6,
    "12-months": 12,
}

PHASE_WEIGHTS = (
    ("Discovery & Planning", 0.15),
    ("Design", 0.20),
    ("Development", 0.45),
    ("Testing & QA", 0.12),
    ("Launch & Handoff", 0.08),
)

DEFAULT_PRICING_CONFIG: dict = {
    "baseIdeaHours": BASE_IDEA_HOURS,
    "techMultipliers": {
        "react-nextjs": 1.0,
        "react-native": 1.15,
        "flutter": 1.1,
        "vue-nuxt": 1.0,
        "angular": 1.05,
        "nodejs": 1.0,
        "python-django": 1.05,
        "native-ios": 1.2,
        "native-android": 1.2,
        "expert-choice": 1.0,
    },
    "formatMultipliers": {
        "website": 1.0,
        "mobile-app": 1.2,
        "website-and-app": 1.8,
        "full-ecosystem": 2.2,
    },
    "complexityMultipliers": {
        "basic": 1.0,
        "medium": 1.25,
        "advanced": 1.6,
    },
    "timelineMultipliers": {
        "standard": 1.0,
        "faster": 1.3,
        "priority": 1.6,
    },
    "supportPackages": {
        "none": 0,
        "3-months": 6000,
        "6-months": 10800,
        "12-months": 18000,
    },
    "supportHours": {
        "none": 0,
        "3-months": 15,
        "6-months": 20,
        "12-months": 25,
    },
    "hourlyRates": {
        "frontend": 35,
        "backend": 35,
        "designer": 35,
        "qa": 25,
        "pm": 45,
        "infrastructure": 35,
        "security": 35,
        "support": 35,
    },
    "infrastructureCosts": {
        "business-website": 100,
        "mobile-app": 200,
        "website-mobile-app": 300,
        "startup-product": 500,
        ENTERPRISE_IDEA_TYPE: 2000,
        AI_IDEA_TYPE: 1500,
    },
    "dynamicHourlyRates": {
        "business-website": 45,
        "startup-product": 50,
        "mobile-app": 60,
        "website-mobile-app": 75,
        AI_IDEA_TYPE: 95,
        ENTERPRISE_IDEA_TYPE: 150,
    },
    # enterprise software has no cap
    "maxPriceCaps": {
        "business-website": 25000,
        "startup-product": 85000,
        "mobile-app": 100000,
        "website-mobile-app": 120000,
        AI_IDEA_TYPE: 150000,
    },
    "featureBaseCost": 5000,
    "featureCosts": {},
    "clientHourlyRate": 180,
}

DEFAULT_TEAM_CONFIG: dict = {
    "roles": [
        {"name": "frontend", "hourlyRate": 35, "defaultHours": {"mvp": 120, "full": 300}},
        {"name": "backend", "hourlyRate": 35, "defaultHours": {"mvp": 120, "full": 320}},
        {"name": "designer", "hourlyRate": 35, "defaultHours": {"mvp": 60, "full": 140}},
        {"name": "qa", "hourlyRate": 25, "defaultHours": {"mvp": 50, "full": 140}},
        {"name": "pm", "hourlyRate": 45, "defaultHours": {"mvp": 40, "full": 100}},
    ],
    "overhead": 0.15,
    "riskBufferMin": 0.10,
    "riskBufferMax": 0.20,
    "infrastructureCost": 5000,
}


def complexity_multiplier_for(feature_count: int) -> float:
    if feature_count <= 3:
        return 1.0
    if feature_count <= 6:
        return 1.15
    if feature_count <= 9:
        return 1.3
    return 1.5


def risk_buffer_for(feature_count: int, has_ai: bool) -> float:
    buffer = 0.10
    if feature_count > 6:
        buffer += 0.03
    if feature_count > 9:
        buffer += 0.02
    if has_ai:
        buffer += 0.05
    return min(buffer, 0.20)
