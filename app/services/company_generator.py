import logging
from collections.abc import Callable

from app.schemas.narrative import (
    BusinessModelContext,
    BusinessModelResult,
    DescriptionContext,
    NarrativeResult,
)
from app.schemas.website import ServiceCandidate
from app.services.claude import ClaudeService

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "Du bist ein B2B-Analyst. Antworte nur als valides JSON."
TEMPERATURE = 0.4

DESCRIPTION_TEXT_LIMIT = 7000
SERVICES_TEXT_LIMIT = 9000
BUSINESS_TEXT_LIMIT = 6000

PRICE_LEVELS = ("low", "medium", "high", "premium")
MARKET_POSITIONS = ("lokal", "national", "global")

FALLBACK_USP = (
    "Klare Positionierung mit nachvollziehbarem Nutzen",
    "Schnelle Umsetzung mit hoher Qualität",
    "Kundenzentrierte Kommunikation und Beratung",
)

FALLBACK_BUSINESS_MODEL = BusinessModelResult(
    business_model="Dienstleistungsbasiert",
    target_market="KMU",
    price_level="medium",
    market_position="lokal",
)

_DESCRIPTION_PROMPT = """
Erzeuge JSON mit keys: description, shortPitch, usp, positioning.
Kontext:
- Name: {name}
- Branche: {industry}
- Website: {website}
- Tonalität: {brand_tone}
- Website-Text: {text}

Regeln:
- description: 3-6 Absätze
- shortPitch: 1 Satz
- usp: genau 3 Bullet-Statements als Array
- positioning: 1 kurzer Absatz
"""

_SERVICES_PROMPT = """
Extrahiere Leistungen aus folgendem Text als JSON mit key "services".
Jeder Eintrag: {{ category, title, description, keywords }}.
Maximal 10 Leistungen.
Branche: {industry}.
Text: {text}
"""

_BUSINESS_PROMPT = """
Analysiere das Unternehmen und gib JSON mit keys businessModel, targetMarket, priceLevel, marketPosition.
Name: {name}
Branche: {industry}
Beschreibung: {description}
Website-Text: {text}
priceLevel muss eins von low|medium|high|premium sein.
marketPosition muss eins von lokal|national|global sein.
"""


def _non_empty_str(value: object) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _valid_description(data: dict) -> bool:
    return (
        _non_empty_str(data.get("description"))
        and _non_empty_str(data.get("shortPitch"))
        and isinstance(data.get("usp"), list)
    )


def _valid_services(data: dict) -> bool:
    return isinstance(data.get("services"), list)


def _valid_business_model(data: dict) -> bool:
    return _non_empty_str(data.get("businessModel"))


def fallback_narrative(name: str, industry: str | None) -> NarrativeResult:
    """Deterministic narrative used whenever the AI result is unusable."""
    branche = industry or "Allgemein"
    return NarrativeResult(
        description=(
            f"{name} ist ein Unternehmen aus der Branche {branche} mit Fokus auf "
            "nachhaltige, kundennahe Ergebnisse. Basierend auf der Websitepräsenz "
            "bietet das Unternehmen ein professionelles Leistungsportfolio mit "
            "klaren Mehrwerten für Zielkunden."
        ),
        short_pitch=f"{name} liefert klare Ergebnisse mit digitaler Exzellenz und messbarer Wirkung.",
        usp=list(FALLBACK_USP),
        positioning=(
            f"{name} positioniert sich als verlässlicher Partner mit praxisnahen "
            "Lösungen und klarem Fokus auf Wertschöpfung."
        ),
    )


def _to_service(entry: object) -> ServiceCandidate | None:
    if not isinstance(entry, dict):
        return None
    title = entry.get("title")
    if not isinstance(title, str) or len(title.strip()) < 3:
        return None
    category = entry.get("category")
    description = entry.get("description")
    keywords = entry.get("keywords")
    return ServiceCandidate(
        category=category.strip() if _non_empty_str(category) else "Allgemein",
        title=title.strip(),
        description=description if isinstance(description, str) else None,
        keywords=[str(k) for k in keywords] if isinstance(keywords, list) else [],
    )


class CompanyGenerator:
    """AI narrative for a company with deterministic fallbacks.

    ``generate_description`` and ``analyze_business_model`` always return a
    complete result. ``generate_services`` returns an empty list on failure so
    callers can fall back to heuristic extraction themselves.
    """

    def __init__(self, claude: ClaudeService | None = None):
        self._claude = claude

    @property
    def ai_enabled(self) -> bool:
        return self._claude is not None

    async def _structured_completion(
        self, prompt: str, validate: Callable[[dict], bool], label: str
    ) -> dict | None:
        if self._claude is None:
            logger.info("No completion provider configured, skipping %s", label)
            return None

        try:
            data = await self._claude.analyze(SYSTEM_PROMPT, prompt, temperature=TEMPERATURE)
            if data is None:
                logger.warning("No usable JSON for %s", label)
                return None
            if not validate(data):
                logger.warning("AI result for %s failed validation: keys=%s", label, sorted(data))
                return None
        except Exception:
            logger.exception("Structured completion for %s failed", label)
            return None
        return data

    async def generate_description(self, ctx: DescriptionContext) -> NarrativeResult:
        prompt = _DESCRIPTION_PROMPT.format(
            name=ctx.name,
            industry=ctx.industry or "unbekannt",
            website=ctx.website or "unbekannt",
            brand_tone=ctx.brand_tone or "neutral-professionell",
            text=ctx.scraped_text[:DESCRIPTION_TEXT_LIMIT],
        )
        fallback = fallback_narrative(ctx.name, ctx.industry)
        data = await self._structured_completion(prompt, _valid_description, "description")
        if data is None:
            return fallback

        positioning = data.get("positioning")
        return NarrativeResult(
            description=data["description"].strip(),
            short_pitch=data["shortPitch"].strip(),
            usp=[str(item) for item in data["usp"]],
            positioning=positioning.strip() if _non_empty_str(positioning) else fallback.positioning,
        )

    async def generate_services(
        self, scraped_text: str, industry: str | None = None
    ) -> list[ServiceCandidate]:
        prompt = _SERVICES_PROMPT.format(
            industry=industry or "unbekannt",
            text=scraped_text[:SERVICES_TEXT_LIMIT],
        )
        data = await self._structured_completion(prompt, _valid_services, "services")
        if data is None:
            return []

        services = [s for s in (_to_service(e) for e in data["services"]) if s is not None]
        logger.info("AI returned %d usable services", len(services))
        return services

    async def analyze_business_model(self, ctx: BusinessModelContext) -> BusinessModelResult:
        prompt = _BUSINESS_PROMPT.format(
            name=ctx.name,
            industry=ctx.industry or "unbekannt",
            description=ctx.description or "keine",
            text=ctx.scraped_text[:BUSINESS_TEXT_LIMIT],
        )
        data = await self._structured_completion(prompt, _valid_business_model, "business model")
        if data is None:
            return FALLBACK_BUSINESS_MODEL.model_copy()

        target_market = data.get("targetMarket")
        price_level = data.get("priceLevel")
        market_position = data.get("marketPosition")
        return BusinessModelResult(
            business_model=data["businessModel"].strip(),
            target_market=(
                target_market.strip()
                if _non_empty_str(target_market)
                else FALLBACK_BUSINESS_MODEL.target_market
            ),
            price_level=(
                price_level if price_level in PRICE_LEVELS else FALLBACK_BUSINESS_MODEL.price_level
            ),
            market_position=(
                market_position
                if market_position in MARKET_POSITIONS
                else FALLBACK_BUSINESS_MODEL.market_position
            ),
        )
