from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .models import (
    DIMENSION_LABELS,
    DIMENSIONS,
    CheckResult,
    Dimension,
    DimensionScore,
    FixItem,
    Priority,
    Readiness,
    ScoreSet,
    SignalSet,
)

# Bump whenever a check, a point value or a weight below changes.
SCHEMA_VERSION = "1"

# dimension -> ordered (signal key, points); points per dimension sum to 100.
RUBRIC: dict[Dimension, tuple[tuple[str, int], ...]] = {
    "entity_clarity": (
        ("title_present", 15),
        ("title_names_brand", 20),
        ("meta_description", 15),
        ("h1_descriptive", 20),
        ("organization_schema", 15),
        ("canonical_link", 15),
    ),
    "answerability": (
        ("faq_section", 30),
        ("faq_schema", 15),
        ("direct_answer_block", 25),
        ("how_it_works", 10),
        ("help_center_links", 10),
        ("heading_structure", 10),
    ),
    "commercial_clarity": (
        ("pricing_mentioned", 35),
        ("pricing_page_link", 20),
        ("offer_schema", 20),
        ("price_amount", 15),
        ("free_tier_or_trial", 10),
    ),
    "trust": (
        ("about_link", 25),
        ("contact_signals", 25),
        ("author_marker", 15),
        ("date_marker", 15),
        ("citations", 10),
        ("https", 10),
    ),
    "retrievability": (
        # Only 2xx pages reach extraction, so this check tracks fetch success.
        ("http_ok", 20),
        ("indexable", 25),
        ("server_rendered", 15),
        ("sitemap_linked", 15),
        ("ai_crawlers_allowed", 15),
        ("structured_data_valid", 10),
    ),
}

AGGREGATE_WEIGHTS: dict[Dimension, Decimal] = {
    "entity_clarity": Decimal("0.25"),
    "answerability": Decimal("0.20"),
    "commercial_clarity": Decimal("0.15"),
    "trust": Decimal("0.20"),
    "retrievability": Decimal("0.20"),
}

_STRONG_AT = 75
_EMERGING_AT = 50


def score(signals: SignalSet) -> ScoreSet:
    """Apply the rubric to a signal set. Same input, same output."""
    dimensions: dict[Dimension, DimensionScore] = {}
    for dimension in DIMENSIONS:
        checks = []
        for key, points in RUBRIC[dimension]:
            signal = signals.get(key)
            satisfied = bool(signal and signal.present)
            checks.append(
                CheckResult(
                    key=key,
                    label=signal.label if signal else key,
                    points=points if satisfied else 0,
                    max_points=points,
                    satisfied=satisfied,
                )
            )
        total = sum(c.points for c in checks)
        dimensions[dimension] = DimensionScore(
            dimension=dimension,
            label=DIMENSION_LABELS[dimension],
            score=_clamp(total),
            checks=checks,
        )

    aggregate = aggregate_of({d: s.score for d, s in dimensions.items()})
    return ScoreSet(dimensions=dimensions, aggregate=aggregate, readiness=readiness_for(aggregate))


def aggregate_of(dimension_scores: dict[Dimension, int]) -> int:
    total = sum(AGGREGATE_WEIGHTS[d] * Decimal(dimension_scores[d]) for d in DIMENSIONS)
    return _clamp(int(total.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


def readiness_for(aggregate: int) -> Readiness:
    if aggregate >= _STRONG_AT:
        return "strong"
    if aggregate >= _EMERGING_AT:
        return "emerging"
    return "not_candidate"


def _clamp(value: int) -> int:
    return max(0, min(100, value))


# Rubric check -> (priority, action) offered when the check fails.
FIX_ACTIONS: dict[str, tuple[Priority, str]] = {
    "title_present": ("high", "Add a <title> that names the brand and the product category."),
    "title_names_brand": ("high", "Put the brand name in the title tag next to a clear category description."),
    "meta_description": ("medium", "Add a meta description (150-160 chars) stating what you offer and who it is for."),
    "h1_descriptive": ("high", "Rewrite the H1 as a complete sentence that defines the product category."),
    "organization_schema": ("medium", "Add Organization JSON-LD with the brand name, URL and logo."),
    "canonical_link": ("low", "Declare a canonical URL with <link rel=\"canonical\">."),
    "faq_section": ("high", "Add a visible FAQ answering what the product is, who it is for and how it works."),
    "faq_schema": ("medium", "Mark the FAQ up as FAQPage JSON-LD."),
    "direct_answer_block": ("high", "Open the page with a one-paragraph definition: \"<Brand> is a ...\"."),
    "how_it_works": ("medium", "Add a \"How it works\" section with the main steps."),
    "help_center_links": ("low", "Link to docs, a help center or guides from the homepage."),
    "heading_structure": ("medium", "Add descriptive H2 sections for features, use cases and pricing."),
    "pricing_mentioned": ("medium", "State pricing on the page, or say plainly how pricing works."),
    "pricing_page_link": ("medium", "Link to a pricing page from the homepage navigation."),
    "offer_schema": ("low", "Add Offer JSON-LD with price and currency for each plan."),
    "price_amount": ("low", "Show at least one concrete price with its currency."),
    "free_tier_or_trial": ("low", "Say whether there is a free plan, trial or demo."),
    "about_link": ("medium", "Link an About page covering the company, team and mission."),
    "contact_signals": ("low", "Add a contact page, email address or phone number."),
    "author_marker": ("low", "Attribute content to a named author or team."),
    "date_marker": ("low", "Show when the page was published or last updated."),
    "citations": ("low", "Back claims with links to sources, studies or customer references."),
    "https": ("high", "Serve the site over HTTPS and redirect plain HTTP to it."),
    "http_ok": ("high", "Make the homepage answer 200 to crawlers without a login, block or error page."),
    "indexable": ("high", "Remove the noindex directive from the meta robots tag and X-Robots-Tag header."),
    "server_rendered": ("high", "Render the main content on the server so it is in the HTML without JavaScript."),
    "sitemap_linked": ("low", "Publish a sitemap and reference it from robots.txt."),
    "ai_crawlers_allowed": ("high", "Allow GPTBot, ClaudeBot, PerplexityBot and other AI crawlers in robots.txt."),
    "structured_data_valid": ("medium", "Fix the JSON-LD blocks so each one parses as valid JSON."),
}

MAX_FIXES = 7

_PRIORITY_RANK: dict[Priority, int] = {"high": 0, "medium": 1, "low": 2}


def fix_plan(scores: ScoreSet, limit: int = MAX_FIXES) -> list[FixItem]:
    """Failed checks as actions, most urgent first.

    Ordered by priority, then by the points at stake, then by rubric order, so
    the same scores always give the same plan.
    """
    failed = [
        _fix_item(dimension, check.key, check.max_points)
        for dimension in DIMENSIONS
        if dimension in scores.dimensions
        for check in scores.dimensions[dimension].checks
        if not check.satisfied and check.key in FIX_ACTIONS
    ]
    failed.sort(key=lambda item: (_PRIORITY_RANK[item.priority], -item.points))
    return failed[:limit]


def _fix_item(dimension: Dimension, key: str, points: int) -> FixItem:
    priority, action = FIX_ACTIONS[key]
    return FixItem(key=key, dimension=dimension, priority=priority, action=action, points=points)
