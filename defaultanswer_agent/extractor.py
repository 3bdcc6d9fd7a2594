from __future__ import annotations

import json
import logging
import re
from typing import Any
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from .models import DIMENSIONS, Dimension, FetchResult, Signal, SignalSet, SnapshotQuality
from .urls import bare_host, registrable_domain_guess

logger = logging.getLogger(__name__)

# key -> (dimension, label), in rubric order within each dimension.
SIGNAL_CATALOGUE: dict[str, tuple[Dimension, str]] = {
    "title_present": ("entity_clarity", "Title tag present"),
    "title_names_brand": ("entity_clarity", "Title names the brand"),
    "meta_description": ("entity_clarity", "Meta description present"),
    "h1_descriptive": ("entity_clarity", "H1 describes the offering"),
    "organization_schema": ("entity_clarity", "Organization schema with name"),
    "canonical_link": ("entity_clarity", "Canonical link declared"),
    "faq_section": ("answerability", "FAQ section on page"),
    "faq_schema": ("answerability", "FAQPage/QAPage schema"),
    "direct_answer_block": ("answerability", "Direct answer / definition block"),
    "how_it_works": ("answerability", "How-it-works steps"),
    "help_center_links": ("answerability", "Links to docs/help/FAQ"),
    "heading_structure": ("answerability", "Descriptive H2 structure"),
    "pricing_mentioned": ("commercial_clarity", "Pricing or plans mentioned"),
    "pricing_page_link": ("commercial_clarity", "Link to pricing page"),
    "offer_schema": ("commercial_clarity", "Offer/price schema"),
    "price_amount": ("commercial_clarity", "Concrete price amount"),
    "free_tier_or_trial": ("commercial_clarity", "Free tier, trial or guarantee"),
    "about_link": ("trust", "About/company page linked"),
    "contact_signals": ("trust", "Contact information"),
    "author_marker": ("trust", "Author or publisher marker"),
    "date_marker": ("trust", "Published/updated date"),
    "citations": ("trust", "Citations or outbound references"),
    "https": ("trust", "Served over HTTPS"),
    "http_ok": ("retrievability", "Page returned 2xx"),
    "indexable": ("retrievability", "No noindex directive"),
    "server_rendered": ("retrievability", "Content present without JavaScript"),
    "sitemap_linked": ("retrievability", "Sitemap linked"),
    "ai_crawlers_allowed": ("retrievability", "AI crawlers allowed by robots.txt"),
    "structured_data_valid": ("retrievability", "JSON-LD parses cleanly"),
}

KEY_AI_CRAWLERS = ("gptbot", "oai-searchbot", "chatgpt-user", "claudebot", "perplexitybot")

_JSONLD_TYPE_RE = re.compile(r"ld\+json", re.IGNORECASE)
_ORG_TYPES = {"organization", "localbusiness", "corporation", "brand", "onlinestore", "onlinebusiness"}
_OFFER_TYPES = {"offer", "aggregateoffer"}
_FAQ_TYPES = {"faqpage", "qapage"}

_GENERIC_HEADING_RE = re.compile(
    r"^(welcome|home|hello|hey|hi|untitled|page|website|section|more|learn more|click here|read more)$",
    re.IGNORECASE,
)
_FAQ_HEADING_RE = re.compile(r"\bfaqs?\b|frequently asked|questions|\bq\s*&\s*a\b", re.IGNORECASE)
_HOW_IT_WORKS_RE = re.compile(r"how\s+it\s+works?|\bprocess\b|getting started", re.IGNORECASE)
_NUMBERED_STEPS_RE = re.compile(r"\b1\.\s+.{0,200}\b2\.\s+", re.DOTALL)
_HELP_HREF_RE = re.compile(r"(/docs|/help|/support|/faq|/knowledge|/academy)([\"'#?/]|$)", re.IGNORECASE)
_GENERIC_DEFINITION_RE = re.compile(r"\b(is a|is an|helps|built for)\b", re.IGNORECASE)

_PRICING_RE = re.compile(
    r"pricing|\bplans?\b|\bprice\b|[$€£]\s?\d|/month|/year|/mo\b|per month|per year|free tier|free plan",
    re.IGNORECASE,
)
_PRICE_AMOUNT_RE = re.compile(r"[$€£¥]\s?\d[\d,.]*|\b\d[\d,.]*\s?(?:USD|EUR|GBP)\b")
_FREE_TIER_RE = re.compile(
    r"free (?:trial|plan|tier)|try (?:it )?(?:for )?free|start for free|money[- ]back guarantee",
    re.IGNORECASE,
)
_PRICING_HREF_RE = re.compile(r"/(pricing|plans|price|purchase|subscribe)\b", re.IGNORECASE)
_PRICING_TEXT_RE = re.compile(r"^\s*(pricing|plans|plans & pricing|see pricing)\s*$", re.IGNORECASE)

_ABOUT_HREF_RE = re.compile(r"(about|company|team|mission|our-story|our_story|who-we-are|who_we_are)", re.IGNORECASE)
_ABOUT_TEXT_RE = re.compile(r"^\s*(about|about us|company|team|mission|our story|who we are)\s*$", re.IGNORECASE)
_CONTACT_HREF_RE = re.compile(r"(contact|support|help)", re.IGNORECASE)
_CONTACT_TEXT_RE = re.compile(r"contact|support|customer support|get in touch", re.IGNORECASE)
_EMAIL_RE = re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE)
_PHONE_RE = re.compile(r"(\+?\d{1,3}[\s.-]?)?(\(\d{2,4}\)[\s.-]?)?\d{3}[\s.-]?\d{3,4}[\s.-]?\d{0,4}")
_AUTHOR_CLASS_RE = re.compile(r"\b(author|byline)\b", re.IGNORECASE)

_JS_ROOT_SELECTOR = "#root, #app, #__next, [data-reactroot], [ng-version]"
_THIN_TEXT_CHARS = 1000
_EMPTY_BODY_CHARS = 400
_TOP_WINDOW_CHARS = 2500


def extract(result: FetchResult) -> SignalSet:
    """Turn a fetched page into the normalized signal set.

    Pure function of the fetch result: no network, no clock. Missing or broken
    markup only ever makes signals absent.
    """
    html = result.body or ""
    soup = _parse(html)
    host = bare_host(result.final_url)

    blocks, invalid_blocks = _jsonld_blocks(soup)
    nodes = [node for block in blocks for node in _walk_json(block)]
    schema_types = sorted({t for node in nodes for t in _node_types(node)})

    title = _clean(soup.title.get_text(" ", strip=True)) if soup.title else None
    meta_description = _meta_content(soup, "description") or _meta_content(soup, "og:description", attr="property")
    h1s = _headings(soup, "h1")
    h2s = _headings(soup, "h2")
    h3s = _headings(soup, "h3")
    canonical = _link_href(soup, "canonical")
    anchors = _anchors(soup)
    org_name = _organization_name(nodes)
    brand = _meta_content(soup, "og:site_name", attr="property") or org_name or _brand_from_host(host)
    robots_meta = [m.get("content", "") for m in soup.find_all("meta", attrs={"name": re.compile(r"^(robots|googlebot)$", re.I)})]
    has_js_root = bool(soup.select_one(_JS_ROOT_SELECTOR)) or "window.__NUXT__" in html
    faq_containers = soup.find_all(attrs={"id": re.compile("faq", re.I)}) + soup.find_all(class_=re.compile("faq", re.I))
    list_items = len(soup.find_all("li"))
    author_evidence = _author_evidence(soup, nodes)
    date_evidence = _date_evidence(soup, nodes)
    citation_evidence = _citation_evidence(soup, result.final_url)
    sitemap_href = _link_href(soup, "sitemap")

    # Everything below works on visible text; the soup is consumed here.
    text = _visible_text(soup)
    top_text = text[:_TOP_WINDOW_CHARS]
    quality = _snapshot_quality(text, has_js_root)

    found: dict[str, tuple[bool, str | None]] = {}

    # Entity clarity
    found["title_present"] = (bool(title), _short(title, 140))
    names_brand = bool(title and brand and _mentions(title, brand))
    found["title_names_brand"] = (names_brand, f"brand '{brand}'" if names_brand else None)
    found["meta_description"] = (bool(meta_description), _short(meta_description, 200))
    h1 = h1s[0] if h1s else None
    found["h1_descriptive"] = (bool(h1 and not _GENERIC_HEADING_RE.match(h1) and len(h1.split()) >= 3), _short(h1, 160))
    found["organization_schema"] = (bool(org_name), f"Organization: {org_name}" if org_name else None)
    found["canonical_link"] = (bool(canonical), canonical)

    # Answerability
    faq_heading = next((h for h in h2s + h3s if _FAQ_HEADING_RE.search(h)), None)
    if faq_heading:
        found["faq_section"] = (True, f"heading: {_short(faq_heading, 120)}")
    elif faq_containers:
        found["faq_section"] = (True, f"element: {_describe(faq_containers[0])}")
    else:
        found["faq_section"] = (False, None)
    faq_types = sorted(t for t in schema_types if t.lower() in _FAQ_TYPES)
    found["faq_schema"] = (bool(faq_types), ", ".join(faq_types) or None)
    definition = _definition_snippet(top_text, brand)
    found["direct_answer_block"] = (definition is not None, definition)
    how_heading = next((h for h in h2s + h3s if _HOW_IT_WORKS_RE.search(h)), None)
    has_steps = list_items >= 2 or bool(_NUMBERED_STEPS_RE.search(top_text))
    found["how_it_works"] = (bool(how_heading and has_steps), _short(how_heading, 120) if how_heading else None)
    help_links = [href for href, _ in anchors if _HELP_HREF_RE.search(href)]
    found["help_center_links"] = (bool(help_links), ", ".join(_unique(help_links)[:3]) or None)
    headings = h1s + h2s
    generic = sum(1 for h in headings if _GENERIC_HEADING_RE.match(h))
    structured = len(h2s) >= 3 and generic / len(headings) <= 0.2
    found["heading_structure"] = (structured, f"{len(h2s)} H2 heading(s), {generic} generic" if headings else None)

    # Commercial clarity
    found["pricing_mentioned"] = _regex_evidence(_PRICING_RE, text)
    pricing_links = [href for href, label in anchors if _PRICING_HREF_RE.search(_path(href)) or _PRICING_TEXT_RE.match(label)]
    found["pricing_page_link"] = (bool(pricing_links), pricing_links[0] if pricing_links else None)
    offer = _offer_evidence(nodes)
    found["offer_schema"] = (offer is not None, offer)
    found["price_amount"] = _regex_evidence(_PRICE_AMOUNT_RE, text)
    found["free_tier_or_trial"] = _regex_evidence(_FREE_TIER_RE, text)

    # Trust
    about = [href for href, label in anchors if _ABOUT_HREF_RE.search(_path(href)) or _ABOUT_TEXT_RE.match(label)]
    found["about_link"] = (bool(about), about[0] if about else None)
    contact = _contact_evidence(anchors, text)
    found["contact_signals"] = (bool(contact), ", ".join(contact) or None)
    found["author_marker"] = (author_evidence is not None, author_evidence)
    found["date_marker"] = (date_evidence is not None, date_evidence)
    found["citations"] = (citation_evidence is not None, citation_evidence)
    is_https = urlsplit(result.final_url).scheme.lower() == "https"
    found["https"] = (is_https, result.final_url if is_https else None)

    # Retrievability
    ok = 200 <= result.status < 300
    found["http_ok"] = (ok, f"HTTP {result.status}")
    noindex = _noindex_evidence(robots_meta, result.headers.get("x-robots-tag"))
    found["indexable"] = (noindex is None, noindex or "no noindex directive")
    found["server_rendered"] = (quality == "ok", f"snapshot {quality}, {len(text)} visible chars")
    sitemap = _sitemap_evidence(anchors, result.robots_txt, sitemap_href)
    found["sitemap_linked"] = (sitemap is not None, sitemap)
    found["ai_crawlers_allowed"] = _crawler_access(result.robots_txt)
    if blocks and not invalid_blocks:
        found["structured_data_valid"] = (True, f"{len(blocks)} JSON-LD block(s) parsed")
    elif invalid_blocks:
        found["structured_data_valid"] = (False, f"{invalid_blocks} JSON-LD block(s) failed to parse")
    else:
        found["structured_data_valid"] = (False, None)

    return SignalSet(
        url=result.final_url,
        brand=brand,
        title=_short(title, 200),
        meta_description=_short(meta_description, 300),
        h1=_short(h1, 200),
        canonical_url=canonical,
        schema_types=schema_types,
        snapshot_quality=quality,
        text_length=len(text),
        signals=_group(found),
    )


def empty_signals(url: str) -> SignalSet:
    """Signal set for a page that could not be fetched: every signal absent."""
    return SignalSet(
        url=url,
        brand=_brand_from_host(bare_host(url)),
        snapshot_quality="unavailable",
        signals=_group({}),
    )


def _group(found: dict[str, tuple[bool, str | None]]) -> dict[Dimension, list[Signal]]:
    grouped: dict[Dimension, list[Signal]] = {d: [] for d in DIMENSIONS}
    for key, (dimension, label) in SIGNAL_CATALOGUE.items():
        present, evidence = found.get(key, (False, None))
        grouped[dimension].append(
            Signal(key=key, dimension=dimension, label=label, present=present, evidence=evidence)
        )
    return grouped


# --- parsing helpers ---------------------------------------------------------


def _parse(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "html.parser")
    except Exception as e:
        logger.warning("HTML could not be parsed, treating page as empty: %s", e)
        return BeautifulSoup("", "html.parser")


def _jsonld_blocks(soup: BeautifulSoup) -> tuple[list[Any], int]:
    parsed: list[Any] = []
    invalid = 0
    for script in soup.find_all("script", attrs={"type": _JSONLD_TYPE_RE}):
        raw = (script.string or script.get_text() or "").strip()
        if not raw:
            continue
        try:
            parsed.append(json.loads(raw))
        except (ValueError, RecursionError):
            # RecursionError: nesting deeper than the decoder's stack allows.
            invalid += 1
    return parsed, invalid


def _walk_json(obj: Any):
    """Every dict in a JSON value, depth first in document order."""
    stack = [obj]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            yield current
            stack.extend(reversed(list(current.values())))
        elif isinstance(current, list):
            stack.extend(reversed(current))


def _node_types(node: dict) -> list[str]:
    t = node.get("@type")
    if isinstance(t, str):
        return [t.strip()] if t.strip() else []
    if isinstance(t, list):
        return [x.strip() for x in t if isinstance(x, str) and x.strip()]
    return []


def _organization_name(nodes: list[dict]) -> str | None:
    for node in nodes:
        if any(t.lower() in _ORG_TYPES for t in _node_types(node)):
            name = node.get("name")
            if isinstance(name, str) and name.strip():
                return name.strip()[:120]
    return None


def _offer_evidence(nodes: list[dict]) -> str | None:
    for node in nodes:
        types = {t.lower() for t in _node_types(node)}
        if types & _OFFER_TYPES:
            price = node.get("price") or node.get("lowPrice")
            currency = node.get("priceCurrency") or ""
            return f"Offer {price} {currency}".strip() if price is not None else "Offer"
        if "offers" in node or "priceSpecification" in node:
            return f"{'/'.join(_node_types(node)) or 'Node'} with offers"
    return None


def _author_evidence(soup: BeautifulSoup, nodes: list[dict]) -> str | None:
    meta = _meta_content(soup, "author")
    if meta:
        return f"meta author: {_short(meta, 80)}"
    if _link_href(soup, "author"):
        return "rel=author link"
    for node in nodes:
        for key in ("author", "publisher"):
            value = node.get(key)
            name = value.get("name") if isinstance(value, dict) else value
            if isinstance(name, str) and name.strip():
                return f"schema {key}: {_short(name, 80)}"
    tag = soup.find(attrs={"itemprop": "author"}) or soup.find(class_=_AUTHOR_CLASS_RE)
    if tag is not None:
        text = tag.get_text(" ", strip=True)
        return f"{_describe(tag)}: {_short(text, 80)}" if text else _describe(tag)
    return None


def _date_evidence(soup: BeautifulSoup, nodes: list[dict]) -> str | None:
    for prop in ("article:modified_time", "article:published_time", "og:updated_time"):
        value = _meta_content(soup, prop, attr="property")
        if value:
            return f"{prop}: {value[:40]}"
    for node in nodes:
        for key in ("dateModified", "datePublished"):
            value = node.get(key)
            if isinstance(value, str) and value.strip():
                return f"schema {key}: {value.strip()[:40]}"
    tag = soup.find("time", attrs={"datetime": True})
    if tag is not None:
        return f"<time datetime={tag['datetime'][:40]}>"
    return None


def _citation_evidence(soup: BeautifulSoup, base_url: str) -> str | None:
    if soup.find("cite") is not None:
        return "<cite> element"
    quote = soup.find("blockquote", attrs={"cite": True})
    if quote is not None:
        return f"blockquote cite={_short(quote['cite'], 80)}"

    # Only editorial regions count; header/footer social links are not citations.
    region = soup.find("article") or soup.find("main")
    if region is None:
        return None
    own = registrable_domain_guess(urlsplit(base_url).hostname or "")
    hosts: list[str] = []
    for a in region.find_all("a", href=True):
        href = urljoin(base_url, a["href"].strip())
        parts = urlsplit(href)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            continue
        domain = registrable_domain_guess(parts.hostname)
        if domain and domain != own and domain not in hosts:
            hosts.append(domain)
    if len(hosts) >= 2:
        return "outbound: " + ", ".join(hosts[:3])
    return None


def _contact_evidence(anchors: list[tuple[str, str]], text: str) -> list[str]:
    evidence: list[str] = []
    if any(href.lower().startswith("mailto:") for href, _ in anchors):
        evidence.append("mailto link")
    if _EMAIL_RE.search(text):
        evidence.append("email found")
    if any(_CONTACT_HREF_RE.search(_path(href)) or _CONTACT_TEXT_RE.search(label) for href, label in anchors):
        evidence.append("support/contact link")
    if any(href.lower().startswith("tel:") for href, _ in anchors) or _has_phone_like(text):
        evidence.append("phone number")
    return evidence


def _has_phone_like(text: str) -> bool:
    for m in _PHONE_RE.finditer(text):
        digits = sum(ch.isdigit() for ch in m.group(0))
        if digits >= 10:
            return True
    return False


def _noindex_evidence(robots_meta: list[str], header: str | None) -> str | None:
    for content in robots_meta:
        if "noindex" in (content or "").lower():
            return f"meta robots: {content.strip()[:60]}"
    if header and "noindex" in header.lower():
        return f"X-Robots-Tag: {header.strip()[:60]}"
    return None


def _sitemap_evidence(anchors: list[tuple[str, str]], robots_txt: str | None, link_href: str | None) -> str | None:
    for line in (robots_txt or "").splitlines():
        key, _, value = line.partition(":")
        if key.strip().lower() == "sitemap" and value.strip():
            return f"robots.txt Sitemap: {value.strip()[:120]}"
    if link_href:
        return f"<link rel=sitemap href={link_href}>"
    for href, _ in anchors:
        if "sitemap" in href.lower():
            return f"link: {href[:120]}"
    return None


def blocked_crawlers(robots_txt: str, crawlers: tuple[str, ...] = KEY_AI_CRAWLERS) -> list[str]:
    """Crawlers whose robots.txt group shuts them out of the whole site.

    A crawler named in its own group follows only that group; everyone else
    falls back to the ``*`` group.
    """
    groups = _robots_groups(robots_txt)
    wildcard = groups.get("*", [])
    return [c for c in crawlers if _disallows_root(groups[c] if c in groups else wildcard)]


def _robots_groups(robots_txt: str) -> dict[str, list[tuple[str, str]]]:
    # Consecutive User-agent lines share the rules that follow them; a blank line ends the run.
    groups: dict[str, list[tuple[str, str]]] = {}
    agents: list[str] = []
    reading_agents = False
    for raw in robots_txt.splitlines():
        field, sep, value = raw.split("#", 1)[0].partition(":")
        if not sep:
            if not field.strip():
                reading_agents = False
            continue
        field, value = field.strip().lower(), value.strip()
        if field == "user-agent":
            if not reading_agents:
                agents = []
                reading_agents = True
            if value:
                agents.append(value.lower())
                groups.setdefault(value.lower(), [])
        elif field in ("allow", "disallow"):
            reading_agents = False
            for agent in agents:
                groups[agent].append((field, value))
    return groups


def _disallows_root(rules: list[tuple[str, str]]) -> bool:
    return ("disallow", "/") in rules and ("allow", "/") not in rules


def _crawler_access(robots_txt: str | None) -> tuple[bool, str | None]:
    if not robots_txt:
        return True, "no robots.txt rules"
    blocked = blocked_crawlers(robots_txt)
    if blocked:
        return False, "blocked: " + ", ".join(blocked)
    return True, f"{len(KEY_AI_CRAWLERS)} key AI crawlers allowed"


def _visible_text(soup: BeautifulSoup) -> str:
    for tag in soup(["script", "style", "noscript", "svg", "canvas", "iframe", "template", "head"]):
        tag.decompose()
    root = soup.body or soup
    text = root.get_text("\n")
    lines = [re.sub(r"[ \t ]+", " ", line).strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line and not _looks_like_css(line))


def _looks_like_css(line: str) -> bool:
    return bool(re.search(r"[{}]", line)) or len(re.findall(r"[;:]", line)) >= 3


def _snapshot_quality(text: str, has_js_root: bool) -> SnapshotQuality:
    if len(text) < _EMPTY_BODY_CHARS and has_js_root:
        return "likely_js"
    if len(text) < _THIN_TEXT_CHARS:
        return "thin"
    return "ok"


def _definition_snippet(text: str, brand: str) -> str | None:
    if not text:
        return None
    if brand and len(brand) >= 2:
        escaped = re.escape(brand)
        for pattern in (
            rf"\b{escaped}\b\s+(is\s+a|is\s+an|helps|provides|builds|offers)\b",
            rf"what\s+is\s+{escaped}",
        ):
            m = re.search(pattern, text, flags=re.IGNORECASE)
            if m:
                return _context(text, m.start())
    m = _GENERIC_DEFINITION_RE.search(text)
    return _context(text, m.start()) if m else None


def _regex_evidence(pattern: re.Pattern, text: str) -> tuple[bool, str | None]:
    m = pattern.search(text)
    if not m:
        return False, None
    return True, _context(text, m.start())


def _meta_content(soup: BeautifulSoup, name: str, attr: str = "name") -> str | None:
    tag = soup.find("meta", attrs={attr: re.compile(rf"^{re.escape(name)}$", re.I)})
    if tag is None:
        return None
    content = _clean(tag.get("content") or "")
    return content or None


def _link_href(soup: BeautifulSoup, rel: str) -> str | None:
    for link in soup.find_all("link", href=True):
        rels = link.get("rel") or []
        if isinstance(rels, str):
            rels = rels.split()
        if rel in (r.lower() for r in rels):
            href = link["href"].strip()
            if href:
                return href
    return None


def _headings(soup: BeautifulSoup, name: str) -> list[str]:
    out = []
    for tag in soup.find_all(name):
        text = _clean(tag.get_text(" ", strip=True))
        if text:
            out.append(text)
    return out


def _anchors(soup: BeautifulSoup) -> list[tuple[str, str]]:
    out = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if href and not href.startswith(("#", "javascript:")):
            out.append((href, _clean(a.get_text(" ", strip=True))))
    return out


def _describe(tag) -> str:
    ident = tag.get("id")
    classes = tag.get("class") or []
    if ident:
        return f"{tag.name}#{ident}"
    if classes:
        return f"{tag.name}.{'.'.join(classes[:2])}"
    return tag.name


def _brand_from_host(host: str) -> str:
    label = (host or "").split(".")[0]
    return label[:1].upper() + label[1:] if label else ""


def _mentions(text: str, brand: str) -> bool:
    needle = _squash(brand)
    return bool(needle) and needle in _squash(text)


def _squash(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def _path(href: str) -> str:
    try:
        return urlsplit(href).path or ""
    except ValueError:
        return ""


def _context(text: str, index: int, max_len: int = 160) -> str:
    start = max(0, index - 60)
    end = min(len(text), index + max_len)
    return re.sub(r"\s+", " ", text[start:end]).strip()


def _clean(text: str) -> str:
    return re.sub(r"\s+", " ", re.sub(r"[\u0000-\u001f\u007f]", " ", text or "")).strip()


def _short(text: str | None, max_len: int) -> str | None:
    if not text:
        return None
    return _clean(text)[:max_len] or None


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))
