"""
Field extraction for BizBuySell listing pages.

The page itself is only asked for raw text (see ``SNAPSHOT_JS``); every rule
and every normalizer runs here in Python, so a live page and a saved HTML
file go through exactly the same parsing.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, NamedTuple

import structlog
from bs4 import BeautifulSoup
from bs4.element import CData, NavigableString, Script, Stylesheet

from listing_scraper.models import ExtractedListing
from listing_scraper.normalize import clean_text, parse_currency, parse_integer

logger = structlog.get_logger(__name__)


class PricedElement(NamedTuple):
    """textContent of an element containing ``$``; ``parent`` indexes the enclosing priced element."""

    text: str
    parent: int | None = None


@dataclass(frozen=True)
class PageSnapshot:
    """
    Raw text pulled out of a rendered page.

    ``priced`` holds every element whose text contains ``$``, in document
    order. Because an element's text includes its children's, the parent
    of a priced element is always priced as well.
    """

    selector_texts: dict[str, str | None] = field(default_factory=dict)
    priced: list[PricedElement] = field(default_factory=list)
    body_text: str = ""

    def innermost(self, qualifies: Callable[[str], bool]) -> list[str]:
        """Texts of qualifying elements with no qualifying descendant, in document order."""
        hits = [i for i, el in enumerate(self.priced) if qualifies(el.text)]
        covered = set()
        for i in hits:
            parent = self.priced[i].parent
            while parent is not None and parent not in covered:
                covered.add(parent)
                parent = self.priced[parent].parent
        return [self.priced[i].text for i in hits if i not in covered]


# ---- Rule types -------------------------------------------------------------

def _non_empty(text: str) -> bool:
    return bool(text)


@dataclass(frozen=True)
class SelectorRule:
    """First selector whose cleaned text passes ``accept`` wins."""

    selectors: tuple[str, ...]
    accept: Callable[[str], bool] = _non_empty
    transform: Callable[[str], Any] = lambda text: text

    def apply(self, snapshot: PageSnapshot) -> Any:
        for selector in self.selectors:
            raw = snapshot.selector_texts.get(selector)
            if not raw:
                continue
            text = clean_text(raw)
            if self.accept(text):
                return self.transform(text)
        return None


@dataclass(frozen=True)
class PricedTextRule:
    """
    Scan element texts carrying a ``$`` and one of ``labels``; first value above ``minimum`` wins.

    Containers are skipped in favour of the innermost labelled element,
    otherwise <html> would win with every number on the page run together.
    """

    labels: tuple[str, ...]
    minimum: float

    def qualifies(self, text: str) -> bool:
        return "$" in text and any(label in text for label in self.labels)

    def apply(self, snapshot: PageSnapshot) -> Any:
        for text in snapshot.innermost(self.qualifies):
            value = parse_currency(text)
            if value and value > self.minimum:
                return value
        return None


@dataclass(frozen=True)
class PatternRule:
    """Regex over the body text. Uses the last matched group, or the whole match if there are none."""

    pattern: re.Pattern
    convert: Callable[[str], Any] = clean_text
    accept: Callable[[Any], bool] | None = None

    def apply(self, snapshot: PageSnapshot) -> Any:
        m = self.pattern.search(snapshot.body_text)
        if not m:
            return None
        value = self.convert(m.group(m.lastindex or 0))
        if value is None or value == "":
            return None
        if self.accept is not None and not self.accept(value):
            return None
        return value


@dataclass(frozen=True)
class FieldRule:
    name: str
    strategies: tuple

    def extract(self, snapshot: PageSnapshot) -> Any:
        for strategy in self.strategies:
            value = strategy.apply(snapshot)
            if value is not None:
                return value
        return None


# ---- Rule table ---------------------------------------------------------------

TITLE_SELECTORS = (
    'h1[data-cy="listing-title"]',
    ".listing-title",
    "h1.title",
    "h1",
)

LOCATION_SELECTORS = (
    'span[data-cy="listing-location"]',
    ".listing-location",
    '[data-testid="location"]',
    ".location",
)

DESCRIPTION_SELECTORS = (
    '[data-cy="business-description"]',
    ".business-description",
    ".description",
    ".summary",
    ".listing-description",
)

CITY_STATE_RE = re.compile(r"[A-Z][a-z]+(?:\s[A-Z][a-z]+)*,\s*[A-Z]{2}")
RENT_RE = re.compile(r"\bRent[:\s]*\$?([\d,]+)", re.I)
ESTABLISHED_RE = re.compile(r"[Ee]stablished[:\s]*(\d{4})|[Ss]ince[:\s]*(\d{4})|[Ff]ounded[:\s]*(\d{4})")
EMPLOYEES_RE = re.compile(r"(\d+)\s*[Ee]mployees?")
BUILDING_SF_RE = re.compile(r"(\d+[\d,]*)\s*(?:sq\.?\s*ft\.?|square\s*feet)", re.I)
INVENTORY_RE = re.compile(r"[Ii]nventory[:\s]*\$?([\d,]+)")
FRANCHISE_RE = re.compile(r"[Ff]ranchise[:\s]*([^.]+)")
REASON_RE = re.compile(r"[Rr]eason\s*for\s*[Ss]elling[:\s]*([^.]+)")


def _truncate(limit: int) -> Callable[[str], str]:
    return lambda text: clean_text(text)[:limit]


def _positive(value) -> bool:
    return value > 0


def _plausible_year(year: int) -> bool:
    return 1900 <= year <= date.today().year


FIELD_RULES = (
    FieldRule("business_name", (SelectorRule(TITLE_SELECTORS),)),
    FieldRule("location", (
        SelectorRule(LOCATION_SELECTORS, accept=lambda text: "," in text),
        PatternRule(CITY_STATE_RE),
    )),
    FieldRule("asking_price", (PricedTextRule(("Asking Price", "Price:"), 10_000),)),
    FieldRule("cash_flow", (PricedTextRule(("Cash Flow", "SDE"), 1_000),)),
    FieldRule("gross_revenue", (PricedTextRule(("Gross Revenue", "Revenue"), 1_000),)),
    FieldRule("ebitda", (PricedTextRule(("EBITDA",), 1_000),)),
    FieldRule("business_description", (
        SelectorRule(DESCRIPTION_SELECTORS, accept=lambda text: len(text) > 50,
                     transform=lambda text: text[:2000]),
    )),
    FieldRule("rent", (PatternRule(RENT_RE, convert=parse_currency, accept=_positive),)),
    FieldRule("established", (PatternRule(ESTABLISHED_RE, convert=int, accept=_plausible_year),)),
    FieldRule("employees", (PatternRule(EMPLOYEES_RE, convert=int, accept=lambda n: 0 < n < 10_000),)),
    FieldRule("building_sf", (PatternRule(BUILDING_SF_RE, convert=parse_integer, accept=_positive),)),
    FieldRule("inventory", (PatternRule(INVENTORY_RE, convert=parse_currency, accept=_positive),)),
    FieldRule("franchise", (PatternRule(FRANCHISE_RE, convert=_truncate(200)),)),
    FieldRule("reason_for_selling", (PatternRule(REASON_RE, convert=_truncate(500)),)),
)


def snapshot_selectors() -> list[str]:
    """Every CSS selector some rule wants looked up, in rule order."""
    seen = []
    for rule in FIELD_RULES:
        for strategy in rule.strategies:
            for selector in getattr(strategy, "selectors", ()):
                if selector not in seen:
                    seen.append(selector)
    return seen


def extract_listing(snapshot: PageSnapshot) -> ExtractedListing:
    values = {}
    fields_extracted = []
    for rule in FIELD_RULES:
        value = rule.extract(snapshot)
        if value is None:
            continue
        values[rule.name] = value
        fields_extracted.append(rule.name)

    listing = ExtractedListing.from_fields(values, fields_extracted)
    logger.debug(
        "Listing fields extracted",
        fields_extracted=fields_extracted,
        parsing_confidence=listing.parsing_confidence,
    )
    return listing


# ---- Snapshot sources -------------------------------------------------------

SNAPSHOT_JS = """
  (selectors) => {
    const selectorTexts = {};
    for (const s of selectors) {
      const el = document.querySelector(s);
      selectorTexts[s] = el ? el.textContent : null;
    }
    // Document order visits ancestors first, so a priced parent is already indexed
    const priced = [];
    const index = new Map();
    for (const el of document.querySelectorAll('*')) {
      const text = el.textContent || '';
      if (!text.includes('$')) continue;
      const parent = index.has(el.parentElement) ? index.get(el.parentElement) : null;
      index.set(el, priced.length);
      priced.push({ text, parent });
    }
    return { selectorTexts, priced, bodyText: document.body?.textContent || '' };
  }
"""


async def collect_snapshot(page) -> PageSnapshot:
    out = await page.evaluate(SNAPSHOT_JS, snapshot_selectors())
    return PageSnapshot(
        selector_texts=out.get("selectorTexts") or {},
        priced=[PricedElement(p.get("text") or "", p.get("parent")) for p in out.get("priced") or []],
        body_text=out.get("bodyText") or "",
    )


# get_text() skips <script>/<style> strings by default; textContent does not
_TEXT_CONTENT_TYPES = (NavigableString, CData, Script, Stylesheet)


def _text_content(el) -> str:
    return el.get_text(types=_TEXT_CONTENT_TYPES)


def snapshot_from_html(html: str) -> PageSnapshot:
    """Build the same snapshot from static HTML, for saved pages and fixtures."""
    soup = BeautifulSoup(html or "", "html.parser")

    selector_texts = {}
    for selector in snapshot_selectors():
        el = soup.select_one(selector)
        selector_texts[selector] = _text_content(el) if el is not None else None

    priced = []
    index = {}
    for el in soup.find_all(True):
        text = _text_content(el)
        if "$" not in text:
            continue
        index[id(el)] = len(priced)
        priced.append(PricedElement(text, index.get(id(el.parent))))

    body_text = _text_content(soup.body) if soup.body is not None else ""

    return PageSnapshot(selector_texts=selector_texts, priced=priced, body_text=body_text)


async def extract_listing_from_page(page) -> ExtractedListing:
    snapshot = await collect_snapshot(page)
    return extract_listing(snapshot)


def extract_listing_from_html(html: str) -> ExtractedListing:
    return extract_listing(snapshot_from_html(html))
