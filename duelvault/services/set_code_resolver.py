"""
Set Code Resolution.

Turns what a user types (a catalog id like "89631139" or a printed set code
like "LDK2-FRK40") into a catalog card and the printing it refers to.

Printed codes look like ``PREFIX-<marker><letter?><digits>``:

    LDK2-FRK40  -> prefix LDK2, marker FR, letter K, number 40
    LOB-EN001   -> prefix LOB,  marker EN, number 001
    LOB-001     -> no marker (early English prints)

The catalog only lists English codes, so localized codes are normalized
to their EN form before matching. The detected language always comes
from the code as typed.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from duelvault.models.card import Card, CardPrinting
from duelvault.models.card_set import CardSetDirectory
from duelvault.models.failure import ErrorKind, Ok, Result, err
from duelvault.services.card_set_cache import CardSetDirectoryCache
from duelvault.services.catalog_client import CatalogClient, CatalogError

logger = logging.getLogger(__name__)


class Language(str, Enum):
    """Print languages identified by their set-code marker."""

    EN = "EN"
    FR = "FR"
    DE = "DE"
    IT = "IT"
    PT = "PT"
    SP = "SP"
    JP = "JP"
    KR = "KR"


# Marker as printed -> language. JA and KO are alternate spellings.
LANGUAGE_MARKERS: dict[str, Language] = {
    "EN": Language.EN,
    "FR": Language.FR,
    "DE": Language.DE,
    "IT": Language.IT,
    "PT": Language.PT,
    "SP": Language.SP,
    "JP": Language.JP,
    "JA": Language.JP,
    "KR": Language.KR,
    "KO": Language.KR,
}

ENGLISH_MARKER = "EN"


@dataclass(frozen=True, slots=True)
class ParsedSetCode:
    """A printed code split into its parts."""

    prefix: str
    marker: str
    letter: str
    number: str

    def with_marker(self, marker: str) -> str:
        return f"{self.prefix}-{marker}{self.letter}{self.number}".upper()


def split_set_code(code: str) -> tuple[str, str]:
    """Split "LDK2-FRK40" into ("LDK2", "FRK40"). Suffix is "" without a hyphen."""
    prefix, _, suffix = code.strip().partition("-")
    return prefix, suffix


def parse_set_code(code: str) -> ParsedSetCode | None:
    """
    Parse a code carrying a two-letter marker.

    Returns None when the code has no hyphen, a non-alphanumeric prefix,
    or a suffix that is not ``<2 letters><optional letter><digits>``.
    """
    stripped = code.strip()
    if not stripped.isascii():
        return None

    prefix, sep, suffix = stripped.partition("-")
    if not sep or not prefix.isalnum():
        return None

    marker, rest = suffix[:2], suffix[2:]
    if len(marker) != 2 or not marker.isalpha():
        return None

    letter = ""
    if rest[:1].isalpha():
        letter, rest = rest[:1], rest[1:]
    if not rest.isdigit():
        return None

    return ParsedSetCode(prefix=prefix, marker=marker.upper(), letter=letter, number=rest)


def detect_language(code: str) -> Language:
    """
    Print language of a set code.

    Examples:
        LDK2-FRK40 -> FR
        LOB-EN001  -> EN
        LOB-001    -> EN (no marker)
    """
    parsed = parse_set_code(code)
    if parsed is None:
        return Language.EN
    return LANGUAGE_MARKERS.get(parsed.marker, Language.EN)


def normalize_set_code(code: str) -> str:
    """
    English form of a localized set code.

    LDK2-FRK40 -> LDK2-ENK40. English codes and codes without a known
    marker are returned unchanged. Idempotent.
    """
    parsed = parse_set_code(code)
    if parsed is None:
        return code
    if parsed.marker == ENGLISH_MARKER or parsed.marker not in LANGUAGE_MARKERS:
        return code
    return parsed.with_marker(ENGLISH_MARKER)


def _matches(printing: CardPrinting, codes: set[str]) -> bool:
    return printing.set_code.lower() in codes


def find_printing(card: Card, code: str) -> CardPrinting | None:
    """
    Printing of ``card`` matching ``code`` as typed or in its normalized form.

    An exact match on the typed code wins over a normalized one.
    """
    typed = code.strip().lower()
    normalized = normalize_set_code(code.strip()).lower()
    for printing in card.printings:
        if _matches(printing, {typed}):
            return printing
    for printing in card.printings:
        if _matches(printing, {normalized}):
            return printing
    return None


def rarities_for_set_code(card: Card, code: str) -> list[str]:
    """Rarities the card was printed in under this code (typed or normalized)."""
    codes = {code.strip().lower(), normalize_set_code(code.strip()).lower()}
    return [p.set_rarity for p in card.printings if _matches(p, codes) and p.set_rarity]


@dataclass(frozen=True, slots=True)
class Resolution:
    """
    A successfully resolved identifier.

    Attributes:
        card: The catalog card
        matched_printing: Printing the code refers to (None for id lookups)
        detected_language: Language read from the original code
        original_code: Identifier as typed (trimmed, upper-cased)
    """

    card: Card
    matched_printing: CardPrinting | None
    detected_language: Language
    original_code: str


NOT_FOUND_HINT = "Try the set code printed below the card artwork (e.g. SDP-F037)."


class SetCodeResolver:
    """
    Resolves catalog ids and printed set codes to catalog cards.

    Catalog failures are logged and treated as "no data"; they surface to
    callers as RESOLUTION errors, never as exceptions.
    """

    def __init__(self, catalog: CatalogClient, card_sets: CardSetDirectoryCache) -> None:
        self._catalog = catalog
        self._card_sets = card_sets

    async def get_card_sets(self) -> CardSetDirectory:
        """Current set directory (cached)."""
        return await self._card_sets.get()

    async def resolve(self, identifier: str) -> Result[Resolution]:
        """
        Resolve a catalog id or a printed set code.

        - Hyphenated input is a set code
        - Purely numeric input is a catalog id
        - Anything else is tried as an id first, then as a set code
        """
        code = identifier.strip()
        if not code:
            return err(ErrorKind.VALIDATION, "A card code is required.")

        if "-" in code:
            return await self._resolve_set_code(code)

        if code.isdigit():
            return await self._resolve_catalog_id(code)

        by_id = await self._resolve_catalog_id(code)
        if by_id.is_ok:
            return by_id
        return await self._resolve_set_code(code)

    async def _resolve_catalog_id(self, code: str) -> Result[Resolution]:
        try:
            card = await self._catalog.fetch_card_by_id(code)
        except CatalogError as e:
            logger.warning("CATALOG_LOOKUP_FAILED", extra={"code": code, "error": str(e)})
            card = None

        if card is None:
            return err(
                ErrorKind.RESOLUTION,
                f"Card with code '{code}' not found. {NOT_FOUND_HINT}",
            )

        return Ok(
            Resolution(
                card=card,
                matched_printing=None,
                detected_language=detect_language(code),
                original_code=code.upper(),
            )
        )

    async def _resolve_set_code(self, code: str) -> Result[Resolution]:
        prefix, _ = split_set_code(code)
        directory = await self.get_card_sets()
        set_name = directory.name_for(prefix)

        if set_name is None:
            suggestions = directory.similar_codes(prefix)
            message = f'Set "{prefix.upper()}" was not found in the catalog.'
            if suggestions:
                message += f" Similar sets: {', '.join(suggestions)}"
            logger.info(
                "SET_CODE_UNRESOLVED",
                extra={"code": code, "reason": "unknown_prefix", "suggestions": suggestions},
            )
            return err(ErrorKind.RESOLUTION, message, suggestions)

        try:
            candidates = await self._catalog.fetch_cards_in_set(set_name)
        except CatalogError as e:
            logger.warning(
                "CATALOG_LOOKUP_FAILED",
                extra={"code": code, "set_name": set_name, "error": str(e)},
            )
            candidates = []

        for card in candidates:
            printing = find_printing(card, code)
            if printing is not None:
                return Ok(
                    Resolution(
                        card=card,
                        matched_printing=printing,
                        detected_language=detect_language(code),
                        original_code=code.upper(),
                    )
                )

        logger.info(
            "SET_CODE_UNRESOLVED",
            extra={"code": code, "reason": "no_printing", "set_name": set_name},
        )
        return err(
            ErrorKind.RESOLUTION,
            f'Code "{code.upper()}" was not found in set "{set_name}". '
            "Check the card number printed on the card.",
        )
