"""Localized route slugs for the public site (fi, sv, en)."""

from __future__ import annotations

from typing import Dict, Mapping, Tuple

SUPPORTED_LOCALES: Tuple[str, ...] = ("fi", "sv", "en")
DEFAULT_LOCALE = "fi"

# canonical (English) path -> (fi, sv)
_PATHS: Dict[str, Tuple[str, str]] = {
    "/funding": ("/rahoitus", "/finansiering"),
    "/funding/business-loan": ("/rahoitus/yrityslaina", "/finansiering/foretagslan"),
    "/funding/credit-line": ("/rahoitus/luottoraja", "/finansiering/kreditgrans"),
    "/funding/factoring-ar": ("/rahoitus/factoring", "/finansiering/factoring"),
    "/funding/leasing": ("/rahoitus/leasing", "/finansiering/leasing"),
    "/solutions": ("/ratkaisut", "/losningar"),
    "/solutions/retail": ("/ratkaisut/kauppa", "/losningar/handel"),
    "/solutions/manufacturing": ("/ratkaisut/teollisuus", "/losningar/tillverkning"),
    "/solutions/construction": ("/ratkaisut/rakentaminen", "/losningar/byggande"),
    "/solutions/technology": ("/ratkaisut/teknologia", "/losningar/teknologi"),
    "/solutions/health": ("/ratkaisut/terveys", "/losningar/halsa"),
    "/solutions/logistics": ("/ratkaisut/logistiikka", "/losningar/logistik"),
    "/situations": ("/rahoitustilanteet", "/finansieringssituationer"),
    "/situations/growth": ("/rahoitustilanteet/kasvun-rahoitus", "/finansieringssituationer/tillvaxt-finansiering"),
    "/situations/working-capital": (
        "/rahoitustilanteet/kassavirran-hallinta",
        "/finansieringssituationer/kassaflode-hantering",
    ),
    "/situations/investment": (
        "/rahoitustilanteet/investointien-rahoitus",
        "/finansieringssituationer/investering-finansiering",
    ),
    "/situations/business-acquisitions": (
        "/rahoitustilanteet/yrityskaupat",
        "/finansieringssituationer/foretag-farvarvning",
    ),
    "/situations/crisis-financing": ("/rahoitustilanteet/kriisirahoitus", "/finansieringssituationer/kris-finansiering"),
    "/knowledge": ("/tietopankki", "/kunskapsbank"),
    "/knowledge/guide": ("/tietopankki/opas", "/kunskapsbank/guide"),
    "/knowledge/calculators": ("/tietopankki/laskurit", "/kunskapsbank/kalkylatorer"),
    "/knowledge/glossary": ("/tietopankki/sanasto", "/kunskapsbank/ordlista"),
    "/knowledge/faq": ("/tietopankki/ukk", "/kunskapsbank/faq"),
    "/about": ("/tietoa", "/om-oss"),
    "/about/team": ("/tietoa/tiimi", "/om-oss/team"),
    "/about/why-trusty": ("/tietoa/miksi-trusty", "/om-oss/varfor-trusty"),
    "/about/customer-stories": ("/tietoa/asiakastarinat", "/om-oss/kundberattelser"),
    "/contact": ("/yhteystiedot", "/kontakt"),
    "/blog": ("/blogi", "/blogg"),
}

LOCALIZED_PATHS: Mapping[str, Mapping[str, str]] = {
    canonical: {"fi": fi, "sv": sv, "en": canonical} for canonical, (fi, sv) in _PATHS.items()
}

_REVERSE: Dict[str, Dict[str, str]] = {locale: {} for locale in SUPPORTED_LOCALES}
for _canonical, _per_locale in LOCALIZED_PATHS.items():
    for _locale, _path in _per_locale.items():
        _REVERSE[_locale].setdefault(_path, _canonical)


def _normalize(path: str) -> str:
    path = (path or "").strip() or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def strip_locale(path: str, locale: str) -> str:
    path = _normalize(path)
    prefix = f"/{locale}"
    if path == prefix:
        return "/"
    if path.startswith(prefix + "/"):
        return path[len(prefix):]
    return path


def to_canonical(path: str, locale: str) -> str:
    """Map a locale-specific path (without locale prefix) to its English form.

    Unknown paths are returned unchanged.
    """
    path = _normalize(path)
    return _REVERSE.get(locale, {}).get(path, path)


def localize(path: str, locale: str) -> str:
    path = _normalize(path)
    return LOCALIZED_PATHS.get(path, {}).get(locale, path)


def convert_path(current_path: str, current_locale: str, target_locale: str) -> str:
    """Translate a full ``/<locale>/...`` path into the target locale's slugs.

    >>> convert_path("/fi/rahoitus/factoring", "fi", "sv")
    '/sv/finansiering/factoring'
    """
    canonical = to_canonical(strip_locale(current_path, current_locale), current_locale)
    target = localize(canonical, target_locale)
    if target == "/":
        return f"/{target_locale}"
    return f"/{target_locale}{target}"


__all__ = [
    "DEFAULT_LOCALE",
    "LOCALIZED_PATHS",
    "SUPPORTED_LOCALES",
    "convert_path",
    "localize",
    "strip_locale",
    "to_canonical",
]
