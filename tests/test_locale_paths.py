import pytest

from services.locale_paths import LOCALIZED_PATHS, convert_path, localize, strip_locale, to_canonical


@pytest.mark.parametrize(
    "path,source,target,expected",
    [
        ("/fi/rahoitus/factoring", "fi", "sv", "/sv/finansiering/factoring"),
        ("/sv/finansiering/foretagslan", "sv", "fi", "/fi/rahoitus/yrityslaina"),
        ("/en/situations/growth", "en", "fi", "/fi/rahoitustilanteet/kasvun-rahoitus"),
        ("/fi/tietoa/", "fi", "en", "/en/about"),
        ("/fi", "fi", "sv", "/sv"),
        ("/fi/", "fi", "en", "/en"),
    ],
)
def test_convert_path_between_locales(path, source, target, expected) -> None:
    assert convert_path(path, source, target) == expected


def test_unknown_path_keeps_its_slug() -> None:
    assert convert_path("/fi/kampanja/kevät", "fi", "sv") == "/sv/kampanja/kevät"


def test_strip_locale_only_removes_whole_segment() -> None:
    assert strip_locale("/fi/rahoitus", "fi") == "/rahoitus"
    assert strip_locale("/finance", "fi") == "/finance"


def test_table_is_bidirectional() -> None:
    for canonical, per_locale in LOCALIZED_PATHS.items():
        for locale, localized in per_locale.items():
            assert to_canonical(localized, locale) == canonical
            assert localize(canonical, locale) == localized
