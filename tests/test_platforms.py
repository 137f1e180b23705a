from app.core.platforms import (
    CANONICAL_PLATFORMS,
    PLATFORM_ALIASES,
    is_canonical_platform,
    normalize_platform,
    normalize_platforms,
)


def test_aliases_point_into_canonical_list():
    assert all(target in CANONICAL_PLATFORMS for target in PLATFORM_ALIASES.values())


def test_normalize_platform():
    assert normalize_platform("Xbox Series S/X") == "Xbox Series X"
    assert normalize_platform("Linux") == "PC"
    assert normalize_platform("SNES") == "SNES"
    assert normalize_platform("Neo Geo") == "Neo Geo"


def test_normalize_platforms_collapses_duplicates_in_order():
    assert normalize_platforms(["iOS", "PC", "Android", "macOS", "Wii"]) == ["Mobile", "PC", "Wii"]


def test_is_canonical_platform():
    assert is_canonical_platform("Game Boy Color")
    assert not is_canonical_platform("Xbox Series S/X")
    assert not is_canonical_platform(None)
