# app/core/platforms.py
"""
Canonical platform and condition vocabularies.

The canonical platform list is closed: every stored game uses one of
these names. RAWG reports many more (and differently spelled) platforms,
which are folded into the canonical list by PLATFORM_ALIASES.
"""

ALL_PLATFORMS = "all"

CANONICAL_PLATFORMS: tuple[str, ...] = (
    "PlayStation 5",
    "PlayStation 4",
    "PlayStation 3",
    "PlayStation 2",
    "PlayStation",
    "Xbox Series X",
    "Xbox One",
    "Xbox 360",
    "Xbox",
    "Nintendo Switch",
    "Nintendo 3DS",
    "Nintendo DS",
    "Wii U",
    "Wii",
    "GameCube",
    "Nintendo 64",
    "SNES",
    "NES",
    "Game Boy Advance",
    "Game Boy Color",
    "Game Boy",
    "PC",
    "Mobile",
    "PSP",
    "PS Vita",
    "Dreamcast",
    "Sega Saturn",
    "Sega Genesis",
    "Sega CD",
    "Sega 32X",
    "Game Gear",
    "Atari",
)

# RAWG platform name -> canonical name (many-to-one).
# Canonical names map to themselves implicitly.
PLATFORM_ALIASES: dict[str, str] = {
    "Xbox Series S/X": "Xbox Series X",
    "macOS": "PC",
    "Linux": "PC",
    "iOS": "Mobile",
    "Android": "Mobile",
}

# Collection conditions. "Opened" is what metadata prefill proposes;
# "CIB" (complete in box) is the default when adding without one.
CONDITIONS: tuple[str, ...] = ("Sealed", "CIB", "Disc Only", "Digital", "Opened")
DEFAULT_CONDITION = "CIB"
PREFILL_CONDITION = "Opened"


def is_canonical_platform(name: str | None) -> bool:
    return name in CANONICAL_PLATFORMS


def normalize_platform(name: str) -> str:
    """
    Map a RAWG platform name to its canonical spelling.

    Unknown names pass through unchanged so nothing the API reports is
    silently lost; callers decide whether to keep them.
    """
    return PLATFORM_ALIASES.get(name, name)


def normalize_platforms(names: list[str]) -> list[str]:
    """
    Normalize a list of platform names, collapsing duplicates while
    keeping the first-seen order.
    """
    seen: list[str] = []
    for name in names:
        mapped = normalize_platform(name)
        if mapped not in seen:
            seen.append(mapped)
    return seen
