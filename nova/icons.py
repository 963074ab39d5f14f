"""Category name to icon tag lookup.

A name is lower-cased and looked up directly first; failing that, the
keyword table is scanned in order and the first keyword contained in the name
wins. Order matters: "Assurance santé" matches "santé" before "assurance".
"""
from functools import lru_cache

DEFAULT_ICON = "tag"

# (keyword, icon tag), scanned top to bottom
KEYWORD_ICONS: tuple[tuple[str, str], ...] = (
    # income
    ("salaire", "wallet"),
    ("freelance", "briefcase"),
    ("investissements", "trending-up"),
    ("cadeaux", "gift"),
    # expenses
    ("logement", "home"),
    ("loyer", "home"),
    ("maison", "home"),
    ("alimentation", "utensils"),
    ("restaurant", "utensils"),
    ("courses", "utensils"),
    ("transport", "car"),
    ("voiture", "car"),
    ("essence", "car"),
    ("divertissement", "clapperboard"),
    ("loisirs", "clapperboard"),
    ("santé", "heart-pulse"),
    ("médecin", "heart-pulse"),
    ("pharmacie", "heart-pulse"),
    ("shopping", "shopping-bag"),
    ("vêtements", "shopping-bag"),
    ("factures", "receipt"),
    ("électricité", "zap"),
    ("eau", "zap"),
    ("internet", "zap"),
    ("assurance", "shield"),
    ("éducation", "graduation-cap"),
    ("formation", "graduation-cap"),
    ("voyage", "plane"),
    ("vacances", "plane"),
    ("café", "coffee"),
    ("tech", "smartphone"),
    ("musique", "music"),
    ("livres", "book"),
    # fallback
    ("autre", "more-horizontal"),
    ("divers", "more-horizontal"),
)

_EXACT = dict(KEYWORD_ICONS)


@lru_cache(maxsize=256)
def classify(name: str) -> str:
    key = name.lower()

    if key in _EXACT:
        return _EXACT[key]

    for keyword, icon in KEYWORD_ICONS:
        if keyword in key:
            return icon

    return DEFAULT_ICON
