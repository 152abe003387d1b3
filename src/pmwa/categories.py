from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

OTHER = "Other"

# Category order matters: the first table entry with a hit wins.
CATEGORIES: List[str] = ["Politics", "Sports", "Crypto", "Economy", "Entertainment", "Science", OTHER]

_POLITICS = [
    "election", "president", "congress", "senate", "trump", "biden", "democrat",
    "republican", "vote", "governor", "mayor", "political", "impeach",
]
_CRYPTO = ["bitcoin", "ethereum", "btc", "eth", "crypto", "token", "coin", "defi", "nft", "blockchain"]
_ECONOMY = [
    "fed", "interest rate", "inflation", "gdp", "recession", "economy", "market",
    "stock", "treasury", "unemployment",
]
_ENTERTAINMENT = ["oscar", "emmy", "movie", "film", "album", "spotify", "netflix", "celebrity", "award"]
_SCIENCE = ["climate", "nasa", "space", "ai", "artificial intelligence", "scientific", "research", "temperature"]

# Used to count unique markets per category.
MARKET_CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "Politics": _POLITICS,
    "Sports": [
        "nba", "nfl", "mlb", "world cup", "super bowl", "championship", "playoffs",
        "game", "team", "player", "win", "score", "match",
    ],
    "Crypto": _CRYPTO,
    "Economy": _ECONOMY,
    "Entertainment": _ENTERTAINMENT,
    "Science": _SCIENCE,
}

# Used for win/loss by category over closed positions. Sports has no "win"/"score" here.
POSITION_CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "Politics": _POLITICS,
    "Sports": [
        "nba", "nfl", "mlb", "world cup", "super bowl", "championship", "playoffs",
        "game", "team", "player", "match",
    ],
    "Crypto": _CRYPTO,
    "Economy": _ECONOMY,
    "Entertainment": _ENTERTAINMENT,
    "Science": _SCIENCE,
}


def classify_title(title: str, keywords: Mapping[str, Sequence[str]]) -> str:
    """Case-insensitive substring match, first category in table order wins."""
    t = (title or "").lower()
    for category, words in keywords.items():
        if any(w in t for w in words):
            return category
    return OTHER
