import re

# Matched as whole words, case-insensitively; longest entries are tried first
BAD_WORDS = [
    "fuck", "fuk", "fk", "shit", "sh1t", "shet",
    "bitch", "b!tch", "dick", "d1ck", "dic", "cock", "c0ck", "pussy",
    "trash", "loser", "idiot", "stupid", "moron",
    "porn", "pornhub", "xxx", "xnxx", "anus",
]

_PATTERNS = [
    re.compile(r"(?<!\w)" + re.escape(word) + r"(?!\w)", re.IGNORECASE)
    for word in sorted(BAD_WORDS, key=len, reverse=True)
]


def contains_bad_words(text: str) -> bool:
    if not text:
        return False
    return any(pattern.search(text) for pattern in _PATTERNS)


def censor_text(text: str) -> str:
    """Replace each bad word with asterisks of the same length."""
    if not text:
        return text
    for pattern in _PATTERNS:
        text = pattern.sub(lambda m: "*" * len(m.group(0)), text)
    return text
