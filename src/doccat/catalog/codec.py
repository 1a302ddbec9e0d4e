"""Flat byte encoding of a catalog for replication to workers.

Wire format: ``topic1:kw1,kw2,;topic2:kw3,;``. Every keyword is terminated by
``,`` and every topic by ``;``. The separators are reserved: a topic or
keyword containing one of them cannot be encoded and is rejected instead of
being escaped.
"""

from __future__ import annotations

from doccat.errors import CatalogCodecError
from doccat.models import Catalog

TOPIC_END = ";"
NAME_END = ":"
KEYWORD_END = ","
RESERVED = frozenset(TOPIC_END + NAME_END + KEYWORD_END)
ENCODING = "utf-8"


def _check_token(token: str, kind: str, topic: str) -> None:
    reserved = sorted(RESERVED.intersection(token))
    if reserved:
        raise CatalogCodecError(
            f"{kind} {token!r} of topic {topic!r} contains reserved separator(s) "
            f"{''.join(reserved)!r}"
        )


def encode(catalog: Catalog) -> bytes:
    """Serialize ``catalog`` in iteration order."""
    parts = []
    for topic, keywords in catalog.items():
        _check_token(topic, "Topic name", topic)
        for keyword in keywords:
            _check_token(keyword, "Keyword", topic)
        parts.append(topic + NAME_END + "".join(kw + KEYWORD_END for kw in keywords) + TOPIC_END)
    return "".join(parts).encode(ENCODING)


def decode(payload: bytes) -> Catalog:
    """Rebuild a catalog from :func:`encode` output."""
    try:
        text = bytes(payload).decode(ENCODING)
    except UnicodeDecodeError as exc:
        raise CatalogCodecError(f"Catalog payload is not valid {ENCODING}: {exc}") from exc

    if text and not text.endswith(TOPIC_END):
        raise CatalogCodecError("Catalog payload is truncated: missing final ';'")

    topics = []
    for entry in text.split(TOPIC_END)[:-1]:
        topic, sep, rest = entry.partition(NAME_END)
        if not sep:
            raise CatalogCodecError(f"Malformed catalog entry {entry!r}: missing ':'")
        if rest and not rest.endswith(KEYWORD_END):
            raise CatalogCodecError(f"Malformed keyword list for topic {topic!r}")
        topics.append((topic, rest.split(KEYWORD_END)[:-1]))

    try:
        return Catalog(topics)
    except ValueError as exc:
        raise CatalogCodecError(f"Invalid catalog payload: {exc}") from exc
