"""Content and configuration fingerprints.

Both hashes are change detectors for the score cache. A cached score is
only usable while the entity's visible text and the vector configuration
both hash to the values stored alongside it.
"""

import hashlib
import json
import re
from collections.abc import Mapping

from content_audit.entities.interfaces import ContentRenderer, Entity

_SCRIPT_STYLE = re.compile(r"<(script|style)[^>]*>.*?</\1>", re.DOTALL | re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def clean_text(markup: str) -> str:
    """Strip markup and normalize whitespace to single spaces."""
    if not markup:
        return ""
    text = _SCRIPT_STYLE.sub("", markup)
    text = _TAG.sub("", text)
    text = text.replace("&nbsp;", " ")
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


async def content_text(entity: Entity, renderer: ContentRenderer) -> str:
    """Render the entity in its own language and return its visible text.

    Uses entity.langcode rather than any caller locale so the hash is the
    same no matter who triggers the analysis.
    """
    markup = await renderer.render_default_view(entity, entity.langcode)
    return clean_text(str(markup))


def content_hash(text: str) -> str:
    """SHA-256 hex digest of the cleaned text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def config_hash(vectors: Mapping[str, Mapping]) -> str:
    """MD5 hex digest of the vector configuration, independent of key order."""
    canonical = {
        vector_id: dict(sorted(dict(data).items()))
        for vector_id, data in sorted(vectors.items())
    }
    serialized = json.dumps(canonical, separators=(",", ":"), sort_keys=True, default=str)
    return hashlib.md5(serialized.encode("utf-8"), usedforsecurity=False).hexdigest()
