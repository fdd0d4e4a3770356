"""Security vector model."""

import re
from dataclasses import dataclass

from content_audit.errors import InvalidVectorError

_SLUG = re.compile(r"^[a-z0-9_]+$")


@dataclass
class SecurityVector:
    id: str
    label: str
    description: str = ""
    weight: int = 0

    def to_config(self) -> dict:
        """Config blob entry; the id is the mapping key, not a field."""
        return {"label": self.label, "description": self.description, "weight": self.weight}

    @classmethod
    def from_config(cls, vector_id: str, data: dict) -> "SecurityVector":
        return cls(
            id=vector_id,
            label=data.get("label", vector_id),
            description=data.get("description", ""),
            weight=int(data.get("weight", 0)),
        )


DEFAULT_VECTORS: dict[str, dict] = {
    "pii_disclosure": {
        "label": "PII Disclosure",
        "description": "Identifies potential disclosure of personally identifiable information (PII) in content.",
        "weight": 0,
    },
    "credentials_disclosure": {
        "label": "Credentials Disclosure",
        "description": "Detects potential exposure of credentials, API keys, passwords, or other sensitive authentication data.",
        "weight": 10,
    },
}


def validate_vector_id(vector_id: str) -> None:
    if not vector_id or not _SLUG.match(vector_id):
        raise InvalidVectorError(
            f"Invalid vector id '{vector_id}': use lowercase letters, numbers and underscores"
        )


def sort_by_weight(vectors: list[SecurityVector]) -> list[SecurityVector]:
    """Order by ascending weight; sorted() is stable so ties keep store order."""
    return sorted(vectors, key=lambda v: v.weight)
