from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

SynonymTable = Mapping[str, tuple[str, ...]]

# ---------------------------------------------------------------------------
# Synonym tables (canonical term -> surface variants)
# ---------------------------------------------------------------------------

SERVICE_SYNONYMS: dict[str, list[str]] = {
    "groomer": [
        "groomer", "grooming salon", "pet salon", "dog spa", "pet spa",
        "grooming service", "pet grooming", "dog grooming", "cat grooming",
        "pet wash", "dog wash", "cat wash", "pet bath", "dog bath", "cat bath",
        "pet trim", "dog trim", "cat trim", "pet cut", "dog cut", "cat cut",
        "pet style", "dog style", "cat style", "pet haircut", "dog haircut",
        "pet nail trim", "dog nail trim", "cat nail trim", "pet nail clipping",
        "pet ear cleaning", "dog ear cleaning", "cat ear cleaning",
    ],
    "dog_trainer": [
        "dog trainer", "pet trainer", "dog training service", "pet training service",
        "dog obedience", "pet obedience", "dog behavior", "pet behavior",
        "puppy training", "puppy class", "dog class", "pet class",
        "dog agility", "pet agility", "dog socialization", "pet socialization",
        "dog manners", "pet manners", "dog commands", "pet commands",
    ],
    "veterinarian": [
        "vet", "veterinarian", "veterinary clinic", "vet clinic",
        "veterinary hospital", "vet hospital", "pet hospital", "animal hospital",
        "emergency vet", "emergency veterinarian", "urgent care vet",
        "urgent care veterinarian", "pet doctor", "animal doctor",
        "veterinary surgery", "vet surgery", "pet surgery", "animal surgery",
        "holistic vet", "holistic veterinarian", "health practitioner",
    ],
    "boarding_daycare": [
        "daycare", "day care", "day-care", "boarding", "kennel", "pet sitting",
        "pet-sitting", "sitter", "pet overnight", "dog overnight", "cat overnight",
    ],
    "dog_park": [
        "dog park", "dog parks", "park", "parks", "playground", "play area",
        "off leash", "off-leash", "fenced", "outdoor", "recreation",
    ],
    "pet_products": [
        "products", "supplies", "food", "toys", "beds", "collars", "leashes",
        "treats", "accessories", "pet store", "pet shop", "retail",
    ],
    "apartments": [
        "apartment", "apartments", "rental", "rentals", "housing", "residence",
        "residential", "pet friendly", "pet-friendly",
    ],
    "landscape_contractors": [
        "landscaping", "landscape", "yard", "garden", "outdoor", "maintenance",
        "contractor", "contractors",
    ],
}

PRODUCT_SYNONYMS: dict[str, list[str]] = {
    "food": [
        "kibble", "wet food", "canned food", "dry food", "raw food",
        "fresh food", "homemade food", "organic food", "grain-free food",
        "grain free food", "natural food", "premium food", "budget food",
        "puppy food", "adult food", "senior food", "large breed food",
        "small breed food", "toy breed food", "hypoallergenic food",
    ],
    "toys": [
        "toy", "chew toy", "chew-toy", "ball", "frisbee", "rope",
        "tug toy", "tug-toy", "interactive toy", "puzzle toy",
        "plush toy", "stuffed toy", "squeaky toy", "fetch toy",
        "training toy", "agility toy", "indoor toy", "outdoor toy",
    ],
    "beds": [
        "bed", "bedding", "crate", "mat", "cushion", "pillow",
        "nest", "sleeping area", "rest area", "comfort zone",
        "orthopedic bed", "memory foam bed", "heated bed", "cooling bed",
        "elevated bed", "donut bed", "bolster bed", "cave bed",
    ],
    "collars": [
        "collar", "harness", "leash", "tag", "identification",
        "name tag", "id tag", "microchip", "gps collar", "smart collar",
        "training collar", "shock collar", "vibrating collar", "bark collar",
        "flea collar", "reflective collar", "leather collar", "nylon collar",
    ],
    "treats": [
        "treat", "snack", "biscuit", "reward", "training treat",
        "dental treat", "chew treat", "soft treat", "hard treat",
        "grain-free treat", "organic treat", "natural treat", "low-calorie treat",
        "puppy treat", "senior treat", "large breed treat", "small breed treat",
    ],
    "supplements": [
        "supplement", "vitamin", "probiotic", "oil", "omega-3",
        "fish oil", "joint supplement", "skin supplement", "coat supplement",
        "digestive supplement", "immune supplement", "calming supplement",
        "glucosamine", "chondroitin", "msm", "cbd", "hemp oil",
    ],
    "accessories": [
        "bowl", "feeder", "water bowl", "food bowl", "automatic feeder",
        "slow feeder", "puzzle feeder", "clothing", "costume", "jacket",
        "sweater", "boots", "shoes", "raincoat", "winter coat",
        "life jacket", "bandana", "bow tie", "hat", "sunglasses",
    ],
}

LOCATION_SYNONYMS: dict[str, list[str]] = {
    "indianapolis": ["indy", "indianapolis in", "indianapolis indiana"],
    "fishers": ["fishers in", "fishers indiana"],
    "carmel": ["carmel in", "carmel indiana"],
    "noblesville": ["noblesville in", "noblesville indiana"],
    "westfield": ["westfield in", "westfield indiana"],
    "greenwood": ["greenwood in", "greenwood indiana"],
    "avon": ["avon in", "avon indiana"],
    "plainfield": ["plainfield in", "plainfield indiana"],
    "zionsville": ["zionsville in", "zionsville indiana"],
    "brownsburg": ["brownsburg in", "brownsburg indiana"],
    "danville": ["danville in", "danville indiana"],
    "pittsboro": ["pittsboro in", "pittsboro indiana"],
    "lizton": ["lizton in", "lizton indiana"],
    "coatesville": ["coatesville in", "coatesville indiana"],
    "clayton": ["clayton in", "clayton indiana"],
    "amity": ["amity in", "amity indiana"],
    "bainbridge": ["bainbridge in", "bainbridge indiana"],
}

BUSINESS_TYPE_SYNONYMS: dict[str, list[str]] = {
    "clinic": ["veterinary", "vet", "animal hospital", "pet hospital"],
    "salon": ["grooming", "groomer", "pet spa", "dog spa"],
    "kennel": ["boarding", "daycare", "day care", "pet sitting"],
    "store": ["shop", "retail", "pet store", "pet shop", "supply store"],
    "mobile": ["house call", "house-call", "come to me", "at home", "in home"],
    "emergency": ["urgent", "24/7", "24-7", "24 hours", "overnight"],
}

FILTER_SYNONYMS: dict[str, list[str]] = {
    "premium": ["luxury", "high-end", "high end", "best", "top rated", "top-rated", "excellent", "quality"],
    "budget": ["cheap", "affordable", "inexpensive", "low cost", "low-cost", "economical"],
    "organic": ["natural", "holistic", "homeopathic", "alternative", "chemical-free"],
    "emergency": ["urgent", "immediate", "asap", "right now", "now", "critical"],
    "mobile": ["house call", "house-call", "come to me", "at home", "in home", "traveling"],
    "senior": ["elderly", "old", "aging", "geriatric", "mature"],
    "puppy": ["young", "baby", "newborn", "juvenile", "adolescent"],
}

# Lookup order for find_canonical
KINDS: tuple[str, ...] = ("services", "products", "locations", "business_types", "filters")


def _freeze(table: dict[str, list[str]]) -> SynonymTable:
    return MappingProxyType({k: tuple(v.lower() for v in vs) for k, vs in table.items()})


class SynonymRegistry:
    """Read-only canonical-term <-> surface-variant lookup."""

    def __init__(
        self,
        services: dict[str, list[str]] | None = None,
        products: dict[str, list[str]] | None = None,
        locations: dict[str, list[str]] | None = None,
        business_types: dict[str, list[str]] | None = None,
        filters: dict[str, list[str]] | None = None,
    ) -> None:
        self._tables: dict[str, SynonymTable] = {
            "services": _freeze(SERVICE_SYNONYMS if services is None else services),
            "products": _freeze(PRODUCT_SYNONYMS if products is None else products),
            "locations": _freeze(LOCATION_SYNONYMS if locations is None else locations),
            "business_types": _freeze(BUSINESS_TYPE_SYNONYMS if business_types is None else business_types),
            "filters": _freeze(FILTER_SYNONYMS if filters is None else filters),
        }
        # Word-bounded pattern per (kind, canonical) so "hat" does not fire on "what"
        self._patterns: dict[str, dict[str, re.Pattern[str]]] = {
            kind: {
                canonical: re.compile(
                    r"\b(?:" + "|".join(re.escape(v) for v in variants) + r")\b"
                )
                for canonical, variants in table.items()
                if variants
            }
            for kind, table in self._tables.items()
        }

    def table(self, kind: str) -> SynonymTable:
        try:
            return self._tables[kind]
        except KeyError:
            raise ValueError(f"Unknown synonym table: {kind!r}") from None

    def variants(self, kind: str, canonical: str) -> tuple[str, ...]:
        return self.table(kind).get(canonical, ())

    def find_canonical(self, variant: str) -> str | None:
        """Return the canonical term for an exact (case-insensitive) variant."""
        needle = (variant or "").strip().lower()
        if not needle:
            return None
        for kind in KINDS:
            for canonical, variants in self._tables[kind].items():
                if needle in variants:
                    return canonical
        return None

    def find_in_text(self, kind: str, text: str) -> set[str]:
        """Canonical terms of ``kind`` with at least one variant in ``text``."""
        if not text:
            return set()
        lowered = text.lower()
        return {
            canonical
            for canonical, pattern in self._patterns[kind].items()
            if pattern.search(lowered)
        }

    def suggestions(self, partial: str, limit: int = 10) -> list[str]:
        """Canonical service/product/location terms matching a partial input."""
        needle = (partial or "").strip().lower()
        if not needle:
            return []
        found: list[str] = []
        for kind in ("services", "products", "locations"):
            for canonical, variants in self._tables[kind].items():
                if needle in canonical or any(needle in v for v in variants):
                    if canonical not in found:
                        found.append(canonical)
        return found[:limit]


DEFAULT_REGISTRY = SynonymRegistry()
