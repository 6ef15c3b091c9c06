"""Infrastructure and water-body tallies from OpenStreetMap (Overpass).

Each returned element is classified by an ordered rule table. An element
without a ``name`` tag is skipped, and every category keeps a set of
distinct names, so a facility mapped twice under the same name counts once.
"""

import logging
from collections.abc import Callable

import httpx

import config
from overpass import fetch_overpass

logger = logging.getLogger(__name__)

Tags = dict[str, str]
Rule = tuple[str, Callable[[Tags], bool]]

INFRASTRUCTURE_CATEGORIES = ["hospitals", "schools", "colleges", "railwayStations", "metroStations"]

# Every rule is evaluated: a node matching two rules is counted in both.
INFRASTRUCTURE_RULES: list[Rule] = [
    ("hospitals", lambda t: t.get("amenity") == "hospital"),
    ("schools", lambda t: t.get("amenity") == "school"),
    ("colleges", lambda t: t.get("amenity") == "college"),
    ("railwayStations", lambda t: t.get("railway") == "station" and t.get("station") != "subway"),
    ("metroStations", lambda t: (
        t.get("station") == "subway"
        or t.get("railway") == "subway_entrance"
        or (t.get("public_transport") == "station" and t.get("subway") == "yes")
    )),
]

# First matching rule wins.
WATER_RULES: list[Rule] = [
    ("rivers", lambda t: t.get("waterway") == "river"),
    ("otherWaterBodies", lambda t: True),
]


def infrastructure_query(lat: float, lon: float, radius: int) -> str:
    around = f"around:{radius},{lat},{lon}"
    return f"""
[out:json][timeout:25];
(
  node["amenity"="hospital"]({around});
  node["amenity"="school"]({around});
  node["amenity"="college"]({around});
  node["railway"="station"]["station"!="subway"]({around});
  (
    node["railway"="station"]["station"="subway"]({around});
    node["railway"="subway_entrance"]({around});
    node["public_transport"="station"]["subway"="yes"]({around});
  );
);
out tags;
"""


def water_query(lat: float, lon: float, radius: int) -> str:
    around = f"around:{radius},{lat},{lon}"
    return f"""
[out:json][timeout:25];
(
  way["waterway"]({around});
  way["natural"="water"]({around});
);
out tags;
"""


def dedup_key(name: str, policy: str | None = None) -> str:
    """Key used to decide whether two names are the same facility."""
    policy = policy or config.NAME_DEDUP
    if policy == "normalized":
        return " ".join(name.split()).casefold()
    return name


class NameSet:
    """Insertion-ordered set of names, deduplicated under a dedup policy."""

    def __init__(self, policy: str | None = None):
        self.policy = policy
        self._names: dict[str, str] = {}

    def add(self, name: str) -> None:
        self._names.setdefault(dedup_key(name, self.policy), name)

    def __len__(self) -> int:
        return len(self._names)

    def names(self) -> list[str]:
        return list(self._names.values())


def classify(
    elements: list[dict],
    rules: list[Rule],
    categories: list[str],
    first_match: bool = False,
    policy: str | None = None,
) -> dict[str, NameSet]:
    sets = {c: NameSet(policy) for c in categories}
    for el in elements:
        tags = el.get("tags") or {}
        name = tags.get("name")
        if not name:
            continue
        for category, predicate in rules:
            if predicate(tags):
                sets[category].add(name)
                if first_match:
                    break
    return sets


def summarize_infrastructure(elements: list[dict], policy: str | None = None) -> dict:
    sets = classify(elements, INFRASTRUCTURE_RULES, INFRASTRUCTURE_CATEGORIES, policy=policy)
    summary: dict = {c: len(sets[c]) for c in INFRASTRUCTURE_CATEGORIES}
    summary["names"] = {c: sets[c].names() for c in INFRASTRUCTURE_CATEGORIES}
    return summary


def summarize_water_bodies(elements: list[dict], policy: str | None = None) -> dict:
    sets = classify(elements, WATER_RULES, ["rivers", "otherWaterBodies"], first_match=True, policy=policy)
    return {c: {"count": len(s), "names": s.names()} for c, s in sets.items()}


def empty_infrastructure() -> dict:
    return summarize_infrastructure([])


def empty_water_bodies() -> dict:
    return summarize_water_bodies([])


async def fetch_infrastructure(client: httpx.AsyncClient, lat: float, lon: float) -> dict:
    query = infrastructure_query(lat, lon, config.SEARCH_RADIUS_M)
    data = await fetch_overpass(client, query)
    infrastructure = summarize_infrastructure(data.get("elements") or [])
    logger.info(
        "Infrastructure data fetched: %s",
        {c: infrastructure[c] for c in INFRASTRUCTURE_CATEGORIES},
    )
    return infrastructure


async def fetch_water_bodies(client: httpx.AsyncClient, lat: float, lon: float) -> dict:
    query = water_query(lat, lon, config.SEARCH_RADIUS_M)
    data = await fetch_overpass(client, query)
    water_bodies = summarize_water_bodies(data.get("elements") or [])
    logger.info(
        "Water bodies fetched: %d rivers, %d other",
        water_bodies["rivers"]["count"], water_bodies["otherWaterBodies"]["count"],
    )
    return water_bodies
