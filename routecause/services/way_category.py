"""
Decoding of the provider's ``waycategory`` extra info.

The provider packs road categories of a segment into a bitmask, so a single
summary row can name several categories at once (e.g. Tunnel + Paved road).
"""

from typing import Dict, Iterable, Mapping

from routecause.models.trip import WayCategorySummary

NO_CATEGORY = "No category"

WAYCATEGORY_MAP: Dict[int, str] = {
    1: "Highway",
    2: "Steps",
    4: "Unpaved road",
    8: "Ferry",
    16: "Track",
    32: "Tunnel",
    64: "Paved road",
    128: "Ford",
}


def category_names(value: int):
    """Names of every category bit set in ``value``, lowest bit first."""
    if value == 0:
        return [NO_CATEGORY]
    names = []
    bit = 1
    while bit <= value:
        if value & bit:
            names.append(WAYCATEGORY_MAP.get(bit, f"Unknown ({bit})"))
        bit <<= 1
    return names


def decode_way_category_summary(
    summary: Iterable[Mapping[str, float]],
) -> Dict[str, WayCategorySummary]:
    """
    Turn provider summary rows ``{value, distance, amount}`` into
    ``{category name: WayCategorySummary}``.

    Distances are converted from meters to km. When several rows name the same
    category (a bitmask that shares a bit with another row), their distances and
    percentages are added together; a later row never replaces an earlier one.
    """
    result: Dict[str, WayCategorySummary] = {}

    for row in summary:
        value = int(row["value"])
        distance_km = float(row["distance"]) / 1000
        amount = float(row["amount"])

        for name in category_names(value):
            previous = result.get(name)
            if previous is None:
                result[name] = WayCategorySummary(distance_km=distance_km, percentage=amount)
            else:
                result[name] = WayCategorySummary(
                    distance_km=previous.distance_km + distance_km,
                    percentage=previous.percentage + amount,
                )

    return result
