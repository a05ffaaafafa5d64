# locations.py - province / district / subdistrict lookup for the form dropdowns
import json
from functools import lru_cache
from typing import List, Optional
import config


@lru_cache(maxsize=None)
def load_locations(path: str = config.LOCATIONS_PATH) -> dict:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return {
        "provinces": data.get("provinces", []),
        "districts": data.get("districts", {}),
        "subdistricts": data.get("subdistricts", {}),
    }


def lookup(province: Optional[str] = None, district: Optional[str] = None, data: Optional[dict] = None) -> List[str]:
    """Subdistricts of `district` if given, else districts of `province`, else all provinces."""
    data = data if data is not None else load_locations()
    if district:
        return data["subdistricts"].get(district, [])
    if province:
        return data["districts"].get(province, [])
    return data["provinces"]
