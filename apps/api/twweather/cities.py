from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

# CWA location vocabulary. Names must match the provider exactly (臺, not 台).
_ALL_CITIES: Dict[str, str] = {
    # Special municipalities
    "taipei": "臺北市",
    "new_taipei": "新北市",
    "taoyuan": "桃園市",
    "taichung": "臺中市",
    "tainan": "臺南市",
    "kaohsiung": "高雄市",
    # North
    "keelung": "基隆市",
    "hsinchu_city": "新竹市",
    "hsinchu_county": "新竹縣",
    "yilan": "宜蘭縣",
    # Central
    "miaoli": "苗栗縣",
    "changhua": "彰化縣",
    "nantou": "南投縣",
    "yunlin": "雲林縣",
    # South
    "chiayi_city": "嘉義市",
    "chiayi_county": "嘉義縣",
    "pingtung": "屏東縣",
    # East
    "hualien": "花蓮縣",
    "taitung": "臺東縣",
    # Outlying islands
    "penghu": "澎湖縣",
    "kinmen": "金門縣",
    "lienchiang": "連江縣",
}

_MUNICIPALITIES = ("taipei", "new_taipei", "taoyuan", "taichung", "tainan", "kaohsiung")

CITY_SETS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "all": MappingProxyType(dict(_ALL_CITIES)),
    "municipalities": MappingProxyType({code: _ALL_CITIES[code] for code in _MUNICIPALITIES}),
})


class CityDirectory:
    """Read-only lookup from caller-facing city codes to CWA location names."""

    def __init__(self, cities: Mapping[str, str]):
        self._cities = MappingProxyType(dict(cities))

    @classmethod
    def for_set(cls, name: str = "all") -> "CityDirectory":
        if name not in CITY_SETS:
            raise ValueError(f"Unknown city set {name!r}; expected one of {sorted(CITY_SETS)}")
        return cls(CITY_SETS[name])

    def resolve(self, code: Any) -> Optional[str]:
        # Exact, case-sensitive match; anything else is not found.
        if not isinstance(code, str):
            return None
        return self._cities.get(code)

    def codes(self) -> Tuple[str, ...]:
        return tuple(self._cities)

    def as_mapping(self) -> Mapping[str, str]:
        return self._cities

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code in self._cities

    def __len__(self) -> int:
        return len(self._cities)

    def __iter__(self) -> Iterator[str]:
        return iter(self._cities)
