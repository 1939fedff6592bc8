"""Brazilian location normalizer: UF codes, state names, main cities."""

import re
import unicodedata
from types import MappingProxyType
from typing import Optional

# UF code to full state name
BR_STATES = MappingProxyType({
    "AC": "Acre", "AL": "Alagoas", "AP": "Amapá", "AM": "Amazonas",
    "BA": "Bahia", "CE": "Ceará", "DF": "Distrito Federal", "ES": "Espírito Santo",
    "GO": "Goiás", "MA": "Maranhão", "MT": "Mato Grosso", "MS": "Mato Grosso do Sul",
    "MG": "Minas Gerais", "PA": "Pará", "PB": "Paraíba", "PR": "Paraná",
    "PE": "Pernambuco", "PI": "Piauí", "RJ": "Rio de Janeiro", "RN": "Rio Grande do Norte",
    "RS": "Rio Grande do Sul", "RO": "Rondônia", "RR": "Roraima", "SC": "Santa Catarina",
    "SP": "São Paulo", "SE": "Sergipe", "TO": "Tocantins",
})
UF_CODES = frozenset(BR_STATES)


def fold(text: str) -> str:
    """Lowercase and strip diacritics ("São Paulo" → "sao paulo")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower().strip()


STATE_NAMES = MappingProxyType({fold(name): code for code, name in BR_STATES.items()})

# Cities the site lists events for, with their UF
MAIN_CITIES = MappingProxyType({
    "São Paulo": "SP",
    "Rio de Janeiro": "RJ",
    "Belo Horizonte": "MG",
    "Curitiba": "PR",
    "Porto Alegre": "RS",
    "Brasília": "DF",
    "Recife": "PE",
    "Florianópolis": "SC",
    "Salvador": "BA",
    "Fortaleza": "CE",
    "Goiânia": "GO",
    "Campinas": "SP",
})
MAIN_CITY_NAMES = MappingProxyType({fold(name): name for name in MAIN_CITIES})


def normalize_state(raw: Optional[str]) -> Optional[str]:
    """Map a UF code or state name to the two-letter UF, or None."""
    if not raw:
        return None
    cleaned = raw.strip().strip(".")
    if cleaned.upper() in UF_CODES:
        return cleaned.upper()
    folded = fold(cleaned)
    if folded in STATE_NAMES:
        return STATE_NAMES[folded]
    # "BR-SP" (ISO 3166-2)
    iso = re.fullmatch(r"br-([a-z]{2})", folded)
    if iso and iso.group(1).upper() in UF_CODES:
        return iso.group(1).upper()
    return None


def normalize_city(raw: Optional[str]) -> Optional[str]:
    """Clean a city name; known cities get their canonical spelling."""
    if not raw:
        return None
    cleaned = re.sub(r"\s+", " ", raw).strip(" ,-/")
    if not cleaned:
        return None
    return MAIN_CITY_NAMES.get(fold(cleaned), cleaned)


def state_for_city(city: Optional[str]) -> Optional[str]:
    """UF of a known main city, or None."""
    if not city:
        return None
    canonical = MAIN_CITY_NAMES.get(fold(city))
    return MAIN_CITIES.get(canonical) if canonical else None
