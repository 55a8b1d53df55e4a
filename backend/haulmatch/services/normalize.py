"""Canonical vocabulary for driver and job attributes.

Profiles, applications, leads and job postings describe the same concepts with
free-form strings ("Owner Operator", "Class-A", "Reefer", "TX"). The scorers
compare canonical values only, so every raw attribute passes through one of
the functions below first.

All functions are total:
- None, empty strings and non-string values return None (or -1 for the
  experience ordinal).
- Unknown strings pass through lower-cased and stripped, so a new vocabulary
  value degrades to "no match" instead of an error.
"""

# =============================================================================
# Vocabularies
# =============================================================================

_DRIVER_TYPE_MAP: dict[str, str] = {
    "company": "company",
    "company driver": "company",
    "company-driver": "company",
    "owner-operator": "owner-operator",
    "owner operator": "owner-operator",
    "owneroperator": "owner-operator",
    "lease": "lease",
    "lease operator": "lease",
    "lease-operator": "lease",
    "student": "student",
    "student / trainee": "student",
    "trainee": "student",
}

_LICENSE_MAP: dict[str, str] = {
    "a": "a",
    "class a": "a",
    "class-a": "a",
    "b": "b",
    "class b": "b",
    "class-b": "b",
    "c": "c",
    "class c": "c",
    "class-c": "c",
    "permit": "permit",
    "permit only": "permit",
}

# none=0, <1yr=1, 1-3yr=2, 3-5yr=3, 5+yr=4
_EXPERIENCE_ORDINAL: dict[str, int] = {
    "none": 0,
    "less-1": 1,
    "< 1 year": 1,
    "1-3": 2,
    "1–3 years": 2,
    "1-3 years": 2,
    "3-5": 3,
    "3–5 years": 3,
    "3-5 years": 3,
    "5+": 4,
    "5+ years": 4,
}

_ROUTE_MAP: dict[str, str] = {
    "otr": "otr",
    "over the road": "otr",
    "local": "local",
    "regional": "regional",
    "dedicated": "dedicated",
    "ltl": "ltl",
    "less than truckload": "ltl",
}

_FREIGHT_MAP: dict[str, str] = {
    "box": "box",
    "car hauler": "carHaul",
    "carhauler": "carHaul",
    "car haul": "carHaul",
    "carhaul": "carHaul",
    "drop and hook": "dropAndHook",
    "drop & hook": "dropAndHook",
    "dropandhook": "dropAndHook",
    "dry bulk": "dryBulk",
    "drybulk": "dryBulk",
    "dry van": "dryVan",
    "dryvan": "dryVan",
    "flatbed": "flatbed",
    "hopper bottom": "hopperBottom",
    "hopperbottom": "hopperBottom",
    "intermodal": "intermodal",
    "oil field": "oilField",
    "oilfield": "oilField",
    "oversize load": "oversizeLoad",
    "oversizeload": "oversizeLoad",
    "oversize": "oversizeLoad",
    "refrigerated": "refrigerated",
    "reefer": "refrigerated",
    "tanker": "tanker",
}

_TEAM_MAP: dict[str, str] = {
    "solo": "solo",
    "team": "team",
    "both": "both",
    "either": "both",
}

US_STATES: frozenset[str] = frozenset(
    {
        "alabama", "alaska", "arizona", "arkansas", "california", "colorado",
        "connecticut", "delaware", "florida", "georgia", "hawaii", "idaho",
        "illinois", "indiana", "iowa", "kansas", "kentucky", "louisiana",
        "maine", "maryland", "massachusetts", "michigan", "minnesota",
        "mississippi", "missouri", "montana", "nebraska", "nevada",
        "new hampshire", "new jersey", "new mexico", "new york",
        "north carolina", "north dakota", "ohio", "oklahoma", "oregon",
        "pennsylvania", "rhode island", "south carolina", "south dakota",
        "tennessee", "texas", "utah", "vermont", "virginia", "washington",
        "west virginia", "wisconsin", "wyoming",
    }
)  # fmt: skip

STATE_ABBREVIATIONS: dict[str, str] = {
    "al": "alabama", "ak": "alaska", "az": "arizona", "ar": "arkansas",
    "ca": "california", "co": "colorado", "ct": "connecticut", "de": "delaware",
    "fl": "florida", "ga": "georgia", "hi": "hawaii", "id": "idaho",
    "il": "illinois", "in": "indiana", "ia": "iowa", "ks": "kansas",
    "ky": "kentucky", "la": "louisiana", "me": "maine", "md": "maryland",
    "ma": "massachusetts", "mi": "michigan", "mn": "minnesota",
    "ms": "mississippi", "mo": "missouri", "mt": "montana", "ne": "nebraska",
    "nv": "nevada", "nh": "new hampshire", "nj": "new jersey",
    "nm": "new mexico", "ny": "new york", "nc": "north carolina",
    "nd": "north dakota", "oh": "ohio", "ok": "oklahoma", "or": "oregon",
    "pa": "pennsylvania", "ri": "rhode island", "sc": "south carolina",
    "sd": "south dakota", "tn": "tennessee", "tx": "texas", "ut": "utah",
    "vt": "vermont", "va": "virginia", "wa": "washington",
    "wv": "west virginia", "wi": "wisconsin", "wy": "wyoming",
}  # fmt: skip

# Must stay symmetric: b in NEIGHBORS[a] <=> a in NEIGHBORS[b].
NEIGHBORING_STATES: dict[str, frozenset[str]] = {
    state: frozenset(neighbors)
    for state, neighbors in {
        "alabama": ["florida", "georgia", "mississippi", "tennessee"],
        "alaska": [],
        "arizona": ["california", "colorado", "nevada", "new mexico", "utah"],
        "arkansas": ["louisiana", "mississippi", "missouri", "oklahoma", "tennessee", "texas"],
        "california": ["arizona", "nevada", "oregon"],
        "colorado": ["arizona", "kansas", "nebraska", "new mexico", "oklahoma", "utah", "wyoming"],
        "connecticut": ["massachusetts", "new york", "rhode island"],
        "delaware": ["maryland", "new jersey", "pennsylvania"],
        "florida": ["alabama", "georgia"],
        "georgia": ["alabama", "florida", "north carolina", "south carolina", "tennessee"],
        "hawaii": [],
        "idaho": ["montana", "nevada", "oregon", "utah", "washington", "wyoming"],
        "illinois": ["indiana", "iowa", "kentucky", "missouri", "wisconsin"],
        "indiana": ["illinois", "kentucky", "michigan", "ohio"],
        "iowa": ["illinois", "minnesota", "missouri", "nebraska", "south dakota", "wisconsin"],
        "kansas": ["colorado", "missouri", "nebraska", "oklahoma"],
        "kentucky": ["illinois", "indiana", "missouri", "ohio", "tennessee", "virginia", "west virginia"],
        "louisiana": ["arkansas", "mississippi", "texas"],
        "maine": ["new hampshire"],
        "maryland": ["delaware", "pennsylvania", "virginia", "west virginia"],
        "massachusetts": ["connecticut", "new hampshire", "new york", "rhode island", "vermont"],
        "michigan": ["indiana", "ohio", "wisconsin"],
        "minnesota": ["iowa", "north dakota", "south dakota", "wisconsin"],
        "mississippi": ["alabama", "arkansas", "louisiana", "tennessee"],
        "missouri": ["arkansas", "illinois", "iowa", "kansas", "kentucky", "nebraska", "oklahoma", "tennessee"],
        "montana": ["idaho", "north dakota", "south dakota", "wyoming"],
        "nebraska": ["colorado", "iowa", "kansas", "missouri", "south dakota", "wyoming"],
        "nevada": ["arizona", "california", "idaho", "oregon", "utah"],
        "new hampshire": ["maine", "massachusetts", "vermont"],
        "new jersey": ["delaware", "new york", "pennsylvania"],
        "new mexico": ["arizona", "colorado", "oklahoma", "texas", "utah"],
        "new york": ["connecticut", "massachusetts", "new jersey", "pennsylvania", "vermont"],
        "north carolina": ["georgia", "south carolina", "tennessee", "virginia"],
        "north dakota": ["minnesota", "montana", "south dakota"],
        "ohio": ["indiana", "kentucky", "michigan", "pennsylvania", "west virginia"],
        "oklahoma": ["arkansas", "colorado", "kansas", "missouri", "new mexico", "texas"],
        "oregon": ["california", "idaho", "nevada", "washington"],
        "pennsylvania": ["delaware", "maryland", "new jersey", "new york", "ohio", "west virginia"],
        "rhode island": ["connecticut", "massachusetts"],
        "south carolina": ["georgia", "north carolina"],
        "south dakota": ["iowa", "minnesota", "montana", "nebraska", "north dakota", "wyoming"],
        "tennessee": ["alabama", "arkansas", "georgia", "kentucky", "mississippi", "missouri", "north carolina", "virginia"],
        "texas": ["arkansas", "louisiana", "new mexico", "oklahoma"],
        "utah": ["arizona", "colorado", "idaho", "nevada", "new mexico", "wyoming"],
        "vermont": ["massachusetts", "new hampshire", "new york"],
        "virginia": ["kentucky", "maryland", "north carolina", "tennessee", "west virginia"],
        "washington": ["idaho", "oregon"],
        "west virginia": ["kentucky", "maryland", "ohio", "pennsylvania", "virginia"],
        "wisconsin": ["illinois", "iowa", "michigan", "minnesota"],
        "wyoming": ["colorado", "idaho", "montana", "nebraska", "south dakota", "utah"],
    }.items()
}  # fmt: skip

# Longest names first so "west virginia" wins over "virginia" in substring search
_STATES_BY_LENGTH: tuple[str, ...] = tuple(
    sorted(US_STATES, key=lambda s: (-len(s), s))
)


# =============================================================================
# Helpers
# =============================================================================


def _clean(raw: object) -> str | None:
    """Lower-case and strip a raw value; None for empty or non-string input."""
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip().lower()
    return cleaned or None


def _lookup(raw: object, table: dict[str, str]) -> str | None:
    cleaned = _clean(raw)
    if cleaned is None:
        return None
    return table.get(cleaned, cleaned)


# =============================================================================
# Public normalizers
# =============================================================================


def normalize_driver_type(raw: object) -> str | None:
    """Map a driver type to company / owner-operator / lease / student."""
    return _lookup(raw, _DRIVER_TYPE_MAP)


def normalize_license_class(raw: object) -> str | None:
    """Map a CDL class to a / b / c / permit."""
    return _lookup(raw, _LICENSE_MAP)


def normalize_route_type(raw: object) -> str | None:
    """Map a route type to otr / local / regional / dedicated / ltl."""
    return _lookup(raw, _ROUTE_MAP)


def normalize_freight_type(raw: object) -> str | None:
    """Map a freight/hauler type to its canonical key (e.g. reefer → refrigerated)."""
    return _lookup(raw, _FREIGHT_MAP)


def normalize_team_pref(raw: object) -> str | None:
    """Map a team preference to solo / team / both ("either" folds to both)."""
    return _lookup(raw, _TEAM_MAP)


def experience_ordinal(raw: object) -> int:
    """Return the experience ordinal (0-4), or -1 when unknown.

    Args:
        raw: Experience string such as "none", "less-1", "1-3", "5+ years".

    Returns:
        none=0, less than a year=1, 1-3 years=2, 3-5 years=3, 5+ years=4,
        -1 for absent or unrecognized values.
    """
    cleaned = _clean(raw)
    if cleaned is None:
        return -1
    return _EXPERIENCE_ORDINAL.get(cleaned, -1)


def normalize_experience(raw: object) -> str | None:
    """Fold verbose experience strings to the short canonical form.

    "5+ years" → "5+", "3–5 years" → "3-5", "Less than 1 year" → "less-1".
    Unrecognized strings are returned stripped.
    """
    if not isinstance(raw, str) or not raw.strip():
        return None
    lower = raw.strip().lower()
    if "5+" in lower or "5 +" in lower:
        return "5+"
    if "3-5" in lower or "3–5" in lower:
        return "3-5"
    if "1-3" in lower or "1–3" in lower:
        return "1-3"
    if "less" in lower or "< 1" in lower:
        return "less-1"
    if lower == "none":
        return "none"
    return raw.strip()


# =============================================================================
# Geography
# =============================================================================


def _state_from_tokens(tokens: list[str]) -> str | None:
    # Two-word names first so "west virginia" is not read as "virginia"
    for i, token in enumerate(tokens):
        pair = " ".join(tokens[i : i + 2])
        if pair in US_STATES:
            return pair
        if token in US_STATES:
            return token
        if token in STATE_ABBREVIATIONS:
            return STATE_ABBREVIATIONS[token]
    return None


def extract_state(location: object) -> str | None:
    """Extract a canonical (lower-case) US state name from a location string.

    Resolution order:
    1. The whole string is a state name ("Texas").
    2. The whole string is a two-letter abbreviation ("TX").
    3. A comma-delimited part is a state name or abbreviation
       ("Dallas, TX", "Charleston, West Virginia").
    4. Scanning comma/whitespace tokens left to right, the first state name
       or abbreviation wins ("Dallas TX", "Toledo OH Michigan border").
    5. A state name appears as a substring, longest names first
       ("Ohio-based").

    Args:
        location: Free-text location or state string.

    Returns:
        Canonical state name, or None if no state could be resolved.
    """
    lower = _clean(location)
    if lower is None:
        return None

    if lower in US_STATES:
        return lower

    if lower in STATE_ABBREVIATIONS:
        return STATE_ABBREVIATIONS[lower]

    for part in (p.strip(" .") for p in lower.split(",")):
        if part in US_STATES:
            return part
        if part in STATE_ABBREVIATIONS:
            return STATE_ABBREVIATIONS[part]

    tokens = [t.strip(".") for t in lower.replace(",", " ").split()]
    state = _state_from_tokens(tokens)
    if state is not None:
        return state

    for name in _STATES_BY_LENGTH:
        if name in lower:
            return name

    return None


def are_neighboring_states(a: object, b: object) -> bool:
    """Return True if state b borders state a.

    Both arguments must already be canonical state names (see extract_state);
    they are lower-cased and stripped before lookup.
    """
    state_a = _clean(a)
    state_b = _clean(b)
    if state_a is None or state_b is None:
        return False
    return state_b in NEIGHBORING_STATES.get(state_a, frozenset())
