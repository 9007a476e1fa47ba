"""
Bidirectional nickname mapping.

Used by providers to widen backend queries with an OR-clause and by the
scorer for the (smaller) nickname-match bonus.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Set

# ---------------------------------------------------------------------------
# Nickname groups: every name in a group is a variant of every other
# ---------------------------------------------------------------------------
NICKNAME_GROUPS: List[List[str]] = [
    ["james", "jim", "jimmy", "jamie"],
    ["robert", "bob", "bobby", "rob", "robbie"],
    ["william", "bill", "billy", "will", "willy", "liam"],
    ["richard", "rick", "ricky", "dick", "rich"],
    ["elizabeth", "liz", "lizzy", "beth", "betty", "eliza"],
    ["michael", "mike", "mikey", "mick"],
    ["david", "dave", "davey"],
    ["joseph", "joe", "joey"],
    ["thomas", "tom", "tommy"],
    ["charles", "charlie", "chuck", "chas"],
    ["christopher", "chris", "kit"],
    ["daniel", "dan", "danny"],
    ["matthew", "matt", "matty"],
    ["anthony", "tony"],
    ["donald", "don", "donnie"],
    ["steven", "steve", "stephen"],
    ["edward", "ed", "eddie", "ted", "teddy"],
    ["kenneth", "ken", "kenny"],
    ["ronald", "ron", "ronnie"],
    ["margaret", "peggy", "maggie", "meg", "marge"],
    ["patricia", "pat", "patty", "trish"],
    ["jennifer", "jen", "jenny"],
    ["catherine", "kate", "kathy", "cathy", "katherine", "kathryn"],
    ["susan", "sue", "susie", "suzy"],
    ["nancy", "nan"],
    ["barbara", "barb", "barbie"],
    ["dorothy", "dot", "dottie"],
    ["deborah", "deb", "debbie", "debra"],
    ["sandra", "sandy"],
    ["linda", "lindy"],
    ["theodore", "theo", "ted", "teddy"],
    ["alexander", "alex", "sandy"],
    ["benjamin", "ben", "benny"],
    ["samuel", "sam", "sammy"],
    ["frederick", "fred", "freddy", "fritz"],
    ["gerald", "jerry", "gerry"],
    ["harold", "harry", "hal"],
    ["lawrence", "larry"],
    ["nicholas", "nick", "nicky"],
    ["raymond", "ray"],
    ["walter", "walt", "wally"],
    ["virginia", "ginny", "ginger"],
    ["rebecca", "becky", "becca"],
    ["victoria", "vicky", "tori"],
    ["jacqueline", "jackie"],
    ["judith", "judy", "judi"],
    ["joanne", "jo", "joann"],
    ["helen", "ellie", "ella"],
    ["ruth", "ruthie"],
]


def _build_nickname_map(groups: Iterable[List[str]]) -> Dict[str, Set[str]]:
    # A name listed in several groups ("ted", "sandy") gets the union.
    mapping: Dict[str, Set[str]] = defaultdict(set)
    for group in groups:
        for name in group:
            mapping[name].update(group)
    return dict(mapping)


_NICKNAME_MAP = _build_nickname_map(NICKNAME_GROUPS)


def variants(name: str) -> Set[str]:
    """Return all known variants of *name* (lower-case, includes the name).

    Args:
        name: A first name or nickname in any casing.

    Returns:
        Set of lower-case variants; ``{name}`` when the name is unknown,
        empty when *name* is blank.
    """
    key = (name or "").strip().lower()
    if not key:
        return set()
    return set(_NICKNAME_MAP.get(key, {key}))


def is_nickname_match(name1: str, name2: str) -> bool:
    """True when *name2* is a known variant of *name1* but not the same name."""
    n1 = (name1 or "").strip().lower()
    n2 = (name2 or "").strip().lower()
    if not n1 or not n2 or n1 == n2:
        return False
    return n2 in _NICKNAME_MAP.get(n1, set())


def build_or_clause(names: Iterable[str]) -> str:
    """Render names as a search OR-clause, e.g. ``(Bill OR William)``.

    A single name is returned bare; duplicates (case-insensitive) are dropped.
    """
    seen: Set[str] = set()
    unique: List[str] = []
    for n in names:
        key = (n or "").strip().lower()
        if key and key not in seen:
            seen.add(key)
            unique.append(key.capitalize())

    if not unique:
        return ""
    if len(unique) == 1:
        return unique[0]
    return "(" + " OR ".join(unique) + ")"
