"""
Profession scenarios and dreams.
"""

import re
from typing import Dict, List, Optional

from cashflow.config import Dream, Scenario


def _slug(label: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", label.lower()).strip("-")


# label, salary, savings, taxes, mortgage payment, car payment, credit card payment,
# retail payment, other expenses, mortgage, car loan, credit debt, retail debt
_SCENARIO_ROWS = [
    ("Airline Pilot", 9500, 400, 2350, 1300, 300, 660, 50, 2210, 143000, 15000, 22000, 1000),
    ("Business Manager", 4600, 400, 910, 700, 120, 90, 50, 1000, 75000, 6000, 3000, 1000),
    ("Doctor (MD)", 13200, 400, 3420, 1900, 380, 270, 50, 2880, 202000, 19000, 9000, 1000),
    ("Engineer", 4900, 400, 1050, 700, 140, 120, 50, 1090, 75000, 7000, 4000, 1000),
    ("Janitor", 1600, 560, 280, 200, 60, 60, 50, 300, 20000, 4000, 2000, 1000),
    ("Lawyer", 7500, 400, 1830, 1100, 220, 180, 50, 1650, 115000, 11000, 6000, 1000),
    ("Mechanic", 2000, 670, 360, 300, 60, 60, 50, 450, 31000, 3000, 2000, 1000),
    ("Nurse", 3100, 480, 600, 400, 100, 90, 50, 710, 47000, 5000, 3000, 1000),
    ("Police Officer", 3000, 520, 580, 400, 100, 60, 50, 690, 46000, 5000, 2000, 1000),
    ("Secretary", 2500, 710, 460, 400, 80, 60, 50, 570, 38000, 4000, 2000, 1000),
    ("Teacher (K-12)", 3300, 400, 630, 500, 100, 90, 50, 760, 50000, 5000, 3000, 1000),
    ("Truck Driver", 2500, 750, 460, 400, 80, 60, 50, 570, 38000, 4000, 2000, 1000),
    ("CEO", 24000, 60000, 7200, 1900, 800, 250, 50, 4200, 750000, 30000, 11000, 1000),
]

SCENARIOS: List[Scenario] = [Scenario(_slug(row[0]), *row) for row in _SCENARIO_ROWS]

_DREAM_ROWS = [
    ("STOCK MARKET FOR KIDS", "Fund a business and investment school for young capitalists."),
    ("YACHT RACING", "Spend one week racing a 12-meter yacht with a world class crew."),
    ("CANNES FILM FESTIVAL", "Party with the stars for a week in Cannes."),
    ("PRIVATE FISHING CABIN ON A MONTANA LAKE", "Own a floatplane-access fishing hideout."),
    ("PARK NAMED AFTER YOU", "Redevelop an abandoned warehouse into a public park."),
    ("RUN FOR MAYOR", "Run and win a mayoral race."),
    ("HELI SKI THE SWISS ALPS", "Ski remote Swiss Alps drops by helicopter."),
    ("DINNER WITH THE PRESIDENT", "Host a gala dinner with world leaders."),
    ("7 WONDERS OF THE WORLD", "Tour the seven wonders in absolute luxury."),
    ("SAVE THE OCEAN MAMMALS", "Sponsor an expedition to protect endangered sea animals."),
    ("BE A JET SETTER", "Fly by private jet for a year."),
    ("GOLF AROUND THE WORLD", "Play the fifty best golf courses worldwide."),
    ("A KIDS LIBRARY", "Build a library wing for young writers and artists."),
    ("SOUTH SEA ISLAND FANTASY", "Live the South Sea island fantasy for two months."),
    ("CRUISE THE MEDITERRANEAN", "Sail your private yacht through hidden harbors."),
    ("AFRICAN PHOTO SAFARI", "Take six friends on a photo safari."),
    ("BUY A FOREST", "Protect 1,000 acres of old-growth forest."),
]

DREAMS: List[Dream] = [
    Dream(_slug(title), title, description, 50000 + index * 5000)
    for index, (title, description) in enumerate(_DREAM_ROWS)
]

_SCENARIOS_BY_ID: Dict[str, Scenario] = {s.id: s for s in SCENARIOS}
_DREAMS_BY_ID: Dict[str, Dream] = {d.id: d for d in DREAMS}


def get_scenario(scenario_id: Optional[str]) -> Optional[Scenario]:
    """Look up a scenario by id; None for unknown ids."""
    if scenario_id is None:
        return None
    return _SCENARIOS_BY_ID.get(scenario_id)


def get_dream(dream_id: Optional[str]) -> Optional[Dream]:
    if dream_id is None:
        return None
    return _DREAMS_BY_ID.get(dream_id)


def default_scenario(seat: int) -> Scenario:
    """Scenario handed out when a seat did not pick one."""
    return SCENARIOS[seat % len(SCENARIOS)]
