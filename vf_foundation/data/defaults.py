"""
Default ValueFlows baseline.

Every entry below is provisioned; entries marked required gate readiness.
Units and actions are keyed by their ValueFlows id, specifications by name.
"""

from typing import Dict, List, Tuple

from vf_foundation.models.baseline import BaselineItem, EntityReference, RequiredBaseline
from vf_foundation.models.entities import EntityClass

# (id, label, symbol)
DEFAULT_UNITS: List[Tuple[str, str, str]] = [
    ("one", "Each", "ea"),
    ("hour", "Hour", "h"),
    ("kilogram", "Kilogram", "kg"),
    ("meter", "Meter", "m"),
    ("piece", "Piece", "pc"),
    ("minute", "Minute", "min"),
    ("second", "Second", "s"),
    ("liter", "Liter", "L"),
    ("gram", "Gram", "g"),
    ("day", "Day", "d"),
]

REQUIRED_UNITS = ("one", "hour", "kilogram", "meter")

UNIT_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "count": ("one", "piece"),
    "time": ("hour", "minute", "second", "day"),
    "weight": ("kilogram", "gram"),
    "volume": ("liter",),
    "length": ("meter",),
}


class ResourceEffect:
    INCREMENT = "increment"
    DECREMENT = "decrement"
    DECREMENT_INCREMENT = "decrementIncrement"
    NO_EFFECT = "noEffect"


# (id, label, resource effect)
DEFAULT_ACTIONS: List[Tuple[str, str, str]] = [
    ("produce", "Produce", ResourceEffect.INCREMENT),
    ("consume", "Consume", ResourceEffect.DECREMENT),
    ("use", "Use", ResourceEffect.NO_EFFECT),
    ("contribute", "Contribute", ResourceEffect.INCREMENT),
    ("transfer", "Transfer", ResourceEffect.DECREMENT_INCREMENT),
    ("fork", "Fork", ResourceEffect.INCREMENT),
    ("remix", "Remix", ResourceEffect.INCREMENT),
    ("work", "Work", ResourceEffect.NO_EFFECT),
    ("cite", "Cite", ResourceEffect.NO_EFFECT),
    ("accept", "Accept", ResourceEffect.NO_EFFECT),
]

REQUIRED_ACTIONS = ("produce", "consume", "use", "contribute", "transfer", "fork", "remix")

ACTION_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "production": ("produce", "contribute", "work"),
    "consumption": ("consume", "use"),
    "transfer": ("transfer",),
    "knowledge": ("fork", "remix", "cite"),
    "workflow": ("accept",),
}

# (name, note, default unit of resource, default unit of effort)
DEFAULT_RESOURCE_SPECIFICATIONS: List[Tuple[str, str, str, str]] = [
    ("Document", "Text-based content, reports, and documentation", "one", "hour"),
    ("Software", "Code, applications, and digital tools", "one", "hour"),
    ("Design", "Visual designs, mockups, and creative assets", "one", "hour"),
    ("Knowledge", "Expertise, skills, and intellectual resources", "one", "hour"),
    ("Dataset", "Structured data, databases, and information collections", "one", "hour"),
    ("Hardware", "Physical devices, equipment, and infrastructure", "piece", "hour"),
    ("Service", "Digital and professional services", "hour", "hour"),
    ("Material", "Physical materials and supplies", "kilogram", "hour"),
]

REQUIRED_RESOURCE_SPECIFICATIONS = ("Document", "Software")

RESOURCE_SPEC_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "digital": ("Document", "Software", "Dataset", "Design"),
    "knowledge": ("Knowledge", "Service"),
    "physical": ("Hardware", "Material"),
}

# (name, note)
DEFAULT_PROCESS_SPECIFICATIONS: List[Tuple[str, str]] = [
    ("General Discussion", "General discussions, brainstorming, and decision-making."),
    ("Software Development", "Planning, developing, and deploying software components."),
    ("Content Creation", "Creating written or visual content such as articles or designs."),
    ("Community Governance", "Community decisions, proposals, and governance tasks."),
]

REQUIRED_PROCESS_SPECIFICATIONS = ("General Discussion", "Software Development")


def units_by_category(category: str) -> List[str]:
    keys = UNIT_CATEGORIES.get(category, ())
    return [u[0] for u in DEFAULT_UNITS if u[0] in keys]


def actions_by_category(category: str) -> List[str]:
    keys = ACTION_CATEGORIES.get(category, ())
    return [a[0] for a in DEFAULT_ACTIONS if a[0] in keys]


def actions_by_effect(effect: str) -> List[str]:
    return [a[0] for a in DEFAULT_ACTIONS if a[2] == effect]


def resource_specs_by_unit(unit_key: str) -> List[str]:
    """Resource specifications whose default resource or effort unit is `unit_key`."""
    return [
        name for name, _, resource_unit, effort_unit in DEFAULT_RESOURCE_SPECIFICATIONS
        if unit_key in (resource_unit, effort_unit)
    ]


def default_baseline() -> RequiredBaseline:
    """The ValueFlows baseline this application needs."""
    units = tuple(
        BaselineItem(
            stable_key=key,
            payload={"label": label, "symbol": symbol},
            required=key in REQUIRED_UNITS,
        )
        for key, label, symbol in DEFAULT_UNITS
    )
    actions = tuple(
        BaselineItem(
            stable_key=key,
            payload={"label": label, "resourceEffect": effect},
            required=key in REQUIRED_ACTIONS,
        )
        for key, label, effect in DEFAULT_ACTIONS
    )
    resource_specs = tuple(
        BaselineItem(
            stable_key=name,
            payload={"name": name, "note": note},
            references={
                "defaultUnitOfResource": EntityReference(
                    entity_class=EntityClass.UNIT, stable_key=resource_unit
                ),
                "defaultUnitOfEffort": EntityReference(
                    entity_class=EntityClass.UNIT, stable_key=effort_unit
                ),
            },
            required=name in REQUIRED_RESOURCE_SPECIFICATIONS,
        )
        for name, note, resource_unit, effort_unit in DEFAULT_RESOURCE_SPECIFICATIONS
    )
    process_specs = tuple(
        BaselineItem(
            stable_key=name,
            payload={"name": name, "note": note},
            required=name in REQUIRED_PROCESS_SPECIFICATIONS,
        )
        for name, note in DEFAULT_PROCESS_SPECIFICATIONS
    )
    return RequiredBaseline(
        classes={
            EntityClass.UNIT: units,
            EntityClass.ACTION: actions,
            EntityClass.RESOURCE_SPECIFICATION: resource_specs,
            EntityClass.PROCESS_SPECIFICATION: process_specs,
        }
    )
