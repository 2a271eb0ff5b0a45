"""Canonical expense category table.

Every category-dependent lookup (importance, icons, chart colors and
savings templates) reads from :data:`CATEGORY_TABLE` so the prediction
engine, the savings advisor and the charts always agree on the same set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

DEFAULT_ICON = '📝'
DEFAULT_COLOR = '#6b7280'


@dataclass(frozen=True)
class SavingsTemplate:
    action_items: Tuple[str, ...]
    savings_rate: float


@dataclass(frozen=True)
class CategoryProfile:
    key: str
    label: str
    icon: str
    color: str
    is_important: bool = False
    aliases: Tuple[str, ...] = field(default_factory=tuple)
    savings_template: Optional[SavingsTemplate] = None


CATEGORY_TABLE: Dict[str, CategoryProfile] = {
    'SAVINGS': CategoryProfile(
        key='SAVINGS',
        label='Savings',
        icon='💰',
        color='#10b981',
        aliases=('AHORRO',),
    ),
    'FOOD': CategoryProfile(
        key='FOOD',
        label='Food',
        icon='🍽️',
        color='#ef4444',
        is_important=True,
        aliases=('COMIDA', 'ALIMENTACIÓN', 'ALIMENTACION'),
        savings_template=SavingsTemplate(
            action_items=(
                'Plan weekly menus to avoid impulse purchases',
                'Cook at home more often instead of eating out',
                'Buy staple ingredients in bulk',
                'Take advantage of supermarket offers and discounts',
            ),
            savings_rate=0.20,
        ),
    ),
    'HOUSING': CategoryProfile(
        key='HOUSING',
        label='Housing',
        icon='🏠',
        color='#eab308',
        is_important=True,
        aliases=('CASA', 'HOGAR'),
    ),
    'MISC': CategoryProfile(
        key='MISC',
        label='Miscellaneous',
        icon='🛒',
        color='#6b7280',
        aliases=('GASTOS VARIOS', 'OTROS'),
        savings_template=SavingsTemplate(
            action_items=(
                'Categorize these expenses better to spot patterns',
                'Set a monthly limit for miscellaneous spending',
                'Ask yourself whether each purchase is really necessary',
                'Wait 24 hours before any unplanned purchase',
            ),
            savings_rate=0.20,
        ),
    ),
    'SPORTS': CategoryProfile(
        key='SPORTS',
        label='Sports',
        icon='⚽',
        color='#ec4899',
        aliases=('DEPORTES',),
    ),
    'HEALTH': CategoryProfile(
        key='HEALTH',
        label='Health',
        icon='🏥',
        color='#3b82f6',
        is_important=True,
        aliases=('SALUD',),
    ),
    'SUBSCRIPTIONS': CategoryProfile(
        key='SUBSCRIPTIONS',
        label='Subscriptions',
        icon='📺',
        color='#8b5cf6',
        is_important=True,
        aliases=('SUSCRIPCIONES',),
    ),
    'STUDY': CategoryProfile(
        key='STUDY',
        label='Study',
        icon='📚',
        color='#06b6d4',
        is_important=True,
        aliases=('ESTUDIO', 'EDUCACIÓN', 'EDUCACION'),
    ),
    'ENTERTAINMENT': CategoryProfile(
        key='ENTERTAINMENT',
        label='Entertainment',
        icon='🎬',
        color='#22c55e',
        aliases=('ENTRETENIMIENTO',),
        savings_template=SavingsTemplate(
            action_items=(
                'Look for free activities such as parks and public events',
                'Use discount days (e.g. cheap cinema Tuesdays)',
                'Share subscriptions with family or friends',
                'Try home entertainment like board games',
            ),
            savings_rate=0.25,
        ),
    ),
    'SERVICES': CategoryProfile(
        key='SERVICES',
        label='Services',
        icon='🔧',
        color='#84cc16',
        is_important=True,
        aliases=('SERVICIOS',),
        savings_template=SavingsTemplate(
            action_items=(
                'Review and negotiate utility rates',
                'Consider switching to cheaper providers',
                'Apply energy-saving measures at home',
                'Bundle services with one provider for discounts',
            ),
            savings_rate=0.10,
        ),
    ),
    'TRANSPORT': CategoryProfile(
        key='TRANSPORT',
        label='Transport',
        icon='🚗',
        color='#f97316',
        is_important=True,
        aliases=('TRANSPORTE',),
        savings_template=SavingsTemplate(
            action_items=(
                'Use public transport whenever possible',
                'Walk or cycle for short distances',
                'Share rides with colleagues or friends',
                'Keep your vehicle well maintained for better efficiency',
            ),
            savings_rate=0.15,
        ),
    ),
}

CATEGORY_KEYS: Tuple[str, ...] = tuple(CATEGORY_TABLE)
IMPORTANT_CATEGORIES = frozenset(key for key, profile in CATEGORY_TABLE.items() if profile.is_important)

_ALIAS_INDEX: Dict[str, str] = {
    alias: profile.key
    for profile in CATEGORY_TABLE.values()
    for alias in profile.aliases
}


def normalize_category(value: object) -> Optional[str]:
    """Map a raw category label to its canonical key, or ``None`` if unknown."""
    if not isinstance(value, str):
        return None
    text = value.strip().upper()
    if text in CATEGORY_TABLE:
        return text
    return _ALIAS_INDEX.get(text)


def is_important_category(category: str) -> bool:
    return category in IMPORTANT_CATEGORIES


def get_category_icon(category: str, default: str = DEFAULT_ICON) -> str:
    profile = CATEGORY_TABLE.get(category)
    return profile.icon if profile else default


def get_category_color(category: str) -> str:
    profile = CATEGORY_TABLE.get(category)
    return profile.color if profile else DEFAULT_COLOR


def get_category_label(category: str) -> str:
    profile = CATEGORY_TABLE.get(category)
    return profile.label if profile else str(category)


def get_savings_template(category: str) -> Optional[SavingsTemplate]:
    profile = CATEGORY_TABLE.get(category)
    return profile.savings_template if profile else None


def validate_category_table(table: Optional[Dict[str, CategoryProfile]] = None) -> List[str]:
    """Return a list of consistency problems found in a category table."""
    table = CATEGORY_TABLE if table is None else table
    errors: List[str] = []
    seen_aliases: Dict[str, str] = {}

    for key, profile in table.items():
        if profile.key != key:
            errors.append(f"{key}: profile key '{profile.key}' does not match table key")
        if not profile.label.strip():
            errors.append(f"{key}: missing label")
        if not profile.icon:
            errors.append(f"{key}: missing icon")
        if not profile.color.startswith('#'):
            errors.append(f"{key}: color '{profile.color}' is not a hex value")
        template = profile.savings_template
        if template is not None:
            if not 0 < template.savings_rate <= 1:
                errors.append(f"{key}: savings rate {template.savings_rate} outside (0, 1]")
            if not template.action_items:
                errors.append(f"{key}: savings template has no action items")
        for alias in profile.aliases:
            if alias in table:
                errors.append(f"{key}: alias '{alias}' collides with a category key")
            elif alias in seen_aliases:
                errors.append(f"{key}: alias '{alias}' already used by {seen_aliases[alias]}")
            else:
                seen_aliases[alias] = key

    return errors
