from __future__ import annotations

from dataclasses import replace

import pytest

from budget_planner import categories as cat


def test_category_table_is_consistent() -> None:
    assert cat.validate_category_table() == []


def test_category_keys() -> None:
    assert set(cat.CATEGORY_KEYS) == {
        'FOOD', 'HOUSING', 'TRANSPORT', 'HEALTH', 'SUBSCRIPTIONS', 'STUDY',
        'ENTERTAINMENT', 'SERVICES', 'SAVINGS', 'SPORTS', 'MISC',
    }


def test_important_categories() -> None:
    assert cat.IMPORTANT_CATEGORIES == {
        'SERVICES', 'FOOD', 'TRANSPORT', 'HEALTH', 'HOUSING', 'STUDY', 'SUBSCRIPTIONS',
    }
    assert cat.is_important_category('FOOD')
    assert not cat.is_important_category('ENTERTAINMENT')


@pytest.mark.parametrize(
    'raw, expected',
    [
        ('FOOD', 'FOOD'),
        (' food ', 'FOOD'),
        ('Alimentación', 'FOOD'),
        ('SERVICIOS', 'SERVICES'),
        ('gastos varios', 'MISC'),
        ('GIFTS', None),
        (None, None),
        (42, None),
    ],
)
def test_normalize_category(raw, expected) -> None:
    assert cat.normalize_category(raw) == expected


def test_savings_templates() -> None:
    rates = {
        key: cat.get_savings_template(key).savings_rate
        for key in cat.CATEGORY_KEYS
        if cat.get_savings_template(key) is not None
    }
    assert rates == pytest.approx({
        'FOOD': 0.20,
        'ENTERTAINMENT': 0.25,
        'TRANSPORT': 0.15,
        'SERVICES': 0.10,
        'MISC': 0.20,
    })
    assert cat.get_savings_template('HOUSING') is None


def test_lookups_fall_back_for_unknown_category() -> None:
    assert cat.get_category_icon('NOPE') == cat.DEFAULT_ICON
    assert cat.get_category_icon('NOPE', default='💡') == '💡'
    assert cat.get_category_color('NOPE') == cat.DEFAULT_COLOR
    assert cat.get_category_label('NOPE') == 'NOPE'


def test_validate_detects_problems() -> None:
    table = dict(cat.CATEGORY_TABLE)
    food = table['FOOD']
    table['FOOD'] = replace(
        food,
        color='red',
        aliases=food.aliases + ('HOUSING', 'SERVICIOS'),
        savings_template=cat.SavingsTemplate(action_items=(), savings_rate=1.5),
    )
    errors = cat.validate_category_table(table)
    assert any("not a hex value" in e for e in errors)
    assert any("outside (0, 1]" in e for e in errors)
    assert any("no action items" in e for e in errors)
    assert any("collides with a category key" in e for e in errors)
    assert any("already used" in e for e in errors)
