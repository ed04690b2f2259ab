"""Tests for collection reward calculation."""
import pytest

from app.domain.collection.rewards import base_points, calculate_reward, quantity_bonus, reward_breakdown


@pytest.mark.parametrize(
    "waste_type,expected",
    [
        ("Plastic Bottles & Packaging", 1),
        ("Paper & Cardboard Waste", 1),
        ("Organic Food Waste", 1),
        ("Electronic Waste", 2),
        ("e-waste", 2),
        ("Glass Containers", 1),
        ("Metal Cans & Scrap", 2),
        ("Construction Debris", 1),
        ("", 1),
    ],
)
def test_base_points_by_category(waste_type, expected):
    assert base_points(waste_type) == expected


@pytest.mark.parametrize(
    "amount,expected",
    [
        ("5 kg", 1),
        ("12kg", 1),
        ("3 kg", 0.5),
        ("4-5 kg", 0.5),
        ("2-3 kg", 0),  # only the first number counts
        ("1 kg", 0),
        ("a few bags", 0),
        ("", 0),
    ],
)
def test_quantity_bonus(amount, expected):
    assert quantity_bonus(amount) == expected


def test_metal_cans_five_kilos_earns_three():
    assert calculate_reward("Metal Cans", "5 kg") == 3


def test_breakdown_totals_base_and_bonus():
    assert reward_breakdown("Paper & Cardboard Waste", "4-5 kg") == {"base": 1, "bonus": 0.5, "total": 1.5}
    assert reward_breakdown("Construction Debris", "5-7 kg")["total"] == 2
