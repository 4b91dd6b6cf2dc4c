"""
Tests for tool tiers, upgrade costs, and timing formulas.
"""
import math

import pytest

from shaft_miner.gameplay.blocks import BlockType
from shaft_miner.gameplay.economy import (
    BACKPACK_TIERS, PICKAXE_TIERS, backpack_capacity, mining_duration, next_backpack_tier,
    next_pickaxe_tier, pickaxe_power, proficiency_upgrade_cost, refining_duration,
    strength_upgrade_cost,
)


class TestTiers:
    """Tests for pickaxe and backpack tiers."""

    def test_pickaxe_power_scales_with_proficiency(self):
        """Each proficiency level multiplies power by 1.5."""
        assert pickaxe_power(0, 1) == 1
        assert pickaxe_power(0, 2) == pytest.approx(1.5)
        assert pickaxe_power(1, 1) == 4

    def test_backpack_capacity_scales_with_strength(self):
        """Each strength level doubles capacity."""
        assert backpack_capacity(0, 1) == 5
        assert backpack_capacity(0, 3) == 20
        assert backpack_capacity(2, 1) == 500

    def test_next_tier_stops_at_top(self):
        """There is no tier past the last."""
        assert next_pickaxe_tier(0) is PICKAXE_TIERS[1]
        assert next_pickaxe_tier(len(PICKAXE_TIERS) - 1) is None
        assert next_backpack_tier(len(BACKPACK_TIERS) - 1) is None

    def test_tier_requirements(self):
        """Copper tiers need five copper."""
        requirement = PICKAXE_TIERS[1].requirement
        assert requirement.required_type == BlockType.COPPER
        assert requirement.required_amount == 5
        assert BACKPACK_TIERS[0].requirement is None


class TestCosts:
    """Tests for upgrade cost curves."""

    def test_cost_doubles_per_level(self):
        """Upgrade cost doubles with each level."""
        assert proficiency_upgrade_cost(0, 1) == 10
        assert proficiency_upgrade_cost(0, 2) == 20
        assert strength_upgrade_cost(0, 3) == 40

    def test_cost_scales_with_tier(self):
        """Higher tiers use their cost multiplier."""
        assert proficiency_upgrade_cost(1, 1) == 50
        assert strength_upgrade_cost(4, 1) == 2000


class TestDurations:
    """Tests for mining and refining durations."""

    def test_mining_duration(self):
        """Mining time is base time over power, times the block multiplier."""
        assert mining_duration(1, BlockType.STONE) == pytest.approx(2.0)
        assert mining_duration(4, BlockType.COPPER) == pytest.approx(2.5)
        assert mining_duration(1, BlockType.GRASS) == pytest.approx(1.0)

    def test_refining_duration(self):
        """Refining time grows with the square root of input hardness."""
        assert refining_duration(BlockType.STONE_REFINER, BlockType.STONE) == pytest.approx(20.0)
        assert refining_duration(BlockType.STONE_REFINER, BlockType.SLATE) == \
            pytest.approx(20.0 * math.sqrt(5))
        assert refining_duration(BlockType.GOLD_REFINER, BlockType.MAGMA) == \
            pytest.approx(3.0 * math.sqrt(20))
