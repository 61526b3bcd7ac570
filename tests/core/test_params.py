"""Tests for pattern parameter generation."""

import math

import pytest

from tilebloom.core.params import (
    MODES,
    PETAL_CHOICES,
    TWIST_CHOICES,
    PatternParams,
    generate_params,
    next_seed,
    pick,
    random_seed,
)

SEEDS = [0, 1, 7, 42, 123456789, 2654435769, 4294967295] + list(range(1000, 1200))


class TestGenerateParams:
    def test_deterministic(self):
        """Same seed twice gives identical params."""
        assert generate_params(987654) == generate_params(987654)

    def test_immutable(self):
        p = generate_params(5)
        with pytest.raises(Exception):
            p.spacing = 9

    def test_reference_seed(self):
        """Matches the reference draw for seed 123456789."""
        p = generate_params(123456789)
        assert p.mode == "Scallop Dots"
        assert p.spacing == 7
        assert (p.ox1, p.oy1, p.ox2, p.oy2) == (4, 1, 6, 6)
        assert p.petals == 6
        assert p.twist == 0.28
        assert math.isclose(p.f1, 0.3526468469947577, rel_tol=1e-12)
        assert math.isclose(p.f2, 0.3809343765489758, rel_tol=1e-12)
        assert math.isclose(p.f3, 0.36981073470786213, rel_tol=1e-12)
        assert math.isclose(p.phase, 1.7679675858035468, rel_tol=1e-12)
        assert math.isclose(p.edge_width, 0.058792630527168516, rel_tol=1e-12)
        assert math.isclose(p.t_haldi, 0.8706568212783895, rel_tol=1e-12)
        assert math.isclose(p.t_cream, 0.8995301534747705, rel_tol=1e-12)
        assert math.isclose(p.lattice_mix, 0.5275212894659489, rel_tol=1e-12)

    def test_reference_modes(self):
        assert generate_params(0).mode == "Rosette Dots"
        assert generate_params(1).mode == "Diamond Dots"
        assert generate_params(7).mode == "Weave Dots"
        assert generate_params(9).mode == "Petal Dots"
        assert generate_params(13).mode == "Scallop Dots"

    @pytest.mark.parametrize("seed", SEEDS)
    def test_invariants(self, seed):
        p = generate_params(seed)
        assert isinstance(p, PatternParams)
        assert p.mode in MODES
        assert p.t_cream > p.t_haldi
        assert 4 <= p.spacing <= 7
        assert 0.0 <= p.lattice_mix <= 1.0
        assert (p.ox1, p.oy1) != (p.ox2, p.oy2)
        assert p.ox1 != p.ox2 and p.oy1 != p.oy2
        for off in (p.ox1, p.oy1, p.ox2, p.oy2):
            assert 0 <= off < p.spacing
        assert 0.03 <= p.edge_width <= 0.07
        assert 0.0 <= p.phase < 2 * math.pi
        assert p.petals in PETAL_CHOICES
        assert p.twist in TWIST_CHOICES
        assert 0.12 <= p.f1 <= 0.44
        assert 0.10 <= p.f2 <= 0.62
        assert 0.08 <= p.f3 <= 0.38

    def test_all_modes_reachable(self):
        modes = {generate_params(s).mode for s in range(200)}
        assert modes == set(MODES)

    def test_seed_reduced_to_32_bits(self):
        assert generate_params(2 ** 32 + 5) == generate_params(5)


class TestSeeds:
    def test_pick_is_stable(self):
        assert pick(MODES, 19) == "Rosette Dots"

    def test_next_seed_wraps(self):
        assert next_seed(0) == 0x9E3779B9
        assert next_seed(0xFFFFFFFF) == (0xFFFFFFFF + 0x9E3779B9) % 2 ** 32

    def test_next_seed_changes_pattern(self):
        s = 123456789
        assert generate_params(next_seed(s)) != generate_params(s)

    def test_random_seed_range(self):
        for _ in range(10):
            assert 0 <= random_seed() < 2 ** 32
