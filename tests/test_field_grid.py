"""Tests for FieldGrid construction, lookup and sampling."""

import math

import numpy as np
import pytest

from particleflow.errors import InvalidConfigurationError, OutOfBoundsError
from particleflow.field.grid import FieldGrid, SamplingMethod
from particleflow.field.seeds import SeedSet
from particleflow.field.strength import linear_strength, quadratic_strength
from particleflow.model.seed import Seed
from particleflow.rng import make_rng


def make_seed(
    x: float = 100.0,
    y: float = 100.0,
    vx: float = 20.0,
    vy: float = 30.0,
    radius: float = 500.0,
) -> Seed:
    """Create a test seed."""
    return Seed(x=x, y=y, vx=vx, vy=vy, radius=radius)


def random_seeds(count: int = 6, width: int = 120, height: int = 80, seed: int = 11) -> SeedSet:
    return SeedSet.generate(count, width, height, (10.0, 80.0), 40.0, rng=make_rng(seed))


class TestBuild:
    """Tests for FieldGrid.build()."""

    def test_single_seed_centre_has_seed_velocity(self):
        """At the seed's own pixel the field equals the seed velocity."""
        grid = FieldGrid.build([make_seed()], 800, 600, strength=linear_strength)

        assert grid.lookup(100, 100) == (20.0, 30.0)

    def test_single_seed_boundary_is_zero(self):
        """Strength reaches zero exactly at the radius."""
        grid = FieldGrid.build([make_seed()], 800, 600, strength=linear_strength)

        # distance exactly 500 == radius
        assert grid.lookup(600, 100) == (0.0, 0.0)

    def test_single_seed_halfway_is_half_velocity(self):
        """Linear falloff gives half the velocity at half the radius."""
        grid = FieldGrid.build([make_seed()], 800, 600, strength=linear_strength)

        vx, vy = grid.lookup(350, 100)

        assert vx == pytest.approx(10.0)
        assert vy == pytest.approx(15.0)

    def test_quadratic_is_default(self):
        """Without a strength argument the falloff is quadratic."""
        grid = FieldGrid.build([make_seed()], 800, 600)

        vx, vy = grid.lookup(350, 100)

        assert vx == pytest.approx(5.0)
        assert vy == pytest.approx(7.5)

    def test_outside_radius_is_calm(self):
        """Pixels beyond every radius hold (0, 0)."""
        grid = FieldGrid.build([make_seed(radius=10.0)], 200, 200)

        assert grid.lookup(150, 150) == (0.0, 0.0)

    def test_no_seeds_gives_all_zero_grid(self):
        """An empty seed set builds an all-zero field."""
        grid = FieldGrid.build([], 50, 40)

        assert not grid.u.any()
        assert not grid.v.any()
        assert grid.calm_fraction() == 1.0

    def test_superposition(self):
        """Each pixel is the sum of the single-seed fields."""
        seeds = random_seeds()
        grid = FieldGrid.build(seeds, 120, 80)

        for x, y in [(0, 0), (17, 33), (60, 40), (119, 79), (90, 5)]:
            expected_u = 0.0
            expected_v = 0.0
            for s in seeds:
                d = math.hypot(x - s.x, y - s.y)
                if d <= s.radius:
                    w = (1.0 - d / s.radius) ** 2
                    expected_u += w * s.vx
                    expected_v += w * s.vy
            vx, vy = grid.lookup(x, y)
            assert vx == pytest.approx(expected_u, abs=1e-9)
            assert vy == pytest.approx(expected_v, abs=1e-9)

    def test_opposite_seeds_cancel(self):
        """Coincident seeds with opposite velocities cancel out."""
        seeds = [make_seed(x=50, y=50, vx=10, vy=-5), make_seed(x=50, y=50, vx=-10, vy=5)]

        grid = FieldGrid.build(seeds, 100, 100)

        assert grid.lookup(50, 50) == (0.0, 0.0)

    def test_seed_off_canvas_still_contributes(self):
        """A seed outside the canvas still reaches pixels within its radius."""
        grid = FieldGrid.build([make_seed(x=-10, y=-10, radius=50)], 100, 100)

        vx, _ = grid.lookup(0, 0)

        assert vx > 0.0

    def test_seed_far_off_canvas_contributes_nothing(self):
        """A seed whose circle misses the canvas adds nothing."""
        grid = FieldGrid.build([make_seed(x=-1000, y=-1000, radius=50)], 100, 100)

        assert grid.calm_fraction() == 1.0

    def test_build_is_deterministic(self):
        """Same seeds and size give bit-identical arrays."""
        seeds = random_seeds()

        a = FieldGrid.build(seeds, 120, 80)
        b = FieldGrid.build(seeds, 120, 80)

        assert a.u.tobytes() == b.u.tobytes()
        assert a.v.tobytes() == b.v.tobytes()

    def test_arrays_are_read_only(self):
        """The built arrays cannot be written."""
        grid = FieldGrid.build([make_seed()], 200, 200)

        with pytest.raises(ValueError):
            grid.u[0, 0] = 1.0

    def test_array_shape_is_width_by_height(self):
        """Arrays are indexed [x, y]."""
        grid = FieldGrid.build([], 30, 20)

        assert grid.u.shape == (30, 20)
        assert grid.v.shape == (30, 20)

    @pytest.mark.parametrize(
        ("width", "height"),
        [(0, 10), (10, 0), (-5, 10), (10.5, 10), (math.nan, 10), (10, math.inf)],
    )
    def test_invalid_dimensions_rejected(self, width, height):
        """Zero, negative, fractional and non-finite sizes raise InvalidConfigurationError."""
        with pytest.raises(InvalidConfigurationError):
            FieldGrid.build([], width, height)

    @pytest.mark.parametrize("radius", [0.0, -5.0, math.nan])
    def test_invalid_seed_radius_rejected(self, radius):
        """A seed without a positive radius is rejected instead of writing NaN."""
        with pytest.raises(InvalidConfigurationError, match="radius"):
            FieldGrid.build([make_seed(x=5, y=5, vx=1, vy=1, radius=radius)], 10, 10)


class TestExtended:
    """Tests for incremental accumulation of extra seeds."""

    def test_extended_matches_full_build(self):
        """Adding seeds incrementally equals building with all of them."""
        seeds = random_seeds(count=8)
        base = FieldGrid.build(seeds.seeds[:5], 120, 80)

        extended = base.extended(seeds.seeds[5:])
        full = FieldGrid.build(seeds, 120, 80)

        assert extended.u.tobytes() == full.u.tobytes()
        assert extended.v.tobytes() == full.v.tobytes()
        assert extended.seeds == full.seeds

    def test_extended_leaves_original_untouched(self):
        """extended() returns a new grid and keeps the old one intact."""
        base = FieldGrid.build([], 20, 20)

        base.extended([make_seed(x=10, y=10, radius=5)])

        assert not base.u.any()
        assert len(base.seeds) == 0

    def test_extended_rejects_zero_radius_seed(self):
        """Seeds added incrementally get the same radius check as a full build."""
        base = FieldGrid.build([make_seed(x=10, y=10, radius=5)], 20, 20)

        with pytest.raises(InvalidConfigurationError):
            base.extended([make_seed(x=10, y=10, radius=0)])

        assert len(base.seeds) == 1


class TestLookup:
    """Tests for FieldGrid.lookup() bounds handling."""

    @pytest.mark.parametrize(("x", "y"), [(-1, 0), (0, -1), (20, 0), (0, 10), (100, 100)])
    def test_out_of_bounds_raises(self, x, y):
        """Coordinates outside the grid raise OutOfBoundsError."""
        grid = FieldGrid.build([], 20, 10)

        with pytest.raises(OutOfBoundsError) as exc_info:
            grid.lookup(x, y)

        assert exc_info.value.width == 20
        assert exc_info.value.height == 10

    def test_out_of_bounds_is_an_index_error(self):
        """OutOfBoundsError can be caught as IndexError."""
        grid = FieldGrid.build([], 20, 10)

        with pytest.raises(IndexError):
            grid.lookup(20, 0)

    def test_last_cell_is_valid(self):
        """(width - 1, height - 1) is inside the grid."""
        grid = FieldGrid.build([], 20, 10)

        assert grid.lookup(19, 9) == (0.0, 0.0)

    def test_returns_python_floats(self):
        """lookup() returns plain floats, not numpy scalars."""
        grid = FieldGrid.build([make_seed(x=5, y=5, radius=10)], 20, 10)

        vx, vy = grid.lookup(5, 5)

        assert type(vx) is float
        assert type(vy) is float

    @pytest.mark.parametrize(("x", "y"), [(2.5, 3), (2, 3.0)])
    def test_non_integer_coordinates_rejected(self, x, y):
        """Continuous positions go through sample(); lookup() only takes pixels."""
        grid = FieldGrid.build([], 20, 10)

        with pytest.raises(TypeError, match="integer"):
            grid.lookup(x, y)

    def test_numpy_integers_accepted(self):
        """numpy integer scalars count as pixel coordinates."""
        grid = FieldGrid.build([make_seed(x=5, y=5, radius=10)], 20, 10)

        assert grid.lookup(np.int64(5), np.int64(5)) == grid.lookup(5, 5)


class TestSample:
    """Tests for continuous-position sampling."""

    def test_nearest_floors_to_cell(self):
        """Nearest sampling reads the containing cell."""
        grid = FieldGrid.build([make_seed(x=10, y=10, radius=20)], 40, 40)

        assert grid.sample(10.9, 10.2) == grid.lookup(10, 10)

    def test_bilinear_matches_nearest_at_integer_positions(self):
        """On integer positions both methods agree."""
        grid = FieldGrid.build(random_seeds(), 120, 80)

        for x, y in [(3, 4), (60, 40), (119, 79)]:
            assert grid.sample(x, y, SamplingMethod.BILINEAR) == pytest.approx(grid.lookup(x, y))

    def test_bilinear_interpolates_between_cells(self):
        """Halfway between two cells gives their average."""
        grid = FieldGrid.build(random_seeds(), 120, 80)
        a = np.array(grid.lookup(30, 20))
        b = np.array(grid.lookup(31, 20))

        sampled = grid.sample(30.25, 20.0, SamplingMethod.BILINEAR)

        np.testing.assert_allclose(sampled, 0.75 * a + 0.25 * b)

    def test_bilinear_at_last_column_uses_edge_cell(self):
        """The last column blends with itself."""
        grid = FieldGrid.build(random_seeds(), 120, 80)

        sampled = grid.sample(119.5, 40.0, SamplingMethod.BILINEAR)

        assert sampled == pytest.approx(grid.lookup(119, 40))

    def test_sample_outside_canvas_raises(self):
        """sample() refuses positions off the canvas."""
        grid = FieldGrid.build([], 20, 10)

        with pytest.raises(OutOfBoundsError):
            grid.sample(-0.5, 5.0)
        with pytest.raises(OutOfBoundsError):
            grid.sample(5.0, 10.0, SamplingMethod.BILINEAR)


class TestStats:
    """Tests for field statistics."""

    def test_max_speed_is_seed_speed_at_centre(self):
        """The fastest pixel of a lone seed is its centre."""
        grid = FieldGrid.build([make_seed(x=10, y=10, vx=3.0, vy=4.0, radius=5)], 30, 30)

        assert grid.max_speed() == pytest.approx(5.0)

    def test_calm_fraction_with_small_seed(self):
        """A radius-1 seed moves only its own pixel."""
        # radius 1 reaches the centre pixel only (neighbours sit at distance 1 -> weight 0)
        grid = FieldGrid.build([make_seed(x=5, y=5, radius=1.0)], 10, 10)

        assert grid.calm_fraction() == pytest.approx(0.99)

    def test_quadratic_strength_stored_on_grid(self):
        """The grid remembers its falloff for later rebuilds."""
        grid = FieldGrid.build([], 5, 5)

        assert grid.strength is quadratic_strength
