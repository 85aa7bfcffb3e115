"""Unit tests for the horizontal transform and the disk projector."""
import math
from datetime import datetime, timezone

import numpy as np
import pytest

from skymap.angle import Angle
from skymap.astro_time import AstronomicalTime
from skymap.projection import (
    ScreenPoint,
    disk_project,
    effective_radius,
    equatorial_to_horizontal,
    filter_visible,
    fov_factor,
    hour_angle,
    project_to_disk,
    transform_radec_to_altaz,
)

deg = Angle.from_degrees


class TestEquatorialToHorizontal:

    def test_regression_fixture(self):
        """RA 145, Dec 23.45 from 40N 80W at 2024-01-15 00:00 UTC.

        LST is 33.95 deg, so the star is 111 deg east of the meridian and
        just rising in the east-north-east.
        """
        t = AstronomicalTime.from_utc_date(datetime(2024, 1, 15, tzinfo=timezone.utc))
        lst = t.lst(deg(-80))
        result = equatorial_to_horizontal(deg(145), deg(23.45), deg(40), lst)

        assert result.alt.degrees == pytest.approx(0.194, abs=0.05)
        assert result.az.degrees == pytest.approx(58.89, abs=0.1)

    def test_meridian_transit_is_due_south(self):
        result = equatorial_to_horizontal(deg(145), deg(23.45), deg(40), deg(145))
        assert result.alt.degrees == pytest.approx(73.45)
        assert result.az.degrees == pytest.approx(180.0)

    def test_hour_angle_sign(self):
        """Positive hour angle = west of the meridian."""
        assert hour_angle(deg(100), deg(70)).degrees == pytest.approx(30.0)
        setting = equatorial_to_horizontal(deg(70), deg(0), deg(40), deg(100))
        assert 180.0 < setting.az.degrees < 360.0, "object west of meridian must have western azimuth"

    def test_celestial_pole_altitude_equals_latitude(self):
        result = equatorial_to_horizontal(deg(0), deg(90), deg(40), deg(123))
        assert result.alt.degrees == pytest.approx(40.0)
        assert result.az.degrees == pytest.approx(0.0, abs=1e-6) or result.az.degrees == pytest.approx(360.0)

    def test_north_pole_uses_hour_angle(self):
        result = equatorial_to_horizontal(deg(0), deg(45), deg(90), deg(30))
        assert result.alt.degrees == pytest.approx(45.0)
        assert result.az.degrees == pytest.approx(210.0)

    def test_south_pole_uses_negative_hour_angle(self):
        result = equatorial_to_horizontal(deg(0), deg(-45), deg(-90), deg(30))
        assert result.alt.degrees == pytest.approx(45.0)
        assert result.az.degrees == pytest.approx(330.0)

    def test_zenith_does_not_raise(self):
        result = equatorial_to_horizontal(deg(10), deg(40), deg(40), deg(10))
        assert result.alt.degrees == pytest.approx(90.0)
        assert math.isnan(result.az.degrees) or 0.0 <= result.az.degrees < 360.0

    def test_below_horizon(self):
        # dec -60 seen from 45N culminates 15 deg below the horizon
        result = equatorial_to_horizontal(deg(0), deg(-60), deg(45), deg(0))
        assert result.alt.degrees == pytest.approx(-15.0)
        assert result.az.degrees == pytest.approx(180.0)

    def test_azimuth_normalized(self):
        for ra in range(0, 360, 30):
            az = equatorial_to_horizontal(deg(ra), deg(10), deg(52), deg(200)).az.degrees
            assert 0.0 <= az < 360.0


class TestBulkTransform:
    """The numpy form agrees with the scalar transform."""

    @pytest.mark.parametrize("lat", [-90.0, -33.9, 0.0, 40.0, 89.5, 90.0])
    def test_matches_scalar(self, lat):
        ra = np.array([0.0, 37.95, 101.29, 145.0, 250.0, 359.0])
        dec = np.array([-60.0, 89.26, -16.72, 23.45, 5.0, -1.0])
        lst = deg(33.95)
        alt, az = transform_radec_to_altaz(ra, dec, deg(lat), lst)

        for i in range(len(ra)):
            expected = equatorial_to_horizontal(deg(ra[i]), deg(dec[i]), deg(lat), lst)
            assert alt[i] == pytest.approx(expected.alt.degrees, abs=1e-9)
            assert az[i] == pytest.approx(expected.az.degrees, abs=1e-7)

    def test_filter_visible(self):
        mask = filter_visible(np.array([-10.0, 0.0, 0.5, 45.0]))
        assert mask.tolist() == [False, True, True, True]


class TestFovFactor:
    def test_half_sky(self):
        assert fov_factor(180) == pytest.approx(1.0)

    def test_smaller_fov_zooms_in(self):
        assert fov_factor(60) < fov_factor(120) < fov_factor(180)
        assert effective_radius(100, fov_factor(60)) > effective_radius(100, fov_factor(180))

    def test_zero_fov(self):
        assert fov_factor(0) == 0.0
        assert effective_radius(100, 0.0) == math.inf


class TestProjectToDisk:
    center = ScreenPoint(200.0, 200.0)

    @pytest.mark.parametrize("az", [0.0, 45.0, 190.0, math.nan])
    def test_zenith_maps_to_center(self, az):
        point = project_to_disk(self.center, deg(90), Angle.from_degrees(az), 150.0)
        assert point == self.center

    @pytest.mark.parametrize("fov", [60.0, 180.0, 270.0])
    @pytest.mark.parametrize("az", [0.0, 33.0, 90.0, 222.0])
    def test_horizon_maps_to_boundary(self, fov, az):
        radius = effective_radius(200.0, fov_factor(fov))
        point = project_to_disk(self.center, deg(0), deg(az), radius)
        dist = math.hypot(point.x - self.center.x, point.y - self.center.y)
        assert dist == pytest.approx(radius)

    def test_orientation(self):
        north = project_to_disk(self.center, deg(0), deg(0), 100.0)
        east = project_to_disk(self.center, deg(0), deg(90), 100.0)
        assert north.x == pytest.approx(200.0) and north.y == pytest.approx(100.0)
        assert east.x == pytest.approx(300.0) and east.y == pytest.approx(200.0)

    def test_below_horizon_outside_disk(self):
        point = project_to_disk(self.center, deg(-30), deg(180), 90.0)
        assert point.y - self.center.y == pytest.approx(120.0)

    def test_nan_azimuth_propagates(self):
        point = project_to_disk(self.center, deg(45), Angle(math.nan), 100.0)
        assert math.isnan(point.x) and math.isnan(point.y)

    def test_bulk_matches_scalar(self):
        alt = np.array([90.0, 45.0, 0.0, -10.0])
        az = np.array([10.0, 135.0, 270.0, 5.0])
        xs, ys = disk_project(alt, az, 200.0, 200.0, 150.0)
        for i in range(len(alt)):
            point = project_to_disk(self.center, deg(alt[i]), deg(az[i]), 150.0)
            assert xs[i] == pytest.approx(point.x)
            assert ys[i] == pytest.approx(point.y)
