import unittest

import numpy as np
import pytest

from raybounce import Ray, Sphere, intersect, reflect, closest_hit


def unit_sphere():
    return Sphere(position=[0.0, 0.0, 0.0], radius=1.0)


class TestIntersect(unittest.TestCase):
    def test_head_on_hit_lies_on_surface(self):
        sphere = Sphere(position=[1.0, 2.0, 3.0], radius=2.5)
        ray = Ray.from_two_points([1.0, 2.0, -10.0], [1.0, 2.0, 3.0])
        hit = intersect(sphere, ray)
        self.assertIsNotNone(hit)
        self.assertAlmostEqual(np.linalg.norm(hit.position - sphere.position), sphere.radius)

    def test_oblique_hit_lies_on_surface(self):
        sphere = unit_sphere()
        ray = Ray(origin=[0.3, -4.0, 0.2], direction=[0.0, 3.0, 0.1])
        hit = intersect(sphere, ray)
        self.assertIsNotNone(hit)
        self.assertAlmostEqual(np.linalg.norm(hit.position), 1.0)
        self.assertAlmostEqual(np.linalg.norm(hit.normal), 1.0)

    def test_concrete_hit(self):
        hit = intersect(unit_sphere(), Ray(origin=[0, 0, -5], direction=[0, 0, 1]))
        np.testing.assert_allclose(hit.position, [0.0, 0.0, -1.0])
        np.testing.assert_allclose(hit.normal, [0.0, 0.0, -1.0])
        self.assertAlmostEqual(hit.t, 4.0)

    def test_unnormalized_direction(self):
        hit = intersect(unit_sphere(), Ray(origin=[0, 0, -5], direction=[0, 0, 4]))
        np.testing.assert_allclose(hit.position, [0.0, 0.0, -1.0])
        self.assertAlmostEqual(hit.t, 1.0)

    def test_offset_ray_misses(self):
        ray = Ray(origin=[1.5, 0.0, -5.0], direction=[0.0, 0.0, 1.0])
        self.assertIsNone(intersect(unit_sphere(), ray))

    def test_sphere_behind_ray_misses(self):
        ray = Ray(origin=[0.0, 0.0, 5.0], direction=[0.0, 0.0, 1.0])
        self.assertIsNone(intersect(unit_sphere(), ray))

    def test_origin_on_surface_skips_self_intersection(self):
        ray = Ray(origin=[0.0, 0.0, -1.0], direction=[0.0, 0.0, 1.0])
        hit = intersect(unit_sphere(), ray)
        np.testing.assert_allclose(hit.position, [0.0, 0.0, 1.0])

    def test_leaving_surface_misses(self):
        ray = Ray(origin=[0.0, 0.0, -1.0], direction=[0.0, 0.0, -1.0])
        self.assertIsNone(intersect(unit_sphere(), ray))

    def test_inside_ray_hits_far_wall(self):
        ray = Ray(origin=[0.0, 0.0, 0.0], direction=[1.0, 0.0, 0.0])
        hit = intersect(unit_sphere(), ray)
        np.testing.assert_allclose(hit.position, [1.0, 0.0, 0.0])
        np.testing.assert_allclose(hit.normal, [1.0, 0.0, 0.0])

    def test_zero_direction_is_no_hit(self):
        ray = Ray(origin=[0.0, 0.0, -5.0], direction=[0.0, 0.0, 0.0])
        self.assertIsNone(intersect(unit_sphere(), ray))

    def test_nan_ray_is_no_hit(self):
        ray = Ray(origin=[np.nan, 0.0, -5.0], direction=[0.0, 0.0, 1.0])
        self.assertIsNone(intersect(unit_sphere(), ray))

    def test_zero_radius_centre_hit_is_no_hit(self):
        sphere = Sphere(position=[0.0, 0.0, 0.0], radius=0.0)
        ray = Ray(origin=[0.0, 0.0, -5.0], direction=[0.0, 0.0, 1.0])
        self.assertIsNone(intersect(sphere, ray))

    def test_custom_epsilon(self):
        ray = Ray(origin=[0.0, 0.0, -1.5], direction=[0.0, 0.0, 1.0])
        self.assertIsNotNone(intersect(unit_sphere(), ray))
        self.assertIsNotNone(intersect(unit_sphere(), ray, epsilon=1.0))
        # both roots (0.5 and 2.5) are below the threshold
        self.assertIsNone(intersect(unit_sphere(), ray, epsilon=3.0))


class TestReflect(unittest.TestCase):
    def test_head_on_reflection_negates_direction(self):
        ray = Ray(origin=[0, 0, -5], direction=[0, 0, 1])
        hit = intersect(unit_sphere(), ray)
        bounced = reflect(ray, hit)
        np.testing.assert_array_equal(bounced.direction, -ray.direction)
        np.testing.assert_allclose(bounced.origin, [0.0, 0.0, -1.0])

    def test_reflection_keeps_length(self):
        ray = Ray(origin=[0.5, 0.0, -5.0], direction=[0.0, 0.0, 3.0])
        hit = intersect(unit_sphere(), ray)
        bounced = reflect(ray, hit)
        self.assertAlmostEqual(np.linalg.norm(bounced.direction), 3.0)

    def test_oblique_reflection(self):
        ray = Ray(origin=[0.6, 0.0, -5.0], direction=[0.0, 0.0, 1.0])
        hit = intersect(unit_sphere(), ray)
        bounced = reflect(ray, hit)
        n = hit.normal
        self.assertAlmostEqual(np.dot(bounced.direction, n), -np.dot(ray.direction, n))
        tangential_in = ray.direction - np.dot(ray.direction, n) * n
        tangential_out = bounced.direction - np.dot(bounced.direction, n) * n
        np.testing.assert_allclose(tangential_in, tangential_out, atol=1e-12)

    def test_inside_hit_reflects_without_clamping(self):
        ray = Ray(origin=[0.0, 0.0, 0.0], direction=[1.0, 0.0, 0.0])
        hit = intersect(unit_sphere(), ray)
        bounced = reflect(ray, hit)
        np.testing.assert_allclose(bounced.direction, [-1.0, 0.0, 0.0])

    def test_reflect_does_not_mutate_input(self):
        ray = Ray(origin=[0, 0, -5], direction=[0, 0, 1])
        hit = intersect(unit_sphere(), ray)
        reflect(ray, hit)
        np.testing.assert_array_equal(ray.origin, [0.0, 0.0, -5.0])
        np.testing.assert_array_equal(ray.direction, [0.0, 0.0, 1.0])


class TestClosestHit(unittest.TestCase):
    def setUp(self):
        self.far = Sphere(position=[0.0, 0.0, 10.0], radius=1.0)
        self.near = unit_sphere()
        self.ray = Ray(origin=[0.0, 0.0, -5.0], direction=[0.0, 0.0, 1.0])

    def test_nearest_policy_picks_minimum_t(self):
        hit = closest_hit([self.far, self.near], self.ray, policy="nearest")
        np.testing.assert_allclose(hit.position, [0.0, 0.0, -1.0])

    def test_first_policy_only_tests_first_sphere(self):
        hit = closest_hit([self.far, self.near], self.ray, policy="first")
        np.testing.assert_allclose(hit.position, [0.0, 0.0, 9.0])

    def test_first_policy_ignores_later_spheres(self):
        off_axis = Sphere(position=[5.0, 0.0, 0.0], radius=1.0)
        self.assertIsNone(closest_hit([off_axis, self.near], self.ray, policy="first"))
        self.assertIsNotNone(closest_hit([off_axis, self.near], self.ray, policy="nearest"))

    def test_empty_scene(self):
        self.assertIsNone(closest_hit([], self.ray))

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            closest_hit([self.near], self.ray, policy="random")


class TestSphere(unittest.TestCase):
    def test_negative_radius_rejected(self):
        with pytest.raises(ValueError):
            Sphere(position=[0, 0, 0], radius=-1.0)

    def test_nan_radius_rejected(self):
        with pytest.raises(ValueError):
            Sphere(position=[0, 0, 0], radius=float("nan"))

    def test_bad_position_shape(self):
        with pytest.raises(ValueError):
            Sphere(position=[0, 0], radius=1.0)

    def test_copy_is_independent(self):
        sphere = unit_sphere()
        clone = sphere.copy()
        clone.translate([1.0, 0.0, 0.0])
        np.testing.assert_array_equal(sphere.position, [0.0, 0.0, 0.0])
        self.assertNotEqual(sphere, clone)
