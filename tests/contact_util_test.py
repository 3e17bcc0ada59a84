import sys
sys.path.append('..')

import unittest
from pyimpact.common import PI
from pyimpact.contact_util import *

V_MIN_REBOUND = 1e-6
V_PLASTIC_DEFORM = 0.1
MIN_COR = 0.5

def cor(v_normal):
    return coefficient_of_restitution(v_normal, V_MIN_REBOUND, V_PLASTIC_DEFORM, MIN_COR)

class contact_util_test(unittest.TestCase):
    def test_coefficient_of_restitution(self):
        self.assertAlmostEqual(cor(-2.0), 0.5)
        self.assertAlmostEqual(cor(-0.05), 0.75)
        self.assertAlmostEqual(cor(-0.1), 0.5)
        assert(cor(-1e-7) == 0.0)

        # Collapses to zero below the rebound speed; the law is not continuous
        assert(cor(-0.999e-6) == 0.0)
        self.assertAlmostEqual(cor(-V_MIN_REBOUND), 1.0, places=4)

        # Separating points do not rebound
        assert(cor(0.5) == 0.0)

    def test_tangential_velocity_angle(self):
        assert(tangential_velocity_angle((1, 0, -3)) == 0.0)
        self.assertAlmostEqual(tangential_velocity_angle((0, 2, 5)), PI / 2)
        self.assertAlmostEqual(tangential_velocity_angle((-1, 0, 0)), PI)
        self.assertAlmostEqual(tangential_velocity_angle((0, -1, 0)), -PI / 2)
        assert(tangential_velocity_angle((1e-5, 1e-5, -1)) is None)
        assert(tangential_velocity_angle((0, 0, 0)) is None)

    def test_abs_angle_difference(self):
        self.assertAlmostEqual(abs_angle_difference(0.1, 0.3), 0.2)
        self.assertAlmostEqual(abs_angle_difference(PI - 0.1, -PI + 0.1), 0.2)
        self.assertAlmostEqual(abs_angle_difference(0.0, PI), PI)
        self.assertAlmostEqual(abs_angle_difference(-PI / 2, PI / 2), PI)
        self.assertAlmostEqual(abs_angle_difference(-0.25, 0.25), 0.5)
        for a, b in ((0.5, -3.0), (-2.0, 2.5), (1.0, 1.0)):
            d = abs_angle_difference(a, b)
            assert(0.0 <= d <= PI)
            self.assertAlmostEqual(d, abs_angle_difference(b, a))

    def test_sliding_step_length_to_origin(self):
        step, q = sliding_step_length_to_origin((1, 0), (-1, 0))
        self.assertAlmostEqual(step, 0.5)
        self.assertAlmostEqual(q[0], 0.0)

        step, q = sliding_step_length_to_origin((1, 1), (1, -1))
        self.assertAlmostEqual(step, 0.5)
        self.assertAlmostEqual(q[0], 1.0)
        self.assertAlmostEqual(q[1], 0.0)

        step, q = sliding_step_length_to_origin((1, 0), (-2, 0))
        self.assertAlmostEqual(step, 1.0 / 3.0)

        # Moving away from the origin
        step, q = sliding_step_length_to_origin((1, 0), (2, 0))
        assert(step == 0.0)

        # Slip only impending at a, or degenerate segment
        assert(sliding_step_length_to_origin((0.05, 0), (-1, 0))[0] == 1.0)
        assert(sliding_step_length_to_origin((1, 0), (1, 0))[0] == 1.0)

if __name__ ==  '__main__':
    unittest.main()
