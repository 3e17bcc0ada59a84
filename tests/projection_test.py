import sys
sys.path.append('..')

import unittest
import numpy as np
from pyimpact.body import create_multibody_system
from pyimpact.common import (NoValidProjectionError, ProjectionFailedError, INFINITY)
from pyimpact.projection import (PositionProjecter, proximal_index_subsets)
from brick_scenarios import (place_on_ground, flat_orientation, tilted_corner_orientation)

DEPTH = 0.01

class projection_test(unittest.TestCase):
    def setUp(self):
        self.system, self.brick = create_multibody_system()

    def sunken_brick(self, orientation):
        state = place_on_ground(self.system, self.brick, orientation, depth=DEPTH)
        positions = self.brick.find_all_lowest_point_locations_in_ground(state)
        assert(self.brick.is_interpenetrating(positions))
        return state, PositionProjecter(self.system, self.brick, state, positions)

    def test_subsets(self):
        for count in range(1, 5):
            subsets = proximal_index_subsets(count)
            assert(len(subsets) == 2**count - 1)
            assert(len(set(subsets)) == len(subsets))
            assert(() not in subsets)
            assert(tuple(range(count)) in subsets)
        assert(proximal_index_subsets(2) == [(0, ), (1, ), (0, 1)])

    def test_exhaustive(self):
        state, projecter = self.sunken_brick(flat_orientation())
        assert(projecter.proximal_point_indices == (0, 2, 4, 6))
        z0 = state.position[2]

        # Every combination containing a diagonal pair lifts the brick
        # straight up; the one with the most constraints wins.
        subset = projecter.project_positions(state, exhaustive=True)
        assert(subset == (0, 1, 2, 3))
        self.assertAlmostEqual(state.position[2], z0 + DEPTH)
        assert(np.allclose(state.orientation, flat_orientation()))
        assert(not self.brick.is_interpenetrating(state))

    def test_pruning(self):
        state, projecter = self.sunken_brick(flat_orientation())
        subset = projecter.project_positions(state, exhaustive=False)
        assert(subset == (0, 1, 2, 3))
        assert(not self.brick.is_interpenetrating(state))

        state, projecter = self.sunken_brick(tilted_corner_orientation())
        assert(len(projecter.proximal_point_indices) == 1)
        subset = projecter.project_positions(state)
        assert(subset == (0, ))
        assert(not self.brick.is_interpenetrating(state))

    def test_evaluate_projection(self):
        state, projecter = self.sunken_brick(flat_orientation())
        q0 = state.q.copy()

        # A single corner tips the brick; the opposite corner stays below
        scratch = projecter._scratch_state(state)
        assert(projecter.evaluate_projection(scratch, state, (0, )) == INFINITY)

        scratch = projecter._scratch_state(state)
        distance = projecter.evaluate_projection(scratch, state, (0, 3))
        self.assertAlmostEqual(distance, DEPTH)
        assert(not self.brick.is_interpenetrating(scratch))

        # The committed state is untouched
        assert(np.all(state.q == q0))
        assert(not state.enabled)

    def test_no_valid_projection(self):
        state, projecter = self.sunken_brick(flat_orientation())
        q0 = state.q.copy()

        def failing_projection(state, tolerance):
            raise ProjectionFailedError('always fails')
        self.system.project_q = failing_projection

        self.assertRaises(NoValidProjectionError, projecter.project_positions_pruning, state)
        self.assertRaises(NoValidProjectionError, projecter.project_positions_exhaustive, state)
        assert(np.all(state.q == q0))

if __name__ ==  '__main__':
    unittest.main()
