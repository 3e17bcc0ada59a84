import sys
sys.path.append('..')

import unittest
import numpy as np
from pyimpact.active_set import *
from pyimpact.common import (NoActiveSetError, INFINITY)

O = TangentialState.OBSERVING
R = TangentialState.ROLLING
S = TangentialState.SLIDING

def candidate(category, fitness, states=(R, )):
    return ActiveSetCandidate(states, ranking=Ranking(category, fitness))

class active_set_test(unittest.TestCase):
    def test_enumeration(self):
        for count in range(1, 5):
            assignments = enumerate_tangential_states(count)
            assert(len(assignments) == 3**count - 1)
            assert(len(set(assignments)) == len(assignments))
            assert((O, ) * count not in assignments)
            assert(all(len(a) == count for a in assignments))

        # Digit i of the candidate number is the state of point i
        assignments = enumerate_tangential_states(2)
        assert(assignments[0] == (R, O))
        assert(assignments[1] == (S, O))
        assert(assignments[2] == (O, R))
        assert(assignments[-1] == (S, S))

    def test_ranking(self):
        a = Ranking(SolutionCategory.NO_VIOLATIONS, 100.0)
        b = Ranking(SolutionCategory.ACTIVE_CONSTRAINT_DOES_NOTHING, 0.1)
        c = Ranking(SolutionCategory.NO_VIOLATIONS, 1.0)
        assert(c < a < b)
        assert(sorted([b, a, c]) == [c, a, b])

    def test_select_candidate(self):
        candidates = [candidate(SolutionCategory.RESTITUTION_IMPULSES_IGNORED, 0.01),
                      candidate(SolutionCategory.NO_VIOLATIONS, 50.0),
                      candidate(SolutionCategory.NO_VIOLATIONS, 10.0),
                      candidate(SolutionCategory.NEGATIVE_POST_COMPRESSION_NORMAL_VELOCITY, 0.0)]
        assert(select_candidate(candidates) is candidates[2])

        # Categories are strictly ordered; fitness only ranks within one
        candidates = [candidate(SolutionCategory.GROUND_APPLIES_ATTRACTIVE_IMPULSE, 1e-3),
                      candidate(SolutionCategory.STICKING_IMPULSE_EXCEEDS_STICTION_LIMIT, 1e3)]
        assert(select_candidate(candidates) is candidates[1])

        # Ties go to the first in enumeration order
        candidates = [candidate(SolutionCategory.NO_VIOLATIONS, 2.0, (R, S)),
                      candidate(SolutionCategory.NO_VIOLATIONS, 2.0, (S, R))]
        assert(select_candidate(candidates) is candidates[0])

    def test_select_candidate_failure(self):
        candidates = [candidate(SolutionCategory.NEGATIVE_POST_COMPRESSION_NORMAL_VELOCITY, 0.1),
                      candidate(SolutionCategory.NO_IMPULSES_APPLIED, INFINITY),
                      candidate(SolutionCategory.MIN_STEP_CAUSES_SLIP_DIRECTION_REVERSAL, INFINITY),
                      candidate(SolutionCategory.NO_VIOLATIONS, INFINITY),
                      ActiveSetCandidate((S, ))]
        self.assertRaises(NoActiveSetError, select_candidate, candidates)
        self.assertRaises(NoActiveSetError, select_candidate, [])

    def test_candidate(self):
        c = ActiveSetCandidate((O, R, S), velocity_change=np.zeros(6),
                               local_impulses=np.array((0.1, 0.2, -1.0, 0.0, 0.3, -2.0)))
        assert(c.category == SolutionCategory.NOT_EVALUATED)
        assert(c.fitness == INFINITY)
        assert(c.active_points == [1, 2])
        assert(c.constraint_count == 2)
        assert(c.constraint_impulses().shape == (2, 3))
        assert(c.normal_impulses() == {1: -1.0, 2: -2.0})

    def test_diagnostics(self):
        assert(format_active_set((O, R, S)) == '(ORS)')
        assert(format_active_set((O, R, S), ImpactPhase.COMPRESSION.prefix) == '(cORS)')
        assert(format_active_set((S, ), ImpactPhase.RESTITUTION.prefix) == '(rS)')
        assert(SolutionCategory.NO_VIOLATIONS.description == 'No violations')
        for category in SolutionCategory:
            assert(category.description)

        counts = count_categories([candidate(SolutionCategory.NO_VIOLATIONS, 1.0),
                                   candidate(SolutionCategory.NO_VIOLATIONS, 2.0),
                                   ActiveSetCandidate((R, ))])
        assert(counts[SolutionCategory.NO_VIOLATIONS] == 2)
        assert(counts[SolutionCategory.NOT_EVALUATED] == 1)
        assert(counts[SolutionCategory.ACTIVE_CONSTRAINT_DOES_NOTHING] == 0)
        assert(len(counts) == len(SolutionCategory))

if __name__ ==  '__main__':
    unittest.main()
