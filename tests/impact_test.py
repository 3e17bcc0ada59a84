import sys
sys.path.append('..')

import math
import unittest
import numpy as np
from pyimpact.active_set import (ImpactPhase, TangentialState, SolutionCategory)
from pyimpact.impact import *
from pyimpact.common import (PI, INFINITY)
from pyimpact import settings
from brick_scenarios import (Scenario, corner_below_center_orientation, edge_orientation)

O = TangentialState.OBSERVING
R = TangentialState.ROLLING
S = TangentialState.SLIDING

TOL_VELOCITY_FUZZINESS = settings.TOL_VELOCITY_FUZZINESS

class impact_test(unittest.TestCase):
    def impact(self, scenario, **kwargs):
        impacter = Impacter(scenario.system, scenario.brick, scenario.state,
                            scenario.positions, scenario.proximal, **kwargs)
        return impacter.perform_impact_exhaustive(scenario.state, scenario.velocities,
                                                  scenario.has_rebounded)

    def check_resolved(self, scenario):
        for velocity in scenario.velocities:
            assert(velocity[2] >= -TOL_VELOCITY_FUZZINESS)
        assert(not scenario.brick.is_impacting(scenario.velocities))

    def check_friction_cone(self, scenario, candidate):
        mu = scenario.brick.mu_dyn
        for row, i in enumerate(candidate.active_points):
            x, y, z = candidate.constraint_impulses()[row]
            assert(z < 0.0)
            assert(math.hypot(x, y) <= mu * -z + settings.MIN_MEANINGFUL_IMPULSE)

    def test_refine_slip_directions(self):
        update = refine_slip_directions([0.1, 1.0], [0.12, 1.01])
        assert(update.status == SlipDirectionUpdate.CONVERGED)
        self.assertAlmostEqual(update.max_change, 0.02)

        update = refine_slip_directions([0.1], [0.1 - PI])
        assert(update.status == SlipDirectionUpdate.REVERSED)

        update = refine_slip_directions([0.1, 0.2], [0.1, 0.6])
        assert(update.status == SlipDirectionUpdate.CONTINUE)

        update = refine_slip_directions([None, 0.2], [0.3, 0.2])
        assert(update.status == SlipDirectionUpdate.CONTINUE)
        assert(update.max_change == INFINITY)
        assert(refine_slip_directions([0.2], [None]).max_change == INFINITY)

    def test_single_corner_normal_impact(self):
        scenario = Scenario(corner_below_center_orientation, (0, 0, 0, 0, 0, -1.0))
        assert(scenario.proximal == (0, ))

        report = self.impact(scenario, min_intervals_per_phase=1)
        assert(report.compression_interval_count == 1)
        compression = report.compression_intervals[0]
        assert(compression.tangential_states == (R, ))
        assert(compression.ranking.category == SolutionCategory.NO_VIOLATIONS)
        assert(compression.step_length == 1.0)
        assert(abs(compression.proximal_velocities[0][2]) < 1e-9)

        # Only rolling and sliding were tried; sliding has no direction
        assert(len(compression.candidates) == 2)
        sliding = compression.candidates[1]
        assert(sliding.tangential_states == (S, ))
        assert(sliding.category == SolutionCategory.UNABLE_TO_RESOLVE_UNKNOWN_SLIP_DIRECTION)

        # COR(-1.0) = 0.5
        self.assertAlmostEqual(report.coefficients_of_restitution[0], 0.5)
        assert(report.restitution_interval_count == 1)
        self.assertAlmostEqual(scenario.velocities[0][2], 0.5)
        self.assertAlmostEqual(scenario.state.linear_velocity[2], 0.5)
        assert(scenario.has_rebounded == [True])
        self.check_resolved(scenario)

    def test_minimum_intervals(self):
        scenario = Scenario(corner_below_center_orientation, (0, 0, 0, 0, 0, -1.0))
        report = self.impact(scenario)

        assert(report.compression_interval_count == 2)
        assert(report.restitution_interval_count == 2)
        assert([r.step_length for r in report.intervals] == [0.5, 1.0, 0.5, 1.0])
        assert(report.intervals[2].phase == ImpactPhase.RESTITUTION)
        assert(report.intervals[2].counter == 1)
        self.assertAlmostEqual(report.compression_intervals[0].proximal_velocities[0][2], -0.5)
        self.assertAlmostEqual(scenario.velocities[0][2], 0.5)
        self.check_resolved(scenario)

    def test_plastic_impact(self):
        scenario = Scenario(corner_below_center_orientation, (0, 0, 0, 0, 0, -1.0),
                            min_cor=0.0)
        report = self.impact(scenario)
        assert(report.restitution_interval_count == 0)
        assert(report.coefficients_of_restitution == [0.0])
        assert(abs(scenario.velocities[0][2]) < 1e-9)
        assert(scenario.has_rebounded == [False])

        # A point that has already rebounded does not rebound again
        scenario = Scenario(corner_below_center_orientation, (0, 0, 0, 0, 0, -1.0))
        scenario.has_rebounded = [True]
        report = self.impact(scenario)
        assert(report.restitution_interval_count == 0)
        self.check_resolved(scenario)

    def test_two_points_small_tangential_velocity(self):
        scenario = Scenario(edge_orientation(), (0, 0, 0, 0, 0.05, -1.0))
        assert(scenario.proximal == (0, 4))

        report = self.impact(scenario)
        assert(len(report.intervals[0].candidates) == 3**2 - 1)
        for record in report.intervals:
            assert(record.tangential_states == (R, R))
            assert(record.ranking.category == SolutionCategory.NO_VIOLATIONS)
            self.check_friction_cone(scenario, record.selected)

        # Both points stop sliding
        for velocity in scenario.velocities:
            assert(math.hypot(velocity[0], velocity[1]) < 1e-9)
        self.check_resolved(scenario)

    def test_fast_tangential_velocity(self):
        scenario = Scenario(corner_below_center_orientation, (0, 0, 0, 1.0, 0, -1.0))
        report = self.impact(scenario)

        first = report.intervals[0]
        assert(first.tangential_states == (S, ))
        assert(first.ranking.category == SolutionCategory.NO_VIOLATIONS)
        rolling = first.candidates[0]
        assert(rolling.tangential_states == (R, ))
        assert(rolling.category >= SolutionCategory.TANGENTIAL_VELOCITY_TOO_LARGE_TO_STICK)

        # Friction opposes the slip
        x, y, z = first.selected.constraint_impulses()[0]
        assert(z < 0.0 and x > 0.0)
        self.assertAlmostEqual(math.hypot(x, y), scenario.brick.mu_dyn * -z, places=6)

        # Never rolling while the point is sliding fast
        for before, record in zip([(1.0, 0, -1.0)] + [r.proximal_velocities[0] for r in report.intervals],
                                  report.intervals):
            if math.hypot(before[0], before[1]) > settings.MAX_STICKING_TANG_VEL:
                assert(record.tangential_states != (R, ))
        self.check_resolved(scenario)

    def test_not_impacting(self):
        scenario = Scenario(corner_below_center_orientation, (0, 0, 0, 0, 0, 0.5))
        self.assertRaises(ValueError, self.impact, scenario)

        scenario = Scenario(corner_below_center_orientation, (0, 0, 0, 0, 0, -1.0))
        scenario.has_rebounded = []
        self.assertRaises(ValueError, self.impact, scenario)

    def test_evaluate_linear_system_solution(self):
        scenario = Scenario(edge_orientation(), (0, 0, 0, 0, 0, -1.0))
        impacter = Impacter(scenario.system, scenario.brick, scenario.state,
                            scenario.positions, scenario.proximal)
        phase = ImpactPhase.COMPRESSION
        budget = [0.0, 0.0]

        # Constraining only one point of the edge lets the other sink further
        candidate = impacter.evaluate_candidate(scenario.state, phase, budget, (R, O))
        assert(candidate.category == SolutionCategory.NEGATIVE_POST_COMPRESSION_NORMAL_VELOCITY)
        assert(0.0 < candidate.fitness < INFINITY)

        candidate = impacter.generate_and_solve_linear_system(scenario.state, phase, budget, (R, R))
        assert(candidate.category == SolutionCategory.NOT_EVALUATED)
        assert(candidate.velocity_change.shape == (6, ))
        assert(candidate.local_impulses.shape == (6, ))
        ranking = impacter.evaluate_linear_system_solution(scenario.state, phase, budget, candidate)
        assert(ranking.category == SolutionCategory.NO_VIOLATIONS)
        self.assertAlmostEqual(ranking.fitness, np.linalg.norm(candidate.local_impulses))

        # In restitution, ignoring one of the impulses is penalized
        phase = ImpactPhase.RESTITUTION
        budget = [0.5, 0.5]
        candidate = impacter.evaluate_candidate(scenario.state, phase, budget, (R, O))
        assert(candidate.category == SolutionCategory.RESTITUTION_IMPULSES_IGNORED)
        self.assertAlmostEqual(candidate.fitness, 0.5)

        candidate = impacter.evaluate_candidate(scenario.state, phase, budget, (R, R))
        normals = candidate.normal_impulses()
        self.assertAlmostEqual(normals[0], -0.5)
        self.assertAlmostEqual(normals[1], -0.5)

        # Nothing to do
        budget = [0.0, 0.0]
        candidate = impacter.evaluate_candidate(scenario.state, phase, budget, (O, R))
        assert(candidate.category == SolutionCategory.NO_IMPULSES_APPLIED)
        assert(candidate.fitness == INFINITY)

        # Without a slip direction there is no friction to iterate on
        candidate = impacter.evaluate_candidate(scenario.state, phase, budget, (O, S))
        assert(candidate.category == SolutionCategory.UNABLE_TO_RESOLVE_UNKNOWN_SLIP_DIRECTION)

        # A negative restitution impulse pulls the brick toward the ground
        budget = [0.5, -0.5]
        candidate = impacter.evaluate_candidate(scenario.state, phase, budget, (R, R))
        assert(candidate.category == SolutionCategory.GROUND_APPLIES_ATTRACTIVE_IMPULSE)
        self.assertAlmostEqual(candidate.fitness, 0.5)

    def test_stiction_limit(self):
        scenario = Scenario(corner_below_center_orientation, (0, 0, 0, 0.09, 0, -0.1),
                            mu_dyn=0.05)
        impacter = Impacter(scenario.system, scenario.brick, scenario.state,
                            scenario.positions, scenario.proximal)
        phase = ImpactPhase.COMPRESSION

        # Stopping the slip needs more friction than the ground can supply
        candidate = impacter.evaluate_candidate(scenario.state, phase, [0.0], (R, ))
        assert(candidate.category == SolutionCategory.STICKING_IMPULSE_EXCEEDS_STICTION_LIMIT)
        x, y, z = candidate.constraint_impulses()[0]
        excess = math.hypot(x, y) - scenario.brick.mu_dyn * -z
        assert(excess > settings.MIN_MEANINGFUL_IMPULSE)
        self.assertAlmostEqual(candidate.fitness, excess)

        candidate = impacter.evaluate_candidate(scenario.state, phase, [0.0], (S, ))
        assert(candidate.category == SolutionCategory.NO_VIOLATIONS)

    def test_active_constraint_does_nothing(self):
        scenario = Scenario(edge_orientation(), (0, 0, 0, 0, 0, -1.0), mu_dyn=2.0)
        impacter = Impacter(scenario.system, scenario.brick, scenario.state,
                            scenario.positions, scenario.proximal)

        # Point 4 slides with no normal impulse, so it gets no friction either
        budget = [5.0, 0.0]
        candidate = impacter.evaluate_candidate(scenario.state, ImpactPhase.RESTITUTION,
                                                budget, (R, S))
        assert(candidate.category == SolutionCategory.ACTIVE_CONSTRAINT_DOES_NOTHING)
        impulses = candidate.constraint_impulses()
        assert(np.linalg.norm(impulses[1]) < settings.MIN_MEANINGFUL_IMPULSE)
        self.assertAlmostEqual(impulses[0][2], -5.0)
        self.assertAlmostEqual(candidate.fitness, np.linalg.norm(candidate.local_impulses))

if __name__ ==  '__main__':
    unittest.main()
