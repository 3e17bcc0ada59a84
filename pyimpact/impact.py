#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# pyimpact - rigid body contact resolution against a ground plane
#
# This software is provided 'as-is', without any express or implied
# warranty.  In no event will the authors be held liable for any damages
# arising from the use of this software.
# Permission is granted to anyone to use this software for any purpose,
# including commercial applications, and to alter it and redistribute it
# freely, subject to the following restrictions:
# 1. The origin of this software must not be misrepresented; you must not
# claim that you wrote the original software. If you use this software
# in a product, an acknowledgment in the product documentation would be
# appreciated but is not required.
# 2. Altered source versions must be plainly marked as such, and must not be
# misrepresented as being the original software.
# 3. This notice may not be removed or altered from any source distribution.

"""
Impulse-based impact resolution.

An impact is resolved as a sequence of intervals, first in the compression
phase (until no proximal point is approaching the ground) and then in the
restitution phase (until the restitution impulses accumulated during
compression have been applied). In each interval, every assignment of
tangential states to the proximal points is tried; the best one is applied
for as much of its velocity change as the slip directions allow.
"""

__all__ = ('Impacter', 'ImpactReport', 'IntervalRecord', 'SlipDirectionUpdate',
           'refine_slip_directions')

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import math
import logging
from collections import namedtuple
from copy import copy
import numpy as np
from .active_set import (ImpactPhase, TangentialState, SolutionCategory, Ranking,
                         ActiveSetCandidate, NOT_EVALUATED,
                         enumerate_tangential_states, select_candidate,
                         count_categories, format_active_set)
from .common import (ImpactError, INFINITY, Z_AXIS)
from .contact_util import (coefficient_of_restitution, abs_angle_difference)
from .step_length import calculate_interval_step_length
from .system import Stage
from . import settings

PI = settings.PI
TOL_VELOCITY_FUZZINESS = settings.TOL_VELOCITY_FUZZINESS
TOL_MAX_DIF_DIR_ITERATION = settings.TOL_MAX_DIF_DIR_ITERATION
MIN_MEANINGFUL_IMPULSE = settings.MIN_MEANINGFUL_IMPULSE
MAX_STICKING_TANG_VEL = settings.MAX_STICKING_TANG_VEL
MIN_INTERVAL_STEP_LENGTH = settings.MIN_INTERVAL_STEP_LENGTH
MAX_ITER_SLIP_DIRECTION = settings.MAX_ITER_SLIP_DIRECTION
MIN_INTERVALS_PER_PHASE = settings.MIN_INTERVALS_PER_PHASE
MAX_IMPACT_INTERVALS = settings.MAX_IMPACT_INTERVALS

log = logging.getLogger(__name__)

class SlipDirectionUpdate(namedtuple('SlipDirectionUpdate', ['status', 'max_change'])):
    """Result of one slip direction iteration."""
    __slots__ = ()
    CONVERGED, REVERSED, CONTINUE = range(3)

def refine_slip_directions(previous, current, tolerance=TOL_MAX_DIF_DIR_ITERATION):
    """
    Compare the slip angles of the sliding points before and after an
    iteration. An angle of None (unreliable direction) counts as an infinite
    change.

    The directions have converged when the largest change is below tolerance.
    A change of pi means a minimum step already reverses the slip direction,
    so the point should be sticking instead.
    """
    max_change = 0.0
    for angle0, angle1 in zip(previous, current):
        if angle0 is None or angle1 is None:
            max_change = INFINITY
        else:
            max_change = max(max_change, abs_angle_difference(angle0, angle1))

    if max_change < tolerance:
        status = SlipDirectionUpdate.CONVERGED
    elif abs(max_change - PI) < tolerance:
        status = SlipDirectionUpdate.REVERSED
    else:
        status = SlipDirectionUpdate.CONTINUE
    return SlipDirectionUpdate(status, max_change)

class IntervalRecord(namedtuple('IntervalRecord', ['phase', 'counter', 'selected',
                                                   'step_length', 'proximal_velocities',
                                                   'candidates'])):
    """
    One impact interval: the selected candidate, the step length applied and
    the proximal point velocities after it. candidates holds every candidate
    evaluated in the interval.
    """
    __slots__ = ()

    @property
    def tangential_states(self):
        return self.selected.tangential_states

    @property
    def ranking(self):
        return self.selected.ranking

    def __repr__(self):
        return 'IntervalRecord(%d %s, %s, step=%g)' % (
                self.counter, format_active_set(self.tangential_states, self.phase.prefix),
                self.ranking, self.step_length)

class ImpactReport(object):
    """Summary of a completed impact, for diagnostics."""
    def __init__(self, proximal_point_indices, coefficients_of_restitution):
        self.proximal_point_indices = tuple(proximal_point_indices)
        self.coefficients_of_restitution = list(coefficients_of_restitution)
        self.intervals = []
        self.restitution_impulses = [0.0] * len(self.proximal_point_indices)

    def __repr__(self):
        return 'ImpactReport(points=%s, %d compression, %d restitution interval(s))' % (
                self.proximal_point_indices, self.compression_interval_count,
                self.restitution_interval_count)

    def _phase_intervals(self, phase):
        return [record for record in self.intervals if record.phase == phase]

    @property
    def compression_intervals(self):
        return self._phase_intervals(ImpactPhase.COMPRESSION)

    @property
    def restitution_intervals(self):
        return self._phase_intervals(ImpactPhase.RESTITUTION)

    @property
    def compression_interval_count(self):
        return len(self.compression_intervals)

    @property
    def restitution_interval_count(self):
        return len(self.restitution_intervals)

class Impacter(object):
    """
    Resolves a single impact of the brick with the ground. A ball constraint
    is placed at each proximal point; each interval enables some of them.
    """
    def __init__(self, system, brick, state, all_positions_in_ground, proximal_point_indices,
                 min_intervals_per_phase=MIN_INTERVALS_PER_PHASE):
        self._system = system
        self._brick = brick
        self._proximal_point_indices = tuple(proximal_point_indices)
        self._min_intervals_per_phase = min_intervals_per_phase

        # Ball constraints are anchored at the current locations of the
        # proximal points. Positions do not change during an impact.
        for index in self._proximal_point_indices:
            brick.set_ball_constraint_location(state, index, all_positions_in_ground[index])

    @property
    def proximal_point_indices(self):
        return self._proximal_point_indices

    def perform_impact_exhaustive(self, state, proximal_velocities, has_rebounded):
        """
        Resolve the impact by exhaustive search of the active sets in every
        interval.

        state.u, proximal_velocities (the velocities of the proximal points,
        in the order of proximal_point_indices) and has_rebounded (one flag
        per proximal point) are updated in place. Returns an ImpactReport.
        """
        brick = self._brick
        count = len(self._proximal_point_indices)
        if len(proximal_velocities) != count or len(has_rebounded) != count:
            raise ValueError('Expected %d proximal velocities and rebound flags' % count)
        if not brick.is_impacting(proximal_velocities):
            raise ValueError('No proximal point is impacting')

        # Restitution law, evaluated once per impact with the pre-impact
        # normal velocities. A point that has already rebounded in an
        # earlier impact does not rebound again.
        cors = []
        for i in range(count):
            if has_rebounded[i]:
                cors.append(0.0)
            else:
                cors.append(coefficient_of_restitution(
                        proximal_velocities[i][Z_AXIS], brick.v_min_rebound,
                        brick.v_plastic_deform, brick.min_cor))

        report = ImpactReport(self._proximal_point_indices, cors)
        restitution_impulses = report.restitution_impulses
        all_states = enumerate_tangential_states(count)

        log.info('impact: %d proximal point(s) %s, COR=%s', count,
                 self._proximal_point_indices, ['%.3g' % c for c in cors])

        phase = ImpactPhase.COMPRESSION
        interval_counter = 0
        while True:
            if len(report.intervals) >= MAX_IMPACT_INTERVALS:
                raise ImpactError('Impact not resolved after %d intervals' % MAX_IMPACT_INTERVALS)
            interval_counter += 1

            candidates = [self.evaluate_candidate(state, phase, restitution_impulses, states)
                            for states in all_states]
            if settings.DEBUG_IMPACT:
                for candidate in candidates:
                    log.debug('     %s %s', format_active_set(candidate.tangential_states,
                                                              phase.prefix), candidate.ranking)
            if log.isEnabledFor(logging.DEBUG):
                histogram = count_categories(candidates)
                log.debug('interval %d (%s): %s', interval_counter, phase.name,
                          ', '.join('%s=%d' % (category.name, n)
                                    for category, n in sorted(histogram.items()) if n))

            best = select_candidate(candidates)

            step_length = calculate_interval_step_length(
                    self._system, brick, self._proximal_point_indices, state,
                    proximal_velocities, best, interval_counter,
                    self._min_intervals_per_phase)

            # Apply the step and refresh the proximal point velocities.
            state.u = state.u + step_length * best.velocity_change
            self._system.realize(state, Stage.VELOCITY)
            proximal_velocities[:] = self.find_proximal_velocities(state)

            log.debug('  %d %s selected: %s, step length %g', interval_counter,
                      format_active_set(best.tangential_states, phase.prefix),
                      best.category.description, step_length)
            report.intervals.append(IntervalRecord(phase, interval_counter, best, step_length,
                                                   [v.copy() for v in proximal_velocities],
                                                   candidates))

            normal_impulses = best.normal_impulses()
            if phase == ImpactPhase.COMPRESSION:
                for i, normal in normal_impulses.items():
                    restitution_impulses[i] += -normal * cors[i] * step_length

                if not brick.is_impacting(proximal_velocities):
                    if max(restitution_impulses) < MIN_MEANINGFUL_IMPULSE:
                        break
                    phase = ImpactPhase.RESTITUTION
                    interval_counter = 0
            else:
                for i, normal in normal_impulses.items():
                    restitution_impulses[i] -= -normal * step_length
                    if abs(normal) > MIN_MEANINGFUL_IMPULSE:
                        has_rebounded[i] = True

                if max(restitution_impulses) < MIN_MEANINGFUL_IMPULSE:
                    break

        if settings.DEBUG_IMPACT:
            assert not brick.is_impacting(proximal_velocities)

        log.info('impact resolved: %d compression and %d restitution interval(s)',
                 report.compression_interval_count, report.restitution_interval_count)
        return report

    def find_proximal_velocities(self, state):
        return [self._brick.find_lowest_point_velocity_in_ground(state, index)
                    for index in self._proximal_point_indices]

    def evaluate_candidate(self, state, phase, restitution_impulses, tangential_states):
        """Solve and rank the impact equations for one active set."""
        candidate = self.generate_and_solve_linear_system(state, phase, restitution_impulses,
                                                          tangential_states)
        candidate.ranking = self.evaluate_linear_system_solution(state, phase,
                                                                 restitution_impulses,
                                                                 candidate)
        return candidate

    def _constrained_state(self, state, tangential_states):
        constrained = copy(state)
        constrained.enabled.clear()
        for i, tangential_state in enumerate(tangential_states):
            if tangential_state != TangentialState.OBSERVING:
                self._brick.enable_ball_constraint(constrained, self._proximal_point_indices[i])
        self._system.realize(constrained, Stage.VELOCITY)
        return constrained

    def generate_and_solve_linear_system(self, state, phase, restitution_impulses,
                                         tangential_states):
        """
        Build and solve the impact equations for the given tangential
        states:

            [ M  G^T ] [ du     ]   [ 0 ]
            [ G   0  ] [ lambda ] = [ b ]

        The ground applies the impulse -lambda to the brick at each active
        point. For sliding points, the tangential rows are replaced by a
        friction law tying the tangential multipliers to the normal one; its
        direction is found iteratively. In the restitution phase, the normal
        row is replaced by the restitution impulse.

        Returns an ActiveSetCandidate; it is already ranked if its slip
        directions could not be resolved.
        """
        system = self._system
        brick = self._brick
        constrained = self._constrained_state(state, tangential_states)

        M = system.calc_mass_matrix(constrained)
        G = system.calc_constraint_jacobian(constrained)
        nu, nm = M.shape[0], G.shape[0]

        A = np.zeros((nu + nm, nu + nm))
        A[:nu, :nu] = M
        A[:nu, nu:] = G.T
        A[nu:, :nu] = G
        b = np.zeros(nu + nm)

        # (proximal point, first row) of each sliding point
        sliding = []
        for i, tangential_state in enumerate(tangential_states):
            if tangential_state == TangentialState.OBSERVING:
                continue

            index = self._proximal_point_indices[i]
            velocity = brick.find_lowest_point_velocity_in_ground(constrained, index)
            row_x = nu + brick.get_ball_constraint_first_index(constrained, index)
            row_y, row_z = row_x + 1, row_x + 2

            if tangential_state == TangentialState.ROLLING:
                b[row_x] = -velocity[0]
                b[row_y] = -velocity[1]
            else:
                A[row_x:row_z, :nu] = 0.0
                A[row_x, row_x] = 1.0
                A[row_y, row_y] = 1.0
                self._set_friction_direction(A, row_x, brick.find_tangential_velocity_angle(velocity))
                sliding.append((index, row_x))

            if phase == ImpactPhase.COMPRESSION:
                b[row_z] = -velocity[Z_AXIS]
            else:
                A[row_z, :nu] = 0.0
                A[row_z, row_z] = 1.0
                b[row_z] = -restitution_impulses[i]

        ranking = NOT_EVALUATED
        if sliding:
            ranking = self._iterate_slip_directions(constrained, A, b, sliding)

        x = system.solve_linear_system(A, b)
        return ActiveSetCandidate(tangential_states, x[:nu], x[nu:], ranking)

    def _set_friction_direction(self, A, row_x, angle):
        # lambda_t = -mu * lambda_z * (cos, sin)(angle + pi): the friction
        # impulse -lambda_t opposes the slip direction. No friction if the
        # slip direction is unknown.
        if angle is None:
            A[row_x, row_x + 2] = 0.0
            A[row_x + 1, row_x + 2] = 0.0
        else:
            mu = self._brick.mu_dyn
            A[row_x, row_x + 2] = -mu * math.cos(angle + PI)
            A[row_x + 1, row_x + 2] = -mu * math.sin(angle + PI)

    def _slip_angles(self, state, sliding):
        brick = self._brick
        return [brick.find_tangential_velocity_angle(
                    brick.find_lowest_point_velocity_in_ground(state, index))
                        for index, row_x in sliding]

    def _iterate_slip_directions(self, constrained, A, b, sliding):
        """
        Find the slip directions of the sliding points by taking trial steps
        of minimum length. Updates the friction rows of A in place. Returns
        the ranking of the candidate: NOT_EVALUATED if the directions
        converged.
        """
        nu = constrained.NU
        angles = self._slip_angles(constrained, sliding)
        trial = copy(constrained)

        for iteration in range(MAX_ITER_SLIP_DIRECTION):
            x = self._system.solve_linear_system(A, b)
            trial.u = constrained.u + MIN_INTERVAL_STEP_LENGTH * x[:nu]
            self._system.realize(trial, Stage.VELOCITY)

            new_angles = self._slip_angles(trial, sliding)
            for (index, row_x), angle in zip(sliding, new_angles):
                self._set_friction_direction(A, row_x, angle)

            update = refine_slip_directions(angles, new_angles)
            angles = new_angles
            if settings.DEBUG_IMPACT:
                log.debug('       slip iteration %d: max change %g', iteration, update.max_change)

            if update.status == SlipDirectionUpdate.CONVERGED:
                return NOT_EVALUATED
            if update.status == SlipDirectionUpdate.REVERSED:
                return Ranking(SolutionCategory.MIN_STEP_CAUSES_SLIP_DIRECTION_REVERSAL, INFINITY)

        return Ranking(SolutionCategory.UNABLE_TO_RESOLVE_UNKNOWN_SLIP_DIRECTION, INFINITY)

    def evaluate_linear_system_solution(self, state, phase, restitution_impulses, candidate):
        """
        Rank a solved candidate by the first rule it violates, in order of
        severity. A candidate that was already ranked keeps its ranking.
        """
        if candidate.category != SolutionCategory.NOT_EVALUATED:
            return candidate.ranking

        brick = self._brick
        impulses = candidate.constraint_impulses()
        total = float(np.linalg.norm(candidate.local_impulses))

        if total < MIN_MEANINGFUL_IMPULSE:
            return Ranking(SolutionCategory.NO_IMPULSES_APPLIED, INFINITY)

        # Only the compression phase must end without approaching points.
        if phase == ImpactPhase.COMPRESSION:
            final = copy(state)
            final.u = state.u + candidate.velocity_change
            self._system.realize(final, Stage.VELOCITY)
            min_normal_velocity = min(v[Z_AXIS] for v in self.find_proximal_velocities(final))
            if min_normal_velocity < -TOL_VELOCITY_FUZZINESS:
                return Ranking(SolutionCategory.NEGATIVE_POST_COMPRESSION_NORMAL_VELOCITY,
                               -min_normal_velocity)

        max_normal = float(np.max(impulses[:, Z_AXIS]))
        if max_normal > MIN_MEANINGFUL_IMPULSE:
            return Ranking(SolutionCategory.GROUND_APPLIES_ATTRACTIVE_IMPULSE, max_normal)

        rolling = [(row, i) for row, i in enumerate(candidate.active_points)
                        if candidate.tangential_states[i] == TangentialState.ROLLING]

        max_excess = 0.0
        for row, i in rolling:
            tangential = math.hypot(impulses[row, 0], impulses[row, 1])
            max_excess = max(max_excess, tangential - brick.mu_dyn * -impulses[row, Z_AXIS])
        if max_excess > MIN_MEANINGFUL_IMPULSE:
            return Ranking(SolutionCategory.STICKING_IMPULSE_EXCEEDS_STICTION_LIMIT, max_excess)

        max_speed = 0.0
        for row, i in rolling:
            velocity = brick.find_lowest_point_velocity_in_ground(
                            state, self._proximal_point_indices[i])
            max_speed = max(max_speed, math.hypot(velocity[0], velocity[1]))
        if max_speed > MAX_STICKING_TANG_VEL:
            return Ranking(SolutionCategory.TANGENTIAL_VELOCITY_TOO_LARGE_TO_STICK, max_speed)

        # All restitution impulses must be applied simultaneously.
        if phase == ImpactPhase.RESTITUTION:
            shortfall = sum(restitution_impulses) - float(np.sum(-impulses[:, Z_AXIS]))
            if shortfall > MIN_MEANINGFUL_IMPULSE * len(restitution_impulses):
                return Ranking(SolutionCategory.RESTITUTION_IMPULSES_IGNORED, shortfall)

        if np.any(np.linalg.norm(impulses, axis=1) < MIN_MEANINGFUL_IMPULSE):
            return Ranking(SolutionCategory.ACTIVE_CONSTRAINT_DOES_NOTHING, total)

        return Ranking(SolutionCategory.NO_VIOLATIONS, total)
