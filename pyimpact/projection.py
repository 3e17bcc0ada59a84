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

__all__ = ('PositionProjecter', 'proximal_index_subsets')

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import logging
from copy import copy
import numpy as np
from .common import (NoValidProjectionError, ProjectionFailedError, INFINITY)
from .system import Stage
from . import settings

TOL_PROJECT_Q = settings.TOL_PROJECT_Q

log = logging.getLogger(__name__)

def proximal_index_subsets(count):
    """
    All 2**count - 1 non-empty subsets of range(count), as tuples. The bits
    of the subset number select the members.
    """
    return [tuple(i for i in range(count) if number & (1 << i))
                for number in range(1, 1 << count)]

class PositionProjecter(object):
    """
    Resolves interpenetration of the brick with the ground by projecting its
    positions onto point-in-plane constraints at some of the proximal points.

    Which points to constrain is not known in advance: constraining a point
    that would have left the ground on its own moves the brick more than
    necessary. Two search strategies are available: exhaustive and pruning.
    """
    def __init__(self, system, brick, state, positions_in_ground):
        self._system = system
        self._brick = brick
        self._proximal_point_indices = brick.find_proximal_point_indices(positions_in_ground)

        # Move the point-in-plane constraints of the proximal points to the
        # body stations presently at their lowest points.
        for index in self._proximal_point_indices:
            brick.set_pip_constraint_location(state, index, positions_in_ground[index])

        log.debug('projecting positions: %d proximal point(s) %s',
                  len(self._proximal_point_indices), self._proximal_point_indices)
        if settings.DEBUG_POSITIONS:
            for i, index in enumerate(self._proximal_point_indices):
                log.debug('     [%d] p=%s', i, positions_in_ground[index])

    @property
    def proximal_point_indices(self):
        return self._proximal_point_indices

    def project_positions(self, state, exhaustive=None):
        if exhaustive is None:
            exhaustive = settings.EXHAUSTIVE_SEARCH_POSITIONS

        if exhaustive:
            return self.project_positions_exhaustive(state)
        else:
            return self.project_positions_pruning(state)

    def project_positions_exhaustive(self, state):
        """
        Try projecting with every combination of proximal points and select
        the projection that resolves all violations with the smallest change
        in q. Returns the selected combination (indices into the proximal
        points).
        """
        subsets = proximal_index_subsets(len(self._proximal_point_indices))
        log.debug('  -> %d combination(s)', len(subsets))

        min_distance = INFINITY
        min_q = None
        min_subset = None
        for subset in subsets:
            scratch = self._scratch_state(state)
            dist = self.evaluate_projection(scratch, state, subset)

            # Several combinations can have the same distance. Favor the one
            # with the most enabled constraints.
            if abs(dist - min_distance) < TOL_PROJECT_Q:
                better = len(subset) > len(min_subset)
            else:
                better = dist < min_distance
            if better:
                min_distance = dist
                min_q = scratch.q
                min_subset = subset

            if settings.DEBUG_POSITIONS:
                log.debug('     d=%10.6g  %s', dist, subset)

        if min_distance == INFINITY:
            raise NoValidProjectionError('No valid position projection found by exhaustive search.')

        state.q = min_q
        log.info('exhaustive search selected constraints %s (distance %g)',
                 self._vertex_indices(min_subset), min_distance)
        return min_subset

    def project_positions_pruning(self, state):
        """
        Begin with the constraints of all proximal points; successively
        remove the constraint at the highest point until the projection is
        successful. Returns the successful combination (indices into the
        proximal points).
        """
        subset = list(range(len(self._proximal_point_indices)))
        log.debug('  -> starting pruning search with %d constraint(s)', len(subset))

        while True:
            if not subset:
                raise NoValidProjectionError('No valid position projection found by pruning search.')

            scratch = self._scratch_state(state)
            dist = self.evaluate_projection(scratch, state, subset)
            if settings.DEBUG_POSITIONS:
                log.debug('     %s d=%g', subset, dist)

            if dist < INFINITY:
                state.q = scratch.q
                break

            heights = [self._brick.get_pip_constraint_height_in_ground(
                            state, self._proximal_point_indices[i]) for i in subset]
            del subset[int(np.argmax(heights))]

        log.info('pruning search selected constraints %s (distance %g)',
                 self._vertex_indices(subset), dist)
        return tuple(subset)

    def evaluate_projection(self, scratch, original, subset):
        """
        Project the positions of scratch using the constraints of the given
        proximal points. Returns the 2-norm distance between the original and
        projected q, or infinity if the projection failed or left the brick
        interpenetrating the ground.
        """
        for i in subset:
            self._brick.enable_pip_constraint(scratch, self._proximal_point_indices[i])

        try:
            self._system.project_q(scratch, TOL_PROJECT_Q)
        except ProjectionFailedError as ex:
            log.debug('projection with %s failed: %s', subset, ex)
            return INFINITY

        if self._brick.is_interpenetrating(scratch):
            return INFINITY
        return float(np.linalg.norm(original.q - scratch.q))

    def _scratch_state(self, state):
        # Positions only; no constraints enabled
        scratch = copy(state)
        scratch.enabled.clear()
        self._system.realize(scratch, Stage.POSITION)
        return scratch

    def _vertex_indices(self, subset):
        return [self._proximal_point_indices[i] for i in subset]
