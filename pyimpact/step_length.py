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
Interval step length control.

The friction impulse of a sliding point is computed for a fixed direction,
so an interval must not be so long that the slip direction of any sliding
point rotates far from the direction at the start of the interval.
"""

__all__ = ('StepLengthDecision', 'classify_direction_change',
           'limit_step_length', 'calculate_interval_step_length')

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import math
import logging
from collections import namedtuple
from copy import copy
from .active_set import TangentialState
from .common import NoValidStepLengthError
from .contact_util import (tangential_velocity_angle, abs_angle_difference,
                           sliding_step_length_to_origin)
from .system import Stage
from . import settings

PI = settings.PI
MAX_STICKING_TANG_VEL = settings.MAX_STICKING_TANG_VEL
MAX_SLIDING_DIR_CHANGE = settings.MAX_SLIDING_DIR_CHANGE
MIN_INTERVAL_STEP_LENGTH = settings.MIN_INTERVAL_STEP_LENGTH
MAX_ITER_STEP_LENGTH = settings.MAX_ITER_STEP_LENGTH
MIN_INTERVALS_PER_PHASE = settings.MIN_INTERVALS_PER_PHASE

log = logging.getLogger(__name__)

class StepLengthDecision(namedtuple('StepLengthDecision', ['accepted', 'step_length', 'reason'])):
    __slots__ = ()
    # Reasons
    STOPPING = 'tangential velocity becomes negligible'
    SMALL_CHANGE = 'direction change is small enough'
    LIMIT_ROTATION = 'limiting change in sliding direction'
    SEEK_ORIGIN = 'possible sliding direction reversal'

def classify_direction_change(step_length, start_velocity, proposed_velocity):
    """
    Decide whether step_length is acceptable for one sliding point, given its
    velocity at the start of the interval and its proposed velocity after
    step_length. Returns a StepLengthDecision; if it is not accepted, its
    step_length is the (smaller) value to try next.
    """
    speed = math.hypot(proposed_velocity[0], proposed_velocity[1])
    angle1 = tangential_velocity_angle(proposed_velocity)

    # The step ends with negligible tangential velocity: the point is about to
    # start rolling.
    if angle1 is None or speed < MAX_STICKING_TANG_VEL:
        return StepLengthDecision(True, step_length, StepLengthDecision.STOPPING)

    angle0 = tangential_velocity_angle(start_velocity)
    if angle0 is not None:
        change = abs_angle_difference(angle0, angle1)

        if change <= MAX_SLIDING_DIR_CHANGE:
            return StepLengthDecision(True, step_length, StepLengthDecision.SMALL_CHANGE)

        if change <= 0.5 * PI:
            # Limit the step length to the allowed direction change. It must
            # also be strictly decreasing.
            new_step_length = min(step_length * (MAX_SLIDING_DIR_CHANGE / change),
                                  step_length - MIN_INTERVAL_STEP_LENGTH)
            # No shorter step is allowed; settle for the smallest one.
            if new_step_length <= MIN_INTERVAL_STEP_LENGTH:
                return StepLengthDecision(True, MIN_INTERVAL_STEP_LENGTH,
                                          StepLengthDecision.LIMIT_ROTATION)
            return StepLengthDecision(False, new_step_length, StepLengthDecision.LIMIT_ROTATION)

    # The point might be reversing direction or stopping. End the interval at
    # the velocity closest to the origin of the tangential velocity plane. A
    # full fraction keeps the current step, even if an earlier point shortened
    # it.
    fraction, _ = sliding_step_length_to_origin(start_velocity[0:2], proposed_velocity[0:2])
    return StepLengthDecision(fraction == 1.0, step_length * fraction,
                              StepLengthDecision.SEEK_ORIGIN)

def limit_step_length(step_length, interval_counter,
                      min_intervals_per_phase=MIN_INTERVALS_PER_PHASE):
    """
    Ensure at least min_intervals_per_phase intervals will occur, and that the
    step length is no smaller than MIN_INTERVAL_STEP_LENGTH.
    """
    if interval_counter < min_intervals_per_phase:
        max_step_length = 1.0 / (min_intervals_per_phase - interval_counter + 1)
        if step_length > max_step_length:
            log.debug('reducing step length from %g to %g to ensure the minimum number '
                      'of intervals', step_length, max_step_length)
            step_length = max_step_length

    if step_length < MIN_INTERVAL_STEP_LENGTH:
        log.debug('increasing step length from %g to the minimum %g',
                  step_length, MIN_INTERVAL_STEP_LENGTH)
        step_length = MIN_INTERVAL_STEP_LENGTH

    return step_length

def calculate_interval_step_length(system, brick, proximal_point_indices, state,
                                   current_velocities, candidate, interval_counter,
                                   min_intervals_per_phase=MIN_INTERVALS_PER_PHASE):
    """
    The step length for the selected active set candidate: the fraction of
    its velocity change to apply in this interval.

    current_velocities are the proximal point velocities at the start of the
    interval. Raises NoValidStepLengthError if the step length of a sliding
    point cannot be resolved.
    """
    step_length = 1.0
    velocity_change = candidate.velocity_change

    proposed = copy(state)
    for i, tangential_state in enumerate(candidate.tangential_states):
        if tangential_state != TangentialState.SLIDING:
            continue

        index = proximal_point_indices[i]
        for iteration in range(MAX_ITER_STEP_LENGTH):
            proposed.u = state.u + step_length * velocity_change
            system.realize(proposed, Stage.VELOCITY)
            proposed_velocity = brick.find_lowest_point_velocity_in_ground(proposed, index)

            decision = classify_direction_change(step_length, current_velocities[i],
                                                 proposed_velocity)
            if settings.DEBUG_STEP_LENGTH:
                log.debug('  point %d: v0=%s v1=%s -> %s', i, current_velocities[i],
                          proposed_velocity, decision)

            step_length = decision.step_length
            if decision.accepted:
                break
        else:
            raise NoValidStepLengthError('No suitable interval step length found '
                                         '(proximal point %d).' % i)

    return limit_step_length(step_length, interval_counter, min_intervals_per_phase)
