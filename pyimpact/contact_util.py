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

__all__ = ('coefficient_of_restitution', 'tangential_velocity_angle',
           'abs_angle_difference', 'sliding_step_length_to_origin')

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import math
import numpy as np
from .common import clamp
from .settings import (PI, SIGNIFICANT_REAL, TOL_RELIABLE_DIRECTION,
                       MAX_STICKING_TANG_VEL)

TWO_PI = 2.0 * PI

def coefficient_of_restitution(v_normal, v_min_rebound, v_plastic_deform, min_cor):
    """
    Restitution law. v_normal is the signed normal velocity of the point
    before the impact (negative when approaching the ground).

    The coefficient decreases linearly with the impact speed, from 1 at rest
    down to min_cor at v_plastic_deform and beyond. Impacts slower than
    v_min_rebound do not rebound at all; the point sticks to the ground
    instead of bouncing forever with ever smaller hops.
    """
    speed = -v_normal
    if speed < v_min_rebound:
        return 0.0
    cor_line = ((min_cor - 1.0) / v_plastic_deform) * speed + 1.0
    return max(cor_line, min_cor)

def tangential_velocity_angle(velocity, tolerance=TOL_RELIABLE_DIRECTION):
    """
    The angle between the ground X axis and the tangential (XY) part of
    velocity, in [-pi, pi]. Returns None if the tangential speed is too small
    for the direction to be reliable.
    """
    vx, vy = velocity[0], velocity[1]
    if math.hypot(vx, vy) < tolerance:
        return None
    return math.atan2(vy, vx)

def abs_angle_difference(a, b):
    """
    The absolute difference between two angles in [-pi, pi], accounting for
    periodicity. The result is in [0, pi].
    """
    if a < 0:
        a += TWO_PI
    if b < 0:
        b += TWO_PI

    diff = abs(a - b)
    if diff < PI:
        return diff
    return TWO_PI - diff

def sliding_step_length_to_origin(a, b, max_sticking_velocity=MAX_STICKING_TANG_VEL):
    """
    Given the segment from a to b in the tangential velocity plane, find q,
    the point on it closest to the origin.

    Returns (step_length, q) where step_length is the ratio |aq|:|ab|. A full
    step is returned when a itself is slow (slip is only impending) or when the
    segment is degenerate.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)

    if np.linalg.norm(a) < max_sticking_velocity:
        return 1.0, b

    a_to_p = -a
    a_to_b = b - a
    ab_sqr = a_to_b.dot(a_to_b)
    if ab_sqr < SIGNIFICANT_REAL:
        return 1.0, b

    step_length = clamp(a_to_p.dot(a_to_b) / ab_sqr, 0.0, 1.0)
    return step_length, a + step_length * a_to_b
