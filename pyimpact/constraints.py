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

__all__ = ('Constraint', 'PointInPlaneConstraint', 'BallConstraint')

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import numpy as np
from .common import (skew, vec3, Z_AXIS)

class Constraint(object):
    """
    The base constraint class. Constraints connect the free body to ground.
    They are created disabled; whether a constraint is enabled is part of the
    State, so a scratch copy of a state can enable a different set of
    constraints than the committed one.
    """
    row_count = 0

    def __init__(self, system):
        self._system = system
        self._index = system._add_constraint(self)

    @property
    def system(self):
        return self._system

    @property
    def index(self):
        """The index of this constraint in the system."""
        return self._index

    def enable(self, state):
        state.enabled.add(self._index)

    def disable(self, state):
        state.enabled.discard(self._index)

    def is_enabled(self, state):
        return self._index in state.enabled

    def position_errors(self, state):
        raise NotImplementedError # Implemented in subclass

    def jacobian(self, state):
        """Rows of the velocity constraint, with respect to u."""
        raise NotImplementedError # Implemented in subclass

    def _station_jacobian(self, state, station):
        # Station velocity
        # v_s = v + cross(w, r)
        #     = v - skew(r) * w
        # J = [-skew(r) I]
        r = self._system.station_offset_in_ground(state, station)
        return np.hstack((-skew(r), np.eye(3)))

class PointInPlaneConstraint(Constraint):
    """
    Keeps a point fixed on the body (the follower point) in the horizontal
    ground plane at the given height.
    """
    # C = dot(p + R * s, n) - h
    # Cdot = dot(v_s, n)
    # J = n^T [-skew(r) I]
    row_count = 1

    def __init__(self, system, height=0.0, follower_point=(0, 0, 0)):
        Constraint.__init__(self, system)
        self._height = float(height)
        self.follower_point = follower_point

    @property
    def height(self):
        return self._height

    @property
    def follower_point(self):
        """The point on the body, expressed in the body frame."""
        return self._follower_point

    @follower_point.setter
    def follower_point(self, point):
        self._follower_point = vec3(*point)

    def position_errors(self, state):
        location = self._system.station_location_in_ground(state, self._follower_point)
        return np.array((location[Z_AXIS] - self._height, ))

    def jacobian(self, state):
        return self._station_jacobian(state, self._follower_point)[Z_AXIS:Z_AXIS+1]

class BallConstraint(Constraint):
    """
    Pins a point on the body to a point fixed in ground. Provides three rows
    along the ground X, Y and Z axes, in that order.
    """
    # C = p + R * s - g
    # Cdot = v_s
    # J = [-skew(r) I]
    row_count = 3

    def __init__(self, system, point_on_ground=(0, 0, 0), point_on_body=(0, 0, 0)):
        Constraint.__init__(self, system)
        self.point_on_ground = point_on_ground
        self.point_on_body = point_on_body

    @property
    def point_on_ground(self):
        return self._point_on_ground

    @point_on_ground.setter
    def point_on_ground(self, point):
        self._point_on_ground = vec3(*point)

    @property
    def point_on_body(self):
        return self._point_on_body

    @point_on_body.setter
    def point_on_body(self, point):
        self._point_on_body = vec3(*point)

    def position_errors(self, state):
        location = self._system.station_location_in_ground(state, self._point_on_body)
        return location - self._point_on_ground

    def jacobian(self, state):
        return self._station_jacobian(state, self._point_on_body)
