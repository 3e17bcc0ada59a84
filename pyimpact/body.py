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

__all__ = ('Brick', 'brick_unit_inertia', 'create_multibody_system')

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import numpy as np
from .common import (clamp, vec3, is_valid_float, Z_AXIS)
from .constraints import (PointInPlaneConstraint, BallConstraint)
from .contact_util import tangential_velocity_angle
from .system import MultibodySystem
from . import settings

TOL_POSITION_FUZZINESS = settings.TOL_POSITION_FUZZINESS
TOL_VELOCITY_FUZZINESS = settings.TOL_VELOCITY_FUZZINESS

def brick_unit_inertia(half_lengths):
    """Principal moments of inertia of a solid brick of unit mass."""
    xx, yy, zz = [h**2 for h in half_lengths]
    return vec3((yy + zz) / 3.0, (xx + zz) / 3.0, (xx + yy) / 3.0)

class Brick(object):
    """
    A free brick with a sphere attached to each of its vertices. Each sphere
    can touch the horizontal ground plane at Z=0. All spheres have the same
    radius and material properties.

    Contact points are identified by vertex index (0..7). The contact point of
    a sphere is its lowest point.

    A PointInPlane and a Ball constraint are created for every sphere; they
    are disabled until a contact handler enables them on a state.
    """
    def __init__(self, system, half_lengths=settings.BRICK_HALF_LENGTHS,
                 sphere_radius=settings.SPHERE_RADIUS, mass=settings.BRICK_MASS,
                 mu_dyn=settings.MU_DYN, v_min_rebound=settings.V_MIN_REBOUND,
                 v_plastic_deform=settings.V_PLASTIC_DEFORM,
                 min_cor=settings.MIN_COR):

        half_lengths = vec3(*half_lengths)
        for value in list(half_lengths) + [sphere_radius, mu_dyn, v_min_rebound,
                                           v_plastic_deform, min_cor]:
            if not is_valid_float(value):
                raise ValueError('Invalid brick parameter: %s' % value)
        if any(half_lengths <= 0.0):
            raise ValueError('Invalid half lengths')

        # Ensure parameters are physically reasonable.
        self._half_lengths = half_lengths
        self._sphere_radius = max(0.0, float(sphere_radius))
        self._mu_dyn = max(0.0, float(mu_dyn))
        self._v_plastic_deform = max(0.0, float(v_plastic_deform))
        self._v_min_rebound = clamp(float(v_min_rebound), 0.0, self._v_plastic_deform)
        self._min_cor = clamp(float(min_cor), 0.0, 1.0)

        self._system = system
        system.set_mass_properties(mass, mass * brick_unit_inertia(half_lengths))

        self._vertices = []
        for i in (-1, 1):
            for j in (-1, 1):
                for k in (-1, 1):
                    self._vertices.append(vec3(i, j, k) * half_lengths)

        self._pip_constraints = []
        self._ball_constraints = []
        for vertex in self._vertices:
            self._pip_constraints.append(PointInPlaneConstraint(system, height=0.0))
            self._ball_constraints.append(BallConstraint(system))

    def __repr__(self):
        return 'Brick(half_lengths=%s, sphere_radius=%g, mu_dyn=%g)' % (
                list(self._half_lengths), self._sphere_radius, self._mu_dyn)

    @property
    def system(self):
        return self._system

    @property
    def half_lengths(self):
        return vec3(*self._half_lengths)

    @property
    def sphere_radius(self):
        return self._sphere_radius

    @property
    def mu_dyn(self):
        """Dynamic coefficient of friction between the spheres and ground."""
        return self._mu_dyn

    @property
    def v_min_rebound(self):
        """Impacts slower than this do not rebound."""
        return self._v_min_rebound

    @property
    def v_plastic_deform(self):
        """Impact speed at which the coefficient of restitution reaches min_cor."""
        return self._v_plastic_deform

    @property
    def min_cor(self):
        return self._min_cor

    @property
    def vertices(self):
        return [vec3(*v) for v in self._vertices]

    @property
    def vertex_count(self):
        return len(self._vertices)

    # Temporary point-in-plane constraints
    def get_pip_constraint_height_in_ground(self, state, i):
        pip = self._pip_constraints[i]
        return self._system.station_location_in_ground(state, pip.follower_point)[Z_AXIS]

    def set_pip_constraint_location(self, state, i, position_in_ground):
        self._pip_constraints[i].follower_point = \
                self._system.find_station_at_ground_point(state, position_in_ground)

    def enable_pip_constraint(self, state, i):
        self._pip_constraints[i].enable(state)

    def disable_all_pip_constraints(self, state):
        for pip in self._pip_constraints:
            pip.disable(state)

    # Temporary ball constraints
    def get_ball_constraint_first_index(self, state, i):
        """Row of the first (X) multiplier of the ith ball constraint."""
        return self._system.get_first_multiplier_index(state, self._ball_constraints[i])

    def set_ball_constraint_location(self, state, i, position_in_ground):
        ball = self._ball_constraints[i]
        ball.point_on_ground = position_in_ground
        ball.point_on_body = self._system.find_station_at_ground_point(state, position_in_ground)

    def enable_ball_constraint(self, state, i):
        self._ball_constraints[i].enable(state)

    def disable_all_ball_constraints(self, state):
        for ball in self._ball_constraints:
            ball.disable(state)

    # Position-level information
    def find_lowest_point_location_in_ground(self, state, i):
        """
        The location of the lowest point on the ith sphere, measured from the
        ground origin and expressed in ground.
        """
        location = self._system.station_location_in_ground(state, self._vertices[i])
        location[Z_AXIS] -= self._sphere_radius
        return location

    def find_lowest_point_location_in_body_frame(self, state, i):
        return self._system.find_station_at_ground_point(
                    state, self.find_lowest_point_location_in_ground(state, i))

    def find_all_lowest_point_locations_in_ground(self, state):
        return [self.find_lowest_point_location_in_ground(state, i)
                    for i in range(len(self._vertices))]

    def is_interpenetrating(self, state_or_positions):
        """
        Is any sphere below the ground by more than the position tolerance?
        Accepts a State or a list of lowest point locations.
        """
        if hasattr(state_or_positions, 'q'):
            positions = self.find_all_lowest_point_locations_in_ground(state_or_positions)
        else:
            positions = state_or_positions

        return any(p[Z_AXIS] < -TOL_POSITION_FUZZINESS for p in positions)

    def is_point_proximal(self, position):
        return position[Z_AXIS] < TOL_POSITION_FUZZINESS

    def find_proximal_point_indices(self, positions):
        return tuple(i for i, p in enumerate(positions) if self.is_point_proximal(p))

    # Velocity-level information
    def find_lowest_point_velocity_in_ground(self, state, i):
        return self._system.station_velocity_in_ground(
                    state, self.find_lowest_point_location_in_body_frame(state, i))

    def find_tangential_velocity_angle(self, velocity):
        """
        The angle between the ground X axis and the tangential velocity, in
        [-pi, pi], or None if the tangential speed is too small to provide a
        reliable direction.
        """
        return tangential_velocity_angle(velocity)

    def is_impacting(self, proximal_velocities):
        return any(v[Z_AXIS] < -TOL_VELOCITY_FUZZINESS for v in proximal_velocities)

def create_multibody_system(gravity=settings.GRAVITY, **kwargs):
    """
    Create a system holding a single brick. Keyword arguments are passed on
    to Brick. Returns (system, brick).
    """
    system = MultibodySystem(gravity=gravity)
    brick = Brick(system, **kwargs)
    return system, brick
