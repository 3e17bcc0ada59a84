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

__all__ = ('Stage', 'State', 'MultibodySystem')

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import logging
from copy import copy
import numpy as np
from .common import (ProjectionFailedError, vec3, is_valid_float,
                     quat_normalize, quat_multiply, quat_from_rotation_vector,
                     quat_to_rotation_matrix)
from . import settings

GRAVITY = settings.GRAVITY
MAX_PROJECTION_ITERS = settings.MAX_PROJECTION_ITERS

log = logging.getLogger(__name__)

class Stage(object):
    """How far the cached computations of a State have been carried out."""
    TOPOLOGY, POSITION, VELOCITY = range(3)

class State(object):
    """
    The state of a single free body.

    q = (qw, qx, qy, qz, px, py, pz): orientation quaternion and the location
        of the body origin (the center of mass) in ground.
    u = (wx, wy, wz, vx, vy, vz): angular velocity and origin velocity, both
        expressed in ground.

    The set of enabled constraints is part of the state. Use copy() to make
    an independent snapshot.
    """
    __slots__ = ['_q', '_u', '_stage', '_rotation', 'enabled', 'time']
    NQ = 7
    NU = 6

    def __init__(self, q=(1, 0, 0, 0, 0, 0, 0), u=(0, 0, 0, 0, 0, 0),
                 enabled=(), time=0.0):
        self.q = q
        self.u = u
        self.enabled = set(enabled)
        self.time = float(time)

    def __copy__(self):
        return State(self._q, self._u, self.enabled, self.time)

    copy = __copy__

    def __repr__(self):
        return 'State(q=%s, u=%s, enabled=%s, time=%g)' % (
                list(self._q), list(self._u), sorted(self.enabled), self.time)

    @property
    def q(self):
        return self._q

    @q.setter
    def q(self, q):
        q = np.array(q, dtype=float)
        if q.shape != (State.NQ, ):
            raise ValueError('q must have %d elements' % State.NQ)
        self._q = q
        self._stage = Stage.TOPOLOGY
        self._rotation = None

    @property
    def u(self):
        return self._u

    @u.setter
    def u(self, u):
        u = np.array(u, dtype=float)
        if u.shape != (State.NU, ):
            raise ValueError('u must have %d elements' % State.NU)
        self._u = u
        self._stage = min(getattr(self, '_stage', Stage.TOPOLOGY), Stage.POSITION)

    @property
    def stage(self):
        return self._stage

    @property
    def orientation(self):
        return self._q[0:4]

    @property
    def position(self):
        return self._q[4:7]

    @property
    def angular_velocity(self):
        return self._u[0:3]

    @property
    def linear_velocity(self):
        return self._u[3:6]

class MultibodySystem(object):
    """
    A single free rigid body moving above a ground plane, along with the
    constraints that can temporarily connect it to ground.
    """
    def __init__(self, mass=1.0, inertia=(1.0, 1.0, 1.0), gravity=GRAVITY):
        self.constraints = []
        self.gravity = gravity
        self.set_mass_properties(mass, inertia)

    def set_mass_properties(self, mass, inertia):
        """
        Set the mass and the principal moments of inertia about the center
        of mass, expressed in the body frame.
        """
        if not (is_valid_float(mass) and mass > 0.0):
            raise ValueError('Invalid mass')
        inertia = vec3(*inertia)
        if not all(is_valid_float(i) and i > 0.0 for i in inertia):
            raise ValueError('Invalid inertia')
        self._mass = float(mass)
        self._inertia = inertia

    @property
    def mass(self):
        return self._mass

    @property
    def inertia(self):
        return vec3(*self._inertia)

    @property
    def gravity(self):
        return vec3(*self._gravity)

    @gravity.setter
    def gravity(self, gravity):
        self._gravity = vec3(*gravity)

    def _add_constraint(self, constraint):
        self.constraints.append(constraint)
        return len(self.constraints) - 1

    # State
    def default_state(self):
        return State()

    def copy(self, state):
        return copy(state)

    def realize(self, state, stage=Stage.VELOCITY):
        if state._stage < Stage.POSITION <= stage:
            state._rotation = quat_to_rotation_matrix(state.orientation)
            state._stage = Stage.POSITION
        if state._stage < stage:
            state._stage = stage

    def rotation(self, state):
        """The body-to-ground rotation matrix."""
        self.realize(state, Stage.POSITION)
        return state._rotation

    # Kinematics
    def station_offset_in_ground(self, state, station):
        """The vector from the body origin to station, expressed in ground."""
        return self.rotation(state).dot(station)

    def station_location_in_ground(self, state, station):
        return state.position + self.station_offset_in_ground(state, station)

    def station_velocity_in_ground(self, state, station):
        r = self.station_offset_in_ground(state, station)
        return state.linear_velocity + np.cross(state.angular_velocity, r)

    def express_ground_vector_in_body(self, state, vector):
        return self.rotation(state).T.dot(vector)

    def find_station_at_ground_point(self, state, point):
        """The body station currently located at the given ground point."""
        return self.express_ground_vector_in_body(state, np.asarray(point) - state.position)

    # Dynamics
    def calc_mass_matrix(self, state):
        R = self.rotation(state)
        M = np.zeros((State.NU, State.NU))
        M[0:3, 0:3] = R.dot(np.diag(self._inertia)).dot(R.T)
        M[3:6, 3:6] = self._mass * np.eye(3)
        return M

    def enabled_constraints(self, state):
        return [c for c in self.constraints if c.is_enabled(state)]

    def get_first_multiplier_index(self, state, constraint):
        """
        The row of the first multiplier belonging to constraint in the
        assembled constraint Jacobian, or None if it is not enabled.
        """
        if not constraint.is_enabled(state):
            return None
        index = 0
        for c in self.enabled_constraints(state):
            if c is constraint:
                return index
            index += c.row_count

    def calc_constraint_jacobian(self, state):
        rows = [c.jacobian(state) for c in self.enabled_constraints(state)]
        if not rows:
            return np.zeros((0, State.NU))
        return np.vstack(rows)

    def calc_constraint_errors(self, state):
        errors = [c.position_errors(state) for c in self.enabled_constraints(state)]
        if not errors:
            return np.zeros(0)
        return np.concatenate(errors)

    def solve_linear_system(self, A, b):
        """
        Minimum-norm least squares solution of A x = b. A may be rank
        deficient; rows of disabled or decoupled unknowns are allowed to be
        all zero.
        """
        x, residuals, rank, sv = np.linalg.lstsq(A, b, rcond=None)
        return x

    def _perturb_q(self, state, delta):
        # delta is (rotation vector, translation), both in ground
        orientation = quat_multiply(quat_from_rotation_vector(delta[0:3]),
                                    state.orientation)
        position = state.position + delta[3:6]
        state.q = np.concatenate((quat_normalize(orientation), position))

    def project_q(self, state, tolerance):
        """
        Move the positions of state onto the enabled position constraints,
        changing them as little as possible.

        Raises ProjectionFailedError if the constraints cannot be satisfied to
        within tolerance.
        """
        errors = self.calc_constraint_errors(state)
        for i in range(MAX_PROJECTION_ITERS):
            if errors.size == 0 or np.max(np.abs(errors)) <= tolerance:
                return i
            if not np.all(np.isfinite(errors)):
                break

            G = self.calc_constraint_jacobian(state)
            self._perturb_q(state, self.solve_linear_system(G, -errors))
            errors = self.calc_constraint_errors(state)

        if errors.size == 0 or np.max(np.abs(errors)) <= tolerance:
            return MAX_PROJECTION_ITERS
        log.debug('projection of %d constraint(s) did not converge: %s',
                  len(self.enabled_constraints(state)), errors)
        raise ProjectionFailedError('Unable to project positions to within %g (error %g)'
                                    % (tolerance, np.max(np.abs(errors))))

    def calc_applied_forces(self, state):
        """Gravity, along with the gyroscopic term."""
        R = self.rotation(state)
        inertia = R.dot(np.diag(self._inertia)).dot(R.T)
        w = state.angular_velocity
        torque = -np.cross(w, inertia.dot(w))
        return np.concatenate((torque, self._mass * self._gravity))

    def step(self, state, dt):
        """
        Advance state by dt with the semi-implicit Euler method. Constraints
        are not enforced here; that is the job of the contact handlers.
        """
        M = self.calc_mass_matrix(state)
        u = state.u + dt * np.linalg.solve(M, self.calc_applied_forces(state))
        state.u = u
        self._perturb_q(state, dt * u)
        state.time += dt
        self.realize(state, Stage.VELOCITY)
