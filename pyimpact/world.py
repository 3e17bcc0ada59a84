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

__all__ = ('World', )

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import logging
import numpy as np
from .body import create_multibody_system
from .impact import Impacter
from .projection import PositionProjecter
from .system import Stage
from . import settings

GRAVITY = settings.GRAVITY
MIN_INTERVALS_PER_PHASE = settings.MIN_INTERVALS_PER_PHASE

log = logging.getLogger(__name__)

class World(object):
    """
    Drives the simulation of a brick falling onto the ground: integrates,
    then resolves interpenetration and impacts after every step.
    """
    def __init__(self, gravity=GRAVITY, exhaustive_position_search=None,
                 min_intervals_per_phase=MIN_INTERVALS_PER_PHASE,
                 impact_listener=None, **brick_kwargs):
        self.system, self.brick = create_multibody_system(gravity, **brick_kwargs)
        self.state = self.system.default_state()
        self.exhaustive_position_search = exhaustive_position_search
        self.min_intervals_per_phase = min_intervals_per_phase
        self.impact_listener = impact_listener
        self.impact_count = 0

    def __repr__(self):
        return 'World(%s, time=%g)' % (self.brick, self.time)

    @property
    def impact_listener(self):
        """Callback after each completed impact.

        Arguments: world, impact report
        """
        return self._impact_listener

    @impact_listener.setter
    def impact_listener(self, fcn):
        self._impact_listener = fcn

    @property
    def time(self):
        return self.state.time

    def set_initial_conditions(self, orientation=(1, 0, 0, 0), position=(0, 0, 0),
                               angular_velocity=(0, 0, 0), linear_velocity=(0, 0, 0)):
        """Orientation is a quaternion (w, x, y, z); all else in ground."""
        self.state.q = np.concatenate((orientation, position))
        self.state.u = np.concatenate((angular_velocity, linear_velocity))
        self.state.time = 0.0
        self.system.realize(self.state, Stage.VELOCITY)

    def step(self, dt):
        """
        Take a time step: integrate, then resolve contacts. Returns the
        reports of the impacts that occurred.
        """
        if dt <= 0.0:
            raise ValueError('Time step must be positive')
        self.system.step(self.state, dt)
        return self.resolve_contacts()

    def resolve_contacts(self):
        """
        If the brick is interpenetrating the ground, project its positions;
        then perform impacts until no proximal point is approaching the ground.
        """
        system = self.system
        brick = self.brick
        state = self.state
        reports = []

        positions = brick.find_all_lowest_point_locations_in_ground(state)

        # Can impact only if interpenetration occurred.
        if not brick.is_interpenetrating(positions):
            return reports

        log.debug('t=%g: interpenetrating, q=%s', state.time, state.q)
        projecter = PositionProjecter(system, brick, state, positions)
        projecter.project_positions(state, self.exhaustive_position_search)
        system.realize(state, Stage.VELOCITY)

        positions = brick.find_all_lowest_point_locations_in_ground(state)
        proximal = brick.find_proximal_point_indices(positions)
        velocities = [brick.find_lowest_point_velocity_in_ground(state, index)
                        for index in proximal]

        # A point rebounds at most once in a sequence of impacts; follow-up
        # impacts there are perfectly plastic.
        has_rebounded = [False] * len(proximal)
        while brick.is_impacting(velocities):
            log.debug('t=%g: impacting, u=%s', state.time, state.u)
            impacter = Impacter(system, brick, state, positions, proximal,
                                self.min_intervals_per_phase)
            report = impacter.perform_impact_exhaustive(state, velocities, has_rebounded)
            reports.append(report)
            self.impact_count += 1
            if self._impact_listener is not None:
                self._impact_listener(self, report)

        return reports

    def simulate(self, duration, dt=1e-3):
        """
        Simulate for duration seconds with a fixed time step. Returns the
        number of impacts that occurred.
        """
        steps = int(duration / dt + 0.5)
        impacts = 0
        for i in range(steps):
            impacts += len(self.step(dt))
        return impacts
