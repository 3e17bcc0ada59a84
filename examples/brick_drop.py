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
A brick is thrown upward and falls onto the ground, landing on one, two or
four of its corners, with and without tangential velocity.

Usage: brick_drop.py [test number] [--debug]
"""

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import sys
sys.path.extend(['..', '.'])

import time
import logging
import pyimpact
from pyimpact.active_set import format_active_set
from pyimpact.common import (PI, quat_from_axis_angle, quat_multiply)

MAX_STEP_SIZE = 1e-3
DURATION = 1.8

X_AXIS = (1, 0, 0)
Y_AXIS = (0, 1, 0)

def one_point():
    return quat_multiply(quat_from_axis_angle(X_AXIS, PI / 4),
                         quat_from_axis_angle(Y_AXIS, PI / 6))

def two_points():
    return quat_from_axis_angle(X_AXIS, PI / 4)

def four_points():
    return (1, 0, 0, 0)

# (description, orientation, linear velocity)
TESTS = [
    ('One point, no tangential velocity',      one_point,   (0.0,  0.0, 6.0)),
    ('One point, small tangential velocity',   one_point,   (0.5,  0.0, 6.0)),
    ('Two points, no tangential velocity',     two_points,  (0.0,  0.0, 6.0)),
    ('Two points, small tangential velocity',  two_points,  (0.0, -1.0, 6.0)),
    ('Four points, no tangential velocity',    four_points, (0.0,  0.0, 6.0)),
    ('Four points, small tangential velocity', four_points, (0.5,  0.0, 6.0)),
    ]

def print_horizontal_rule(msg=''):
    print('%s %s' % ('=' * 60, msg))

def impact_listener(world, report):
    print('  t=%.3f impact at %s' % (world.time, report.proximal_point_indices))
    for record in report.intervals:
        print('    %3d %s %-40s step=%.4f' % (
                record.counter,
                format_active_set(record.tangential_states, record.phase.prefix),
                record.ranking.category.description, record.step_length))

def simulate(number, description, orientation, linear_velocity):
    print('')
    print_horizontal_rule()
    print('Test %d: %s' % (number, description))
    print_horizontal_rule()

    world = pyimpact.World(impact_listener=impact_listener)
    world.set_initial_conditions(orientation=orientation(), position=(0, 1, 0.8),
                                 linear_velocity=linear_velocity)

    steps = int(DURATION / MAX_STEP_SIZE + 0.5)
    print('Simulating for %0.1f seconds (%d steps of size %0.3f)' % (DURATION, steps,
                                                                    MAX_STEP_SIZE))
    t0 = time.time()
    impacts = world.simulate(DURATION, MAX_STEP_SIZE)
    print('Simulation complete: %d impact(s) in %.2f seconds.' % (impacts, time.time() - t0))
    print('  final q = %s' % world.state.q)
    print('  final u = %s' % world.state.u)

def main(args):
    if '--debug' in args:
        args.remove('--debug')
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING)

    if args:
        selected = [int(arg) for arg in args]
    else:
        selected = range(1, len(TESTS) + 1)

    try:
        for number in selected:
            simulate(number, *TESTS[number - 1])
    except pyimpact.PhysicsError as ex:
        print('ERROR: %s' % ex)
        return 1
    return 0

if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
