#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
This is a simple example of building and running a simulation
using pyimpact. Here we drop a brick onto the ground, balanced on one
of its corners, and watch it bounce.

NOTE:
There is no graphical output for this simple example, only text.
"""

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

import sys
sys.path.extend(['..', '.'])

import logging
import numpy as np
import pyimpact
from pyimpact.common import quat_from_axis_angle

# Show a line for every impact and position projection
logging.basicConfig(level=logging.INFO, format='%(name)s: %(message)s')

# Create the world with gravity pointing down the Z axis. The brick uses
# the default dimensions and material properties; all of them can be
# passed as keyword arguments (mu_dyn, min_cor, ...).
world = pyimpact.World(gravity=(0, 0, -9.81))

# Turn the brick so that its first corner points straight down, directly
# below the center of mass. The brick then bounces without tipping over.
corner = world.brick.vertices[0]
down = np.array((0.0, 0.0, -1.0))
axis = np.cross(corner, down)
angle = np.arctan2(np.linalg.norm(axis), corner.dot(down))
orientation = quat_from_axis_angle(axis, angle)

# Put the lowest point of that corner's sphere 10cm above the ground.
height = np.linalg.norm(corner) + world.brick.sphere_radius + 0.1
world.set_initial_conditions(orientation=orientation, position=(0, 0, height))

# This is our little simulation loop.
for i in range(60):
    # Instruct the world to perform a single step of simulation. Any
    # impacts are resolved before step returns.
    reports = world.step(0.01)

    for report in reports:
        print('  impact: %s' % report)

    # Now print the time, height and vertical velocity of the brick.
    print('%.2f %.4f %.4f' % (world.time, world.state.position[2],
                              world.state.linear_velocity[2]))
