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

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

# Global tuning constants based on meters-kilograms-seconds (MKS) units.

import sys
import math

PI = math.pi
EPSILON = sys.float_info.epsilon
INFINITY = float('inf')

# Anything smaller than this is treated as numerical noise (roughly
# EPSILON**(7/8), as used for "significant" comparisons).
SIGNIFICANT_REAL = EPSILON ** 0.875

del math
del sys

# Position projection

# Accuracy requested from the position projection of the multibody system.
TOL_PROJECT_Q = 1.0e-6

# Iteration limit for a single position projection.
MAX_PROJECTION_ITERS = 50

# Expected position tolerance. A point lower than -TOL_POSITION_FUZZINESS is
# interpenetrating; a point lower than +TOL_POSITION_FUZZINESS is proximal.
TOL_POSITION_FUZZINESS = 1.0e-4

# Try every combination of proximal constraints when projecting positions
# instead of successively pruning the most distant one.
EXHAUSTIVE_SEARCH_POSITIONS = False

# Impact

# Expected velocity tolerance. A proximal point whose normal velocity is below
# -TOL_VELOCITY_FUZZINESS is impacting.
TOL_VELOCITY_FUZZINESS = 1.0e-5

# Below this tangential speed the slip direction cannot be trusted.
TOL_RELIABLE_DIRECTION = 1.0e-4

# Slip directions are considered converged within 2.86 degrees.
TOL_MAX_DIF_DIR_ITERATION = 0.05

# Smallest impulse that is considered to do anything.
MIN_MEANINGFUL_IMPULSE = 1.0e-6

# A point cannot stick when its tangential speed is above this.
MAX_STICKING_TANG_VEL = 1.0e-1

# The sliding direction may change by 28.6 degrees in a single interval.
MAX_SLIDING_DIR_CHANGE = 0.5

# Smallest permitted interval step length.
MIN_INTERVAL_STEP_LENGTH = 1.0e-3

# Iteration limit when solving for unknown slip directions.
MAX_ITER_SLIP_DIRECTION = 5

# Iteration limit when limiting the step length of a sliding point.
MAX_ITER_STEP_LENGTH = 5

# Minimum number of intervals in each impact phase.
MIN_INTERVALS_PER_PHASE = 2

# Upper bound on the intervals taken by one impact. Every interval advances
# by at least MIN_INTERVAL_STEP_LENGTH in each phase, so this is generous.
MAX_IMPACT_INTERVALS = 4000

# Default brick
GRAVITY = (0.0, 0.0, -9.81)
BRICK_HALF_LENGTHS = (0.2, 0.3, 0.4)
SPHERE_RADIUS = 0.1
BRICK_MASS = 2.0
MU_DYN = 0.6
V_MIN_REBOUND = 1.0e-6
V_PLASTIC_DEFORM = 0.1
MIN_COR = 0.5

# Debugging
DEBUG_POSITIONS = False
DEBUG_IMPACT = False
DEBUG_STEP_LENGTH = False
