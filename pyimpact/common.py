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

import math
import numpy as np
from .settings import (EPSILON, INFINITY)

__all__ = (# Exceptions
           'PhysicsError', 'ProjectionFailedError', 'ContactResolutionError',
           'NoValidProjectionError', 'ImpactError', 'NoActiveSetError',
           'NoValidStepLengthError',

           # Constants
           'PI', 'EPSILON', 'INFINITY',
           'X_AXIS', 'Y_AXIS', 'Z_AXIS',

           # Functions
           'clamp', 'is_valid_float', 'vec3', 'skew',
           'quat_normalize', 'quat_multiply', 'quat_from_rotation_vector',
           'quat_from_axis_angle', 'quat_to_rotation_matrix',
          )

PI = math.pi
X_AXIS, Y_AXIS, Z_AXIS = range(3)

class PhysicsError(Exception): pass

# Raised by the multibody system when the positions cannot be projected onto
# the enabled constraints.
class ProjectionFailedError(PhysicsError): pass

# Fatal: the geometry or velocities admit no consistent contact configuration.
class ContactResolutionError(PhysicsError): pass
class NoValidProjectionError(ContactResolutionError): pass
class ImpactError(ContactResolutionError): pass
class NoActiveSetError(ImpactError): pass
class NoValidStepLengthError(ImpactError): pass

def clamp(value, low, high):
    return max(low, min(value, high))

def is_valid_float(x):
    return not (math.isnan(x) or math.isinf(x))

def vec3(x=0.0, y=0.0, z=0.0):
    return np.array((x, y, z), dtype=float)

def skew(r):
    """
    The cross product matrix of r, so that skew(r).dot(v) == cross(r, v).
    """
    rx, ry, rz = r
    return np.array(((0.0, -rz,  ry),
                     ( rz, 0.0, -rx),
                     (-ry,  rx, 0.0)))

# Quaternions are stored scalar first: (w, x, y, z)

def quat_normalize(q):
    q = np.asarray(q, dtype=float)
    length = np.linalg.norm(q)
    if length < EPSILON:
        return np.array((1.0, 0.0, 0.0, 0.0))
    return q / length

def quat_multiply(a, b):
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array((aw*bw - ax*bx - ay*by - az*bz,
                     aw*bx + ax*bw + ay*bz - az*by,
                     aw*by - ax*bz + ay*bw + az*bx,
                     aw*bz + ax*by - ay*bx + az*bw))

def quat_from_axis_angle(axis, angle):
    axis = np.asarray(axis, dtype=float)
    axis = axis / np.linalg.norm(axis)
    half = 0.5 * angle
    return np.concatenate(((math.cos(half), ), math.sin(half) * axis))

def quat_from_rotation_vector(rv):
    """
    The quaternion rotating by |rv| radians about rv.
    """
    angle = np.linalg.norm(rv)
    if angle < EPSILON:
        # First order
        q = np.concatenate(((1.0, ), 0.5 * np.asarray(rv, dtype=float)))
        return quat_normalize(q)
    return quat_from_axis_angle(rv, angle)

def quat_to_rotation_matrix(q):
    w, x, y, z = quat_normalize(q)
    return np.array(((1 - 2*(y*y + z*z),     2*(x*y - w*z),     2*(x*z + w*y)),
                     (    2*(x*y + w*z), 1 - 2*(x*x + z*z),     2*(y*z - w*x)),
                     (    2*(x*z - w*y),     2*(y*z + w*x), 1 - 2*(x*x + y*y))))
