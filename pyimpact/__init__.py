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

from . import world
from . import system
from . import body
from . import projection
from . import impact

from .world import World
from .system import (Stage, State, MultibodySystem)
from .body import (Brick, create_multibody_system)
from .constraints import (PointInPlaneConstraint, BallConstraint)
from .projection import PositionProjecter
from .impact import (Impacter, ImpactReport, refine_slip_directions)
from .active_set import (ImpactPhase, TangentialState, SolutionCategory, Ranking,
                         ActiveSetCandidate, format_active_set)
from .step_length import (calculate_interval_step_length, classify_direction_change)
from .contact_util import (coefficient_of_restitution, tangential_velocity_angle,
                           abs_angle_difference, sliding_step_length_to_origin)
from .common import (
           # Exceptions
           PhysicsError, ProjectionFailedError, ContactResolutionError,
           NoValidProjectionError, ImpactError, NoActiveSetError,
           NoValidStepLengthError,

           # Constants
           PI, EPSILON, INFINITY,

           # Functions
           vec3, quat_from_axis_angle, quat_multiply,
          )
