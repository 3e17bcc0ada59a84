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

__all__ = ('ImpactPhase', 'TangentialState', 'SolutionCategory', 'Ranking',
           'ActiveSetCandidate', 'WORST_TOLERABLE_CATEGORY',
           'enumerate_tangential_states', 'select_candidate',
           'format_active_set', 'count_categories')

__version__ = "$Revision$"
__date__ = "$Date$"
# $Source$

from collections import namedtuple
from enum import IntEnum
import numpy as np
from .common import (NoActiveSetError, INFINITY)

class ImpactPhase(IntEnum):
    COMPRESSION = 0
    RESTITUTION = 1

    @property
    def prefix(self):
        return 'c' if self is ImpactPhase.COMPRESSION else 'r'

class TangentialState(IntEnum):
    OBSERVING = 0   # no constraint at this point
    ROLLING = 1     # tangential velocity driven to zero
    SLIDING = 2     # friction opposes the slip direction

    @property
    def symbol(self):
        return 'ORS'[self]

class SolutionCategory(IntEnum):
    """
    Categories of active set candidate solutions, from best to worst.
    """
    NO_VIOLATIONS = 0                               # ideal
    ACTIVE_CONSTRAINT_DOES_NOTHING = 1              # non-minimal active set
    RESTITUTION_IMPULSES_IGNORED = 2                # simultaneity is lost
    TANGENTIAL_VELOCITY_TOO_LARGE_TO_STICK = 3      # violates friction rule
    STICKING_IMPULSE_EXCEEDS_STICTION_LIMIT = 4     # violates friction limit
    GROUND_APPLIES_ATTRACTIVE_IMPULSE = 5           # violates physical law
    NEGATIVE_POST_COMPRESSION_NORMAL_VELOCITY = 6   # fatal: solution is wrong
    NO_IMPULSES_APPLIED = 7                         # fatal: no progress made
    UNABLE_TO_RESOLVE_UNKNOWN_SLIP_DIRECTION = 8     # fatal: direction unknown
    MIN_STEP_CAUSES_SLIP_DIRECTION_REVERSAL = 9     # fatal: should stick
    NOT_EVALUATED = 10

    @property
    def description(self):
        return _CATEGORY_DESCRIPTIONS[self]

_CATEGORY_DESCRIPTIONS = {
    SolutionCategory.NO_VIOLATIONS : 'No violations',
    SolutionCategory.ACTIVE_CONSTRAINT_DOES_NOTHING : 'Active constraint is doing nothing',
    SolutionCategory.RESTITUTION_IMPULSES_IGNORED : 'Restitution impulses were ignored',
    SolutionCategory.TANGENTIAL_VELOCITY_TOO_LARGE_TO_STICK : 'Sticking not possible at this velocity',
    SolutionCategory.STICKING_IMPULSE_EXCEEDS_STICTION_LIMIT : 'Sticking impulse exceeds stiction limit',
    SolutionCategory.GROUND_APPLIES_ATTRACTIVE_IMPULSE : 'Ground applying attractive impulse',
    SolutionCategory.NEGATIVE_POST_COMPRESSION_NORMAL_VELOCITY : 'Post-compression velocity is negative',
    SolutionCategory.NO_IMPULSES_APPLIED : 'No impulses applied; no progress made',
    SolutionCategory.UNABLE_TO_RESOLVE_UNKNOWN_SLIP_DIRECTION : 'Unable to calculate unknown slip direction',
    SolutionCategory.MIN_STEP_CAUSES_SLIP_DIRECTION_REVERSAL : 'Slip direction reverses with minimum step',
    SolutionCategory.NOT_EVALUATED : 'Not yet evaluated',
    }

# Candidates in worse categories are never used, even if nothing else is
# available.
WORST_TOLERABLE_CATEGORY = SolutionCategory.GROUND_APPLIES_ATTRACTIVE_IMPULSE

class Ranking(namedtuple('Ranking', ['category', 'fitness'])):
    """
    The ranking of a candidate: its solution category and, within that
    category, its fitness. Compares lexicographically; lower is better.
    """
    __slots__ = ()

    def __repr__(self):
        return 'Ranking(%s, fitness=%g)' % (self.category.name, self.fitness)

NOT_EVALUATED = Ranking(SolutionCategory.NOT_EVALUATED, INFINITY)

class ActiveSetCandidate(object):
    """
    One assignment of tangential states to the proximal points, along with
    the result of solving the impact equations for it: the change in system
    velocities, the local impulses (x, y, z multipliers of each constraint
    that is not observing) and the ranking.

    Candidates live for a single impact interval.
    """
    __slots__ = ['tangential_states', 'velocity_change', 'local_impulses', 'ranking']
    def __init__(self, tangential_states, velocity_change=None,
                 local_impulses=None, ranking=NOT_EVALUATED):
        self.tangential_states = tuple(TangentialState(s) for s in tangential_states)
        self.velocity_change = velocity_change
        self.local_impulses = local_impulses
        self.ranking = ranking

    def __repr__(self):
        return 'ActiveSetCandidate(%s, %s)' % (format_active_set(self.tangential_states),
                                               self.ranking)

    @property
    def category(self):
        return self.ranking.category

    @property
    def fitness(self):
        return self.ranking.fitness

    @property
    def active_points(self):
        """Proximal point indices that carry a constraint."""
        return [i for i, s in enumerate(self.tangential_states)
                    if s != TangentialState.OBSERVING]

    @property
    def constraint_count(self):
        return len(self.active_points)

    def constraint_impulses(self):
        """The local impulses as one (x, y, z) row per active constraint."""
        return np.reshape(self.local_impulses, (-1, 3))

    def normal_impulses(self):
        """{proximal point index: normal multiplier} of the active points."""
        normals = self.constraint_impulses()[:, 2]
        return dict(zip(self.active_points, normals))

def enumerate_tangential_states(count):
    """
    All 3**count - 1 assignments of tangential states to count points, the
    all-observing assignment excluded. Digit i of the candidate number in
    base 3 is the state of point i.
    """
    assignments = []
    for number in range(1, 3**count):
        states = []
        for i in range(count):
            number, digit = divmod(number, 3)
            states.append(TangentialState(digit))
        assignments.append(tuple(states))
    return assignments

def select_candidate(candidates, worst_category=WORST_TOLERABLE_CATEGORY):
    """
    The candidate from the best category with the best fitness. Candidates in
    categories worse than worst_category are never selected; neither are
    candidates with infinite fitness.

    Raises NoActiveSetError if there is no such candidate.
    """
    usable = [c for c in candidates
                if c.category <= worst_category and c.fitness < INFINITY]
    if not usable:
        raise NoActiveSetError('No suitable active set found by exhaustive search.')

    # min() keeps the first of equal rankings, so ties go to enumeration order
    return min(usable, key=lambda c: c.ranking)

def count_categories(candidates):
    """{SolutionCategory: number of candidates} for every category."""
    counts = dict((category, 0) for category in SolutionCategory)
    for candidate in candidates:
        counts[candidate.category] += 1
    return counts

def format_active_set(tangential_states, prefix=''):
    """Human-readable active set, e.g. '(cORS)'."""
    return '(%s%s)' % (prefix, ''.join(TangentialState(s).symbol for s in tangential_states))
