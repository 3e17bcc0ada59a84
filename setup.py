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

from setuptools import setup

__license__='zlib'
__date__="$Date$"
__version__="$Revision$"

package_name = 'pyimpact'
major_version = '0.1'
major_release = False

if not major_release:
    version = '%s.dev0' % major_version
else:
    version = major_version

LONG_DESCRIPTION = \
"""%s

   Impulse-based resolution of rigid body impacts with a ground plane.

   A free brick with a sphere at each vertex falls onto the ground.
   Interpenetration is undone by projecting positions onto the best set of
   contact constraints; impacts are resolved in compression and restitution
   phases by exhaustive search of rolling/sliding active sets.

   After installing please be sure to try out the examples.
    """ % (package_name, )

CLASSIFIERS = [
    "Development Status :: 3 - Alpha",
    "Topic :: Scientific/Engineering :: Physics",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "License :: OSI Approved :: zlib/libpng License",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    ]

setup(name=package_name,
      version=version,
      description='Rigid body impacts with friction in pure Python',
      license='zlib',
      long_description=LONG_DESCRIPTION,
      classifiers=CLASSIFIERS,
      test_suite='tests',
      platforms='any',
      packages=[package_name],
      package_dir={ package_name : package_name },
      python_requires='>=3.6',
      install_requires=['numpy'],
      extras_require={'test': ['pytest']},
     )
