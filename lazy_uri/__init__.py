# Copyright (c) 2024 The lazy-uri authors
#
# This file is a part of `lazy-uri` project.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

"""Lazily parsed RFC 3986 `URI`s.

   See `lazy_uri.uri` for the `URI` and `ConstURI` types and
   `lazy_uri.resolve` for reference resolution.
"""
