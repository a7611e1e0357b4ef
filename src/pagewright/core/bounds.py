#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

# Grids and bullet lists are laid out on at most three columns.
MIN_COLUMNS = 1
MAX_COLUMNS = 3

# Default page cap for one pagination run.
DEFAULT_MAX_PAGES = 50

# Maximum number of sections accepted from a document file.
MAX_DOCUMENT_SECTIONS = 2_000

# Maximum raster size accepted for figures (bytes).
MAX_FIGURE_BYTES = 8 * 1_048_576

# Tolerance for height/offset comparisons (mm).
LAYOUT_EPSILON_MM = 1e-6
