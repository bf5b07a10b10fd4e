"""Tic-tac-toe rules: move validation and win / draw detection.

Pure functions over a 9-cell board list, imported by the HTTP routes so the
transport code stays free of game mechanics.
"""

from .rules import calculate_winner, is_full, parse_cell_index, place_mark
