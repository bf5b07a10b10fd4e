from typing import List, Optional

from tictac.errors import ValidationError


WINNING_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


def calculate_winner(board: List[Optional[str]]) -> Optional[str]:
    """Return 'X' or 'O' when a line is complete, otherwise None."""
    for a, b, c in WINNING_LINES:
        if board[a] and board[a] == board[b] == board[c]:
            return board[a]
    return None


def is_full(board: List[Optional[str]]) -> bool:
    return all(cell is not None for cell in board)


def parse_cell_index(index) -> int:
    # bool is an int subclass; JSON true/false is not a cell
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= 8:
        raise ValidationError(['index'], 'Cell index must be an integer from 0 to 8')
    return index


def place_mark(board: List[Optional[str]], index: int, symbol: str):
    """Put ``symbol`` on ``board`` in place.

    Returns ``(status, winner)`` for the game after the move: ``('completed',
    symbol)`` on a win, ``('draw', None)`` when the board fills up, otherwise
    ``('playing', None)``.
    """
    if board[index] is not None:
        raise ValidationError(message='Cell is already occupied')
    board[index] = symbol
    winner = calculate_winner(board)
    if winner:
        return 'completed', winner
    if is_full(board):
        return 'draw', None
    return 'playing', None
