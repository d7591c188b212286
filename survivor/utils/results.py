"""
Result classification and scoring for survivor picks

A pick survives on a win or a draw. Points only matter for breaking ties on
the leaderboard.
"""

PENDING = "pending"
WIN = "win"
DRAW = "draw"
LOSS = "loss"

RESULTS = (PENDING, WIN, DRAW, LOSS)

POINTS = {WIN: 3, DRAW: 1, LOSS: 0, PENDING: 0}


def classify_result(home_score, away_score, team_id, home_team_id):
    """
    Classify a finished match from the point of view of one team.

    Args:
        home_score: Goals scored by the home side
        away_score: Goals scored by the away side
        team_id: The team the pick backed
        home_team_id: The home team of the match

    Returns:
        "win", "draw" or "loss", or None while either score is missing
    """
    if home_score is None or away_score is None:
        return None

    if home_score == away_score:
        return DRAW

    if team_id == home_team_id:
        return WIN if home_score > away_score else LOSS
    return WIN if away_score > home_score else LOSS


def is_survivor_result(result):
    """A win or a draw keeps the participant alive"""
    return result in (WIN, DRAW)


def points_for(result):
    """Leaderboard points for a single pick result"""
    return POINTS.get(result, 0)
