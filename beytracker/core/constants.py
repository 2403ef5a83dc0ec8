"""Global constants for the beytracker application."""

# Collection names
TOURNAMENTS_COLLECTION = "tournaments"
STAGES_COLLECTION = "tournament_stages"
MATCH_RESULTS_COLLECTION = "match_results"
MATCH_SESSIONS_COLLECTION = "match_sessions"
STADIUMS_COLLECTION = "tournament_stadiums"

# Points awarded per finish when a result carries no explicit value
FINISH_POINTS = {
    "Spin Finish": 1,
    "Burst Finish": 2,
    "Over Finish": 2,
    "Extreme Finish": 3,
}
FINISH_TYPES = list(FINISH_POINTS)
UNKNOWN_FINISH = "Unknown"

# Round outcome when both players end on the same score
DRAW = "Draw"

# Shrinkage applied to the weighted win rate
WEIGHTED_WIN_RATE_PRIOR = 10

# Log dashboard
AUTO_REFRESH_SECONDS = 10
LIVE_FEED_LIMIT = 50
MIN_STADIUMS = 1
MAX_STADIUMS = 20
REFRESH_WORKERS = 4

# Tournament records
UNLIMITED_PARTICIPANTS = 999999
DEFAULT_STAGE = {
    "stage_name": "Main Stage",
    "stage_type": "swiss",
    "number_of_rounds": 5,
    "stage_number": 1,
}
