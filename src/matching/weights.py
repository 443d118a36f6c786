"""Scoring weights and matching thresholds.

Every numeric constant used by the school resolver and the candidate
scorer lives here so tests can assert against the table directly.
"""

# Base score by how a candidate was retrieved (see MatchType)
BASE_SCORES: dict[str, int] = {
    "email_match": 98,
    "name_school": 95,
    "name_phone": 90,
    "partial_name_school": 75,
    "partial_name_phone": 70,
    "name_partial": 50,
    "phone_only": 30,
}
DEFAULT_BASE_SCORE = 50

# Name sub-scores
EXACT_NAME_SCORE = 95
EXACT_AND_PARTIAL_NAME_SCORE = 85
PARTIAL_NAME_SCORE = 70
SINGLE_NAME_SCORE = 60
FUZZY_NAME_SCALE = 50
FUZZY_NAME_FACTOR_FLOOR = 20

# Additive adjustments
SAME_SCHOOL_BONUS = 10
DIFFERENT_SCHOOL_PENALTY = 5
SAME_PHONE_BONUS = 15
DIFFERENT_PHONE_PENALTY = 3
EMAIL_MATCH_BONUS = 20
RECENT_UPDATE_BONUS = 2
STALE_PROFILE_PENALTY = 2
INCOMPLETE_PROFILE_PENALTY = 2

# Recency windows (days)
RECENT_UPDATE_DAYS = 30
STALE_PROFILE_DAYS = 365

# Profile completeness: ratio * COMPLETENESS_SCALE
COMPLETENESS_SCALE = 5
COMPLETE_PROFILE_THRESHOLD = 4
INCOMPLETE_PROFILE_THRESHOLD = 2

MIN_SCORE = 0
MAX_SCORE = 100

# School resolver
FUZZY_SIMILARITY_THRESHOLD = 0.8
PARTIAL_MIN_QUERY_LENGTH = 3
PARTIAL_MIN_LENGTH_MARGIN = 2
MIN_SHARED_WORDS = 2
