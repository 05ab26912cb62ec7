"""Tunable parameters for match simulation.

Magnitudes are tuning values and are expected to be retuned; the structure
(layered rolls, clamped modifiers) is what the engine relies on.
"""

MATCH_LENGTH = 90
HALF_TIME_MINUTE = 45
SECOND_HALF_START = HALF_TIME_MINUTE + 1
MIN_STOPPAGE_TIME = 1
MAX_STOPPAGE_TIME = 5

# Core probabilities
EVENT_PROBABILITY_PER_MINUTE = 0.15
MIN_EVENT_PROBABILITY = 0.05
MAX_EVENT_PROBABILITY = 0.35
BASE_GOAL_CONVERSION = 0.30
STRENGTH_DIFF_CONVERSION_WEIGHT = 0.2
MIN_GOAL_CONVERSION = 0.05
MAX_GOAL_CONVERSION = 0.60

# Possession
BASE_POSSESSION = 0.5
POSSESSION_STRENGTH_DIVISOR = 200
POSSESSION_CHANCE_MIN = 0.20
POSSESSION_CHANCE_MAX = 0.80

# Home advantage
HOME_POSSESSION_BONUS = 0.08
HOME_CONVERSION_BONUS = 0.05

# Form and momentum
PLAYER_FORM_WEIGHT = 0.15
NEUTRAL_FORM = 70
TEAM_MOMENTUM_WEIGHT = 0.16
NEUTRAL_MOMENTUM = 50

# Streaks (recent 0-10 match ratings)
STREAK_WINDOW = 3
STRIKER_HOT_STREAK_RATING = 7.5
STRIKER_HOT_STREAK_BONUS = 0.08
STRIKER_DROUGHT_THRESHOLD = 5
STRIKER_DROUGHT_RATING = 6.3
STRIKER_DROUGHT_PENALTY = 0.05
GK_IN_FORM_RATING = 7.2
GK_CLEAN_SHEET_BONUS = 0.05

# Fitness
FITNESS_THRESHOLD = 80
FITNESS_PENALTY_FACTOR = 0.01
LATE_GAME_FITNESS_MINUTE = 60
LATE_GAME_FITNESS_MULTIPLIER = 1.5
FITNESS_PENALTY_MAX = 0.30

# Energy (match fatigue)
LIVE_ENERGY_DRAIN_BASE_PER_MINUTE = 0.14
ENERGY_PENALTY_MAX = 0.40
# (energy, penalty) breakpoints, highest energy first
ENERGY_PENALTY_CURVE = (
    (85.0, 0.0),
    (70.0, 0.06),
    (55.0, 0.16),
    (40.0, 0.28),
    (0.0, ENERGY_PENALTY_MAX),
)
POSTURE_ENERGY_MULTIPLIER = {
    "defensive": 0.85,
    "balanced": 1.0,
    "attacking": 1.2,
}
ENERGY_AGE_BASELINE = 24
ENERGY_AGE_SLOPE = 0.25 / 9
ENERGY_AGE_MAX_MULTIPLIER = 1.35
GOALKEEPER_ENERGY_MULTIPLIER = 0.6
POST_MATCH_ENERGY_DRAIN_PER_90 = 12.0
OPPONENT_ENERGY_START = 100.0
OPPONENT_ENERGY_FLOOR = 72.0

# Set pieces
CORNER_GOAL_RATE = 0.03
FREE_KICK_GOAL_RATE = 0.05
PENALTY_AWARD_RATE = 0.12
PENALTY_BASE_CONVERSION = 0.76
PENALTY_SKILL_WEIGHT = 0.4
PENALTY_MIN_CONVERSION = 0.55
PENALTY_MAX_CONVERSION = 0.92

# Goal type distribution (cumulative)
OWN_GOAL_SHARE = 0.03
UNASSISTED_GOAL_SHARE = 0.24

# Red cards
RED_CARD_STRENGTH_PENALTY = 8
ADDITIONAL_RED_CARD_PENALTY = 5

# Event thresholds (cumulative probabilities)
EVENT_THRESHOLD_ATTACKING_CHANCE = 0.40
EVENT_THRESHOLD_YELLOW_CARD = 0.55
EVENT_THRESHOLD_RED_CARD = 0.58
EVENT_THRESHOLD_CORNER = 0.65
EVENT_THRESHOLD_FREE_KICK = 0.72
EVENT_THRESHOLD_SAVE = 0.80

# Substitutions
MAX_SUBSTITUTIONS = 5
AI_SUBS_EARLIEST_MINUTE = SECOND_HALF_START
AI_MAX_SUBS_PER_WINDOW = 3
AI_FATIGUE_ENERGY_FLOOR = 55.0
AI_FATIGUE_MIN_ENERGY_GAIN = 10.0
AI_TACTICAL_MINUTE = 60
AI_PROTECT_LEAD_MINUTE = 75
