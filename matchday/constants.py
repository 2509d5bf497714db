"""Constants and fixed league rules for the matchday tracker."""

# Capacity of the "in" bucket (7 vs 7)
MAX_PLAYERS_IN = 14
TEAM_SIZE = MAX_PLAYERS_IN // 2
MAX_GUESTS = 4

# Number of recent results kept in a player's form
FORM_LENGTH = 5

# Median seed used for guests when the roster is empty
DEFAULT_GUEST_POINTS = 50

# Points awarded per result letter
RESULT_POINTS = {
    'W': 3,
    'D': 2,
    'L': 0,
}

# Availability states
STATUS_IN = 'in'
STATUS_WAITING = 'waiting'
STATUS_UNDECIDED = 'undecided'
STATUS_OUT = 'out'
STATUSES = (STATUS_IN, STATUS_WAITING, STATUS_UNDECIDED, STATUS_OUT)

# Match phases
PHASE_AVAILABILITY = 'availability'
PHASE_MANUAL_DRAFT = 'manual-draft'
PHASE_TEAMS = 'teams'
PHASE_RESULTS = 'results'
PHASES = (PHASE_AVAILABILITY, PHASE_MANUAL_DRAFT, PHASE_TEAMS, PHASE_RESULTS)

# Penalties
PENALTY_LATE = 'late'
PENALTY_NO_SHOW = 'no-show'
PENALTIES = (PENALTY_LATE, PENALTY_NO_SHOW)

# Team sides
SIDE_A = 'A'
SIDE_B = 'B'

# Draft methods
DRAFT_POINTS = 'points'
DRAFT_MANUAL = 'manual'

# Match results
RESULT_A = 'A'
RESULT_B = 'B'
RESULT_DRAW = 'Draw'
RESULTS = (RESULT_A, RESULT_B, RESULT_DRAW)

# Local store keys
KEY_PLAYERS = 'players'
KEY_GUESTS = 'guestPlayers'
KEY_HISTORY = 'matchHistory'
KEY_SETTINGS = 'settings'
KEY_PHASE = 'gamePhase'
KEY_TEAMS = 'teams'
KEY_SCORES = 'scores'
KEY_PENALTIES = 'penalties'
IN_PROGRESS_KEYS = (KEY_PHASE, KEY_TEAMS, KEY_SCORES, KEY_PENALTIES)

# Roster used when nothing has been saved yet: (name, points)
SEED_PLAYERS = [
    ('Leo Messi', 100),
    ('Cristiano Ronaldo', 98),
    ('Neymar Jr', 95),
    ('Kylian Mbappé', 94),
    ('Kevin De Bruyne', 92),
    ('Robert Lewandowski', 91),
    ('Mohamed Salah', 90),
    ('Sadio Mané', 88),
    ('Virgil van Dijk', 87),
    ('Luka Modrić', 86),
    ('Erling Haaland', 85),
    ('Son Heung-min', 84),
    ('Harry Kane', 83),
    ('Joshua Kimmich', 82),
    ('Alisson Becker', 81),
    ('Karim Benzema', 80),
]
