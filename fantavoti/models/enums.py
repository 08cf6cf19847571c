from enum import Enum


class PlayerRole(str, Enum):
    GOALKEEPER = "P"
    DEFENDER = "D"
    MIDFIELDER = "C"
    FORWARD = "A"
    COACH = "ALL"
    # Unknown role codes are kept as plain strings on Player.role


class ErrorKind(str, Enum):
    AUTH = "AUTH"  # Bad credentials, missing or rejected cookie
    NETWORK = "NETWORK"  # Transport failures and unexpected HTTP statuses
    FETCH = "FETCH"  # The requested (season, fixture) does not exist
    FORMAT = "FORMAT"  # File naming or spreadsheet layout violated
    CONFIG = "CONFIG"  # Unknown season
