"""
Domain enums for SnapCal.
Contains all enumeration types used across the domain models.
"""

import enum


class GoalType(str, enum.Enum):
    """Body composition goal"""

    CUT = "cut"
    BULK = "bulk"
    MAINTAIN = "maintain"


class ActivityLevel(str, enum.Enum):
    """Physical activity levels"""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    VERY = "very"
    EXTRA = "extra"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


class EquipmentAccess(str, enum.Enum):
    """Training equipment the user can reach"""

    GYM = "gym"
    HOME = "home"
    BODYWEIGHT = "bodyweight"


class MigrationState(str, enum.Enum):
    """Progress of a local to cloud migration"""

    IDLE = "idle"
    UPLOADING = "uploading"
    UPLOADING_SETTINGS = "uploading_settings"
    UPLOADING_PROFILE = "uploading_profile"
    CLEARING_LOCAL = "clearing_local"
    DONE = "done"
    FAILED = "failed"
