from enum import Enum


class ProgramType(str, Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
