from enum import Enum


class FamilyRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class InvitationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class Language(str, Enum):
    EN = "EN"
    HE = "HE"
    FR = "FR"
    ES = "ES"
    AR = "AR"
    RU = "RU"
    DE = "DE"
    PT = "PT"
