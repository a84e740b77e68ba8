from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    LECTURER = "lecturer"
    STUDENT = "student"


# Roles a non-admin principal can hold; derived from lecturer/student records.
USER_ROLES: frozenset[Role] = frozenset({Role.STUDENT, Role.LECTURER, Role.MODERATOR})
