from thesync_shared.constants.roles import USER_ROLES, Role

__all__ = ["Role", "USER_ROLES"]
