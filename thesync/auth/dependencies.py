"""
Identity service — auth-specific FastAPI dependencies.

These wrap the shared guard so routes import from here, not from
thesync_shared directly.  Role sets are fixed at route registration.
"""
from __future__ import annotations

from thesync_shared.auth.dependencies import require_roles
from thesync_shared.constants import USER_ROLES, Role

# ── Role guards ───────────────────────────────────────────────────────────────

require_admin = require_roles(Role.ADMIN)

# Lecturers, moderators and students; never admins.
require_user = require_roles(*USER_ROLES)
