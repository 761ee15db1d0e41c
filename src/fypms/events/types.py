"""Event type constants.

Learn: Centralizing event types as constants prevents typos and
makes it easy to discover everything the audit log can contain.
"""

# ─── Sessions ────────────────────────────────────────────

LOGIN = "auth.login"
LOGOUT = "auth.logout"

# ─── People ──────────────────────────────────────────────

ADMIN_CREATED = "admin.created"
SUPERVISOR_CREATED = "supervisor.created"
SUPERVISOR_UPDATED = "supervisor.updated"
SUPERVISOR_DELETED = "supervisor.deleted"
STUDENT_CREATED = "student.created"
STUDENT_UPDATED = "student.updated"
STUDENT_DELETED = "student.deleted"

# ─── Submissions ─────────────────────────────────────────

PROPOSAL_SUBMITTED = "proposal.submitted"
PROJECT_SUBMITTED = "project.submitted"
ITEM_STATUS_CHANGED = "item.status_changed"
