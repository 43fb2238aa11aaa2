from enum import Enum


class UserRole(str, Enum):
    ORGANIZATION_MEMBER = "organization_member"
    VISITOR = "visitor"
    WALK_IN = "walk_in"
    WATCHMAN = "watchman"
    ORG_ADMIN = "org_admin"
