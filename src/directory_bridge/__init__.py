"""Directory auth bridge: LDAP authentication with local identity reconciliation."""
