"""Identity and session handling (users, session store, auth context)."""
