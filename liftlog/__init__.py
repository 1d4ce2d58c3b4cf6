"""liftlog program-clone worker and copy-status API."""
