"""Qt presentation helpers: live preview, border painters and background tasks."""
