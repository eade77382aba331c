"""Service modules: check-in, leaderboard, club stats and player views."""
