"""Terminal Tracker: shell command activity heatmap."""
