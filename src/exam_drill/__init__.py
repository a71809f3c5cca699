"""Terminal exam drills backed by JSON question banks."""
