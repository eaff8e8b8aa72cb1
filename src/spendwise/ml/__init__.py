"""Rule-based category, vendor and prediction heuristics."""
