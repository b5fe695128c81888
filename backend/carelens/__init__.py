"""CareLens backend package."""
