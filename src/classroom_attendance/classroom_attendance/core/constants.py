"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

# Slack added on top of the teacher radius to absorb device GPS error.
LOCATION_SLACK_METERS = 30

# Radius bounds; location_radius is DECIMAL(8, 2).
MIN_RADIUS_METERS = 1
MAX_RADIUS_METERS = 100_000

INVALID_SAMPLE_SIZE = 5
