"""H3 cell indexing for result-cache keys and aggregate lookups.

The resolution matches the ``h3_res8_id`` column published in BDC
availability files; changing it would invalidate every cache key and break
the join against imported data.
"""

import h3

H3_RESOLUTION = 8


def validate_coordinates(lat: float, lng: float) -> None:
    """Validate that a coordinate pair lies within WGS84 bounds.

    Args:
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.

    Raises:
        ValueError: If either value is out of range or not finite.
    """
    if not (-90 <= lat <= 90):
        msg = f"latitude must be between -90 and 90, got {lat}"
        raise ValueError(msg)
    if not (-180 <= lng <= 180):
        msg = f"longitude must be between -180 and 180, got {lng}"
        raise ValueError(msg)


def cell_for(lat: float, lng: float) -> str:
    """Return the resolution-8 H3 cell containing a point.

    Args:
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.

    Returns:
        H3 cell id as a 15-character hex string.

    Raises:
        ValueError: If the coordinates are out of range.
    """
    validate_coordinates(lat, lng)
    return h3.latlng_to_cell(lat, lng, H3_RESOLUTION)
