class InvalidRequest(ValueError):
    """Raised for caller programming errors.

    Out-of-bounds positions, swaps between non-adjacent cells and lookups of
    unknown level ids end up here. A swap that simply produces no match is not
    an error and never raises.
    """
