"""Constants shared across apps."""

# Router lookup pattern: non-UUID path segments 404 before reaching a view.
UUID_LOOKUP_REGEX = (
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
