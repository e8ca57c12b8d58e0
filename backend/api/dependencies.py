"""Request dependencies shared by the API routers."""

from fastapi import Header, HTTPException


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> int:
    """Return the caller id verified by the upstream auth layer.

    Authentication happens in front of this service; it forwards the
    verified identity in the ``X-User-Id`` header.
    """
    if x_user_id is None or not x_user_id.strip().isdigit():
        raise HTTPException(status_code=401, detail="Authentication required")
    return int(x_user_id)


def parse_deck_ids(deck_ids: str | None) -> set[int] | None:
    """Parse a comma-separated ``deckIds`` query value.

    Returns None when the parameter is absent, meaning "all decks".
    """
    if deck_ids is None:
        return None
    parts = [part.strip() for part in deck_ids.split(",") if part.strip()]
    if not parts:
        return None
    try:
        return {int(part) for part in parts}
    except ValueError:
        raise HTTPException(status_code=400, detail="deckIds must be comma-separated integers") from None
