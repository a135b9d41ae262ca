from fastapi import Response

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "Surrogate-Control": "no-store",
}


def no_store(response: Response) -> None:
    """Recycle-bin and history responses must never be served from a cache."""
    response.headers.update(NO_STORE_HEADERS)
