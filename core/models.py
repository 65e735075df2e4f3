from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogEntry:
    """A movie as returned by the external catalog. Immutable value object.

    catalog_id is the OMDb/IMDb identifier, e.g. "tt1375666".
    """

    title: str
    year: str = ""
    director: str = ""
    poster: str = ""
    catalog_id: str = ""
