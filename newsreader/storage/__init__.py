from .favourites import FavouritesStore

__all__ = ["FavouritesStore"]
