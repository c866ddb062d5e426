# sitephoto/orchestrators/__init__.py
from .photo_sorter import PhotoSorter, SortResult, TagResult

__all__ = ["PhotoSorter", "SortResult", "TagResult"]
