from photo_catalog.models.photo import Photo, photo_table, row_to_photo

__all__ = [
    "Photo",
    "photo_table",
    "row_to_photo",
]
