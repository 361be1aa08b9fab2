from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Union, Iterator
from io import BytesIO
import base64

from PIL import Image as PILImage

from ..models.bitmap import Bitmap
from ..models.image import Image
from ..repositories.image_repository import ImageRepository


class ImageService:
    """I/O helpers.  No recolor logic here."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def create_image(self, bitmap: Bitmap, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(bitmap, path)

    def load(self, path: str | Path) -> Image:
        """Load a single image from disk into an Image object."""
        return self.image_repository.load(path)

    def stream_gallery(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Image]:
        """
        Yield images lazily instead of returning a gigantic list.
        """
        return self.image_repository.iter_dir(folder,
                                              recursive=recursive,
                                              exts=exts)

    def apply_pipeline_modification(self, image: Image, new_bitmap: Bitmap) -> None:
        """
        Apply a pipeline modification while preserving original for comparison.
        """
        self.image_repository.update_bitmap_preserve_original(image, new_bitmap)

    def save(self, image: Image) -> None:
        """
        Business-level method to save the image to its path.
        """
        self.image_repository.save(image)

    def to_pil_image(self, img: Image) -> PILImage.Image:
        return PILImage.fromarray(img.bitmap.to_array())

    def to_png_base64(self, img: Image) -> str:
        """Encode as a PNG data URL for JSON responses."""
        buffer = BytesIO()
        self.to_pil_image(img).save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
        return f"data:image/png;base64,{encoded}"

    def save_scratch_copy(self, img: Image, path: Union[str, Path]) -> Path:
        """Save *img* under *path* without touching img.path."""
        path = Path(path)
        self.image_repository.save(self.create_image(img.bitmap, path))
        return path

