"""
Image preprocessing ahead of OCR.

Recipes: grayscale, histogram normalization, contrast/brightness, sharpening, median
denoise, upscaling and optional binarization, applied with Pillow. The ``auto`` tier
measures resolution and contrast first and picks a recipe from them.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, replace

from PIL import Image, ImageEnhance, ImageFilter, ImageOps, ImageStat

from doctrans.models import OCRQualityLevel


@dataclass(frozen=True)
class PreprocessingOptions:
    """Image enhancement recipe."""

    grayscale: bool = True
    contrast: float = 1.3
    brightness: float = 0.1
    sharpen: float = 1.5
    denoise: int = 0
    normalize: bool = True
    scale: float = 1.0
    binarize: bool = False
    binarize_threshold: int = 128


DEFAULT_PREPROCESSING = PreprocessingOptions()

LIGHT_PREPROCESSING = PreprocessingOptions(
    grayscale=False,
    contrast=1.1,
    brightness=0.0,
    sharpen=0.5,
    denoise=0,
    normalize=False,
)

AGGRESSIVE_PREPROCESSING = PreprocessingOptions(
    contrast=1.5,
    brightness=0.15,
    sharpen=2.0,
    denoise=3,
    scale=2.0,
)

# Either side below this is treated as low resolution
MIN_RESOLUTION = 1000
# Mean per-channel standard deviation below this is treated as low contrast
MIN_CONTRAST_STDDEV = 50.0


@dataclass(frozen=True)
class ImageAnalysis:
    """Measurements used to pick a recipe for ``auto`` quality."""

    width: int
    height: int
    mean_stddev: float
    is_grayscale: bool
    has_alpha: bool
    format: str

    @property
    def is_low_resolution(self) -> bool:
        return self.width < MIN_RESOLUTION or self.height < MIN_RESOLUTION

    @property
    def is_low_contrast(self) -> bool:
        return self.mean_stddev < MIN_CONTRAST_STDDEV


def analyze_image(image_bytes: bytes) -> ImageAnalysis:
    """
    Measure resolution and contrast of an encoded image.

    Raises:
        PIL.UnidentifiedImageError / OSError: If the bytes are not a readable image.
    """
    with Image.open(io.BytesIO(image_bytes)) as image:
        image_format = (image.format or "unknown").lower()
        if image.mode not in ("1", "L", "LA", "RGB", "RGBA"):
            image = image.convert("RGBA" if "transparency" in image.info else "RGB")
        stddevs = ImageStat.Stat(image).stddev
        return ImageAnalysis(
            width=image.width,
            height=image.height,
            mean_stddev=sum(stddevs) / len(stddevs) if stddevs else 0.0,
            is_grayscale=image.mode in ("1", "L"),
            has_alpha=image.mode in ("LA", "RGBA"),
            format=image_format,
        )


def suggest_preprocessing(analysis: ImageAnalysis) -> PreprocessingOptions:
    """Pick a recipe: aggressive for small and flat images, light for clean ones."""
    if analysis.is_low_resolution and analysis.is_low_contrast:
        return AGGRESSIVE_PREPROCESSING
    if analysis.is_low_resolution:
        return replace(DEFAULT_PREPROCESSING, scale=2.0)
    if analysis.is_low_contrast:
        return replace(DEFAULT_PREPROCESSING, contrast=1.5, normalize=True)
    return LIGHT_PREPROCESSING


def options_for_quality(
    quality: OCRQualityLevel | str | None, image_bytes: bytes | None = None
) -> PreprocessingOptions:
    """
    Recipe for a quality tier.

    ``low`` gets the light recipe and ``high`` the default one. ``auto`` analyzes
    ``image_bytes`` and falls back to the default recipe without them.
    """
    quality = OCRQualityLevel.parse(quality)
    if quality == OCRQualityLevel.LOW:
        return LIGHT_PREPROCESSING
    if quality == OCRQualityLevel.AUTO and image_bytes is not None:
        return suggest_preprocessing(analyze_image(image_bytes))
    return DEFAULT_PREPROCESSING


def preprocess_image(image_bytes: bytes, options: PreprocessingOptions) -> bytes:
    """
    Apply a preprocessing recipe and return PNG bytes.

    Raises:
        PIL.UnidentifiedImageError / OSError: If the bytes are not a readable image.
    """
    with Image.open(io.BytesIO(image_bytes)) as source:
        image = source.convert("RGB")

    if options.scale > 1:
        width, height = image.size
        image = image.resize(
            (round(width * options.scale), round(height * options.scale)),
            Image.Resampling.LANCZOS,
        )

    if options.grayscale:
        image = ImageOps.grayscale(image)

    if options.normalize:
        image = ImageOps.autocontrast(image, cutoff=1)

    if options.contrast != 1:
        image = ImageEnhance.Contrast(image).enhance(options.contrast)
    if options.brightness:
        image = ImageEnhance.Brightness(image).enhance(1 + options.brightness)

    if options.sharpen > 0:
        image = image.filter(
            ImageFilter.UnsharpMask(radius=options.sharpen, percent=150, threshold=3)
        )

    if options.denoise > 0:
        # MedianFilter needs an odd window
        size = options.denoise if options.denoise % 2 else options.denoise + 1
        image = image.filter(ImageFilter.MedianFilter(size=size))

    if options.binarize:
        threshold = options.binarize_threshold
        image = image.convert("L").point(lambda p: 255 if p > threshold else 0)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG", compress_level=6)
    return buffer.getvalue()
