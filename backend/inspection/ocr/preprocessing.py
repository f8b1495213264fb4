from __future__ import annotations

import cv2
import numpy as np


UPSCALE_TARGET_HEIGHT = 1500
DOWNSCALE_MAX_HEIGHT = 3000


def ensure_bgr(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image


def fit_height(image: np.ndarray) -> np.ndarray:
    height = image.shape[0]
    if height < UPSCALE_TARGET_HEIGHT:
        scale = UPSCALE_TARGET_HEIGHT / height
        return cv2.resize(image, None, fx=scale, fy=scale, interpolation=cv2.INTER_CUBIC)
    if height > DOWNSCALE_MAX_HEIGHT:
        scale = DOWNSCALE_MAX_HEIGHT / height
        return cv2.resize(image, None, fx=scale, fy=scale, interpolation=cv2.INTER_AREA)
    return image


def preprocess_sheet_image(image: np.ndarray) -> np.ndarray:
    """Prepare a phone photo of an inspection sheet for OCR.

    Handwritten cells are small and photos are often unevenly lit, so the
    image is resized into a working height band, denoised, sharpened and
    given CLAHE on the luminance channel.
    """
    image = fit_height(ensure_bgr(image))
    image = cv2.fastNlMeansDenoisingColored(image, h=6, hColor=6)

    kernel = np.array([[-1, -1, -1], [-1, 9, -1], [-1, -1, -1]], dtype=np.float32)
    image = cv2.filter2D(image, -1, kernel)

    lab = cv2.cvtColor(image, cv2.COLOR_BGR2LAB)
    l_channel, a_channel, b_channel = cv2.split(lab)
    clahe = cv2.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8))
    l_channel = clahe.apply(l_channel)
    return cv2.cvtColor(cv2.merge([l_channel, a_channel, b_channel]), cv2.COLOR_LAB2BGR)
