import sys
import numpy as np
from PyQt6.QtGui import QImage
from editstudio.kernel.image.logic import float_to_uint8


class ImageConverter:
    """
    Handles conversion between NumPy preview buffers and PyQt6 image types.
    """

    @staticmethod
    def to_qimage(buffer: np.ndarray) -> QImage:
        """
        Converts a float32 or uint8 RGB buffer to a QImage that owns its memory.
        """
        u8_buffer = float_to_uint8(buffer) if buffer.dtype != np.uint8 else buffer
        h, w = u8_buffer.shape[:2]

        # Windows GDI expects 4-byte aligned scanlines; RGB888 skews when the
        # width is not a multiple of 4, so go through RGB32 there.
        if sys.platform == "win32":
            bgra = np.empty((h, w, 4), dtype=np.uint8)
            bgra[..., 0:3] = u8_buffer[..., 2::-1]
            bgra[..., 3] = 255
            qimg = QImage(bgra.data, w, h, w * 4, QImage.Format.Format_RGB32)
            return qimg.copy()

        if not u8_buffer.flags["C_CONTIGUOUS"]:
            u8_buffer = np.ascontiguousarray(u8_buffer)

        qimg = QImage(u8_buffer.data, w, h, w * 3, QImage.Format.Format_RGB888)

        # QImage from data does NOT own the memory
        return qimg.copy()
