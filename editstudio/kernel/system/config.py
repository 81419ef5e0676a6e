import os
from editstudio.core.types import AppConfig
from editstudio.domain.models import CropConfig

# User dir env (cache and default export location)
BASE_USER_DIR = os.path.abspath(os.getenv("EDITSTUDIO_USER_DIR", "user"))

APP_CONFIG = AppConfig(
    cache_dir=os.path.join(BASE_USER_DIR, "cache"),
    default_export_dir=os.path.join(BASE_USER_DIR, "export"),
    model_id=os.getenv("EDITSTUDIO_MODEL_ID", "gemini-2.5-flash-image"),
    perf_log_enabled=os.getenv("EDITSTUDIO_PERF_LOG", "0") == "1",
)

# Crop widget geometry and colours used by every new editing session
DEFAULT_CROP_CONFIG = CropConfig(
    canvas_size=500,
    mask_size=300,
    output_size=1024,
    max_zoom=4.0,
    max_scale_ceiling=None,
    export_background="#ffffff",
    preview_background="#0f172a",
    dim_alpha=0.7,
    border_color="#f97316",
    border_width=2,
    show_thirds=False,
)
