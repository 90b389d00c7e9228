from .codec import encode, decode, raw_bytes, SUPPORTED_FORMATS
from .ops import draw_circle, scale, crop, colored
from .storage import storage_path, write_atomic, save_to_documents
from .assets import bundled_assets, load_bundled_image, DEFAULT_PHOTO
