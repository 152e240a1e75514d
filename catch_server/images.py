"""Random player images from public/images/<QB|Receiver>/."""

from catch_server import config
from catch_server.errors import InvalidInputError, ResourceNotFoundError
from catch_server.selection import uniform

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}


def folder_name(image_type):
    """'receiver' (any case) → Receiver; anything else → QB."""
    return "Receiver" if str(image_type or "QB").strip().lower() == "receiver" else "QB"


def list_images(image_type, images_dir=None):
    folder = folder_name(image_type)
    path = (images_dir or config.IMAGES_DIR) / folder
    if not path.is_dir():
        raise ResourceNotFoundError(f"Image folder not found: {folder}")
    files = sorted(
        p.name for p in path.iterdir()
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
    )
    if not files:
        raise ResourceNotFoundError("No images found", details=folder)
    return folder, files


def random_image_url(image_type, images_dir=None, rng=None):
    folder, files = list_images(image_type, images_dir)
    return f"/images/{folder}/{uniform(files, rng)}"


def parse_batch_size(raw):
    """Query-string n → int in [1, IMAGE_BATCH_MAX]; missing → IMAGE_BATCH_DEFAULT."""
    if raw is None or str(raw).strip() == "":
        return config.IMAGE_BATCH_DEFAULT
    try:
        n = int(str(raw).strip())
    except ValueError:
        raise InvalidInputError("n must be an integer", details=f"got {raw!r}")
    return max(1, min(n, config.IMAGE_BATCH_MAX))


def random_image_urls(image_type, n, images_dir=None, rng=None):
    """n independent picks (repeats allowed) for the casino spin reel."""
    folder, files = list_images(image_type, images_dir)
    return [f"/images/{folder}/{uniform(files, rng)}" for _ in range(n)]
